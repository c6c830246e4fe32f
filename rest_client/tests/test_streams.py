"""
Tests for consume-once byte streams.
"""

import asyncio

import pytest

from rest_client.exceptions import StreamConsumedError
from rest_client.streams import ByteStream


class TestByteStream:

    def test_bytes_source(self):
        assert asyncio.run(ByteStream(b"payload").read()) == b"payload"

    def test_mixed_chunks_are_encoded(self):
        assert asyncio.run(ByteStream(["é", b"!"]).read()) == "é!".encode("utf-8")

    def test_second_read_raises(self):
        stream = ByteStream.from_bytes(b"once")
        assert not stream.consumed

        asyncio.run(stream.read())

        assert stream.consumed
        with pytest.raises(StreamConsumedError):
            asyncio.run(stream.read())

    def test_rewrapping_a_buffer_gives_a_fresh_stream(self):
        first = ByteStream.from_bytes(b"data")
        buffer = asyncio.run(first.read())
        assert asyncio.run(ByteStream.from_bytes(buffer).read()) == b"data"
