"""
Consume-once byte streams used for request bodies.

A ``ByteStream`` wraps bytes, an iterable or an async iterable of chunks and
may be drained exactly once. Re-reading a buffer requires wrapping it again
with ``ByteStream.from_bytes``.
"""

from collections.abc import AsyncIterable, AsyncIterator, Iterable

from .exceptions import StreamConsumedError


Chunk = bytes | str


def _to_bytes(chunk: Chunk) -> bytes:
    return chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)


class ByteStream:
    """A sequence of byte chunks that can be consumed a single time."""

    def __init__(self, source: bytes | Iterable[Chunk] | AsyncIterable[Chunk]):
        if isinstance(source, (bytes, bytearray)):
            source = [bytes(source)]
        self._source = source
        self._consumed = False

    @classmethod
    def from_bytes(cls, data: bytes) -> "ByteStream":
        return cls(data)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise StreamConsumedError("Byte stream has already been consumed")
        self._consumed = True
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        if isinstance(self._source, AsyncIterable):
            async for chunk in self._source:
                yield _to_bytes(chunk)
        else:
            for chunk in self._source:
                yield _to_bytes(chunk)

    async def read(self) -> bytes:
        """Drain the stream into a single buffer."""
        return b"".join([chunk async for chunk in self])

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else "pending"
        return f"<ByteStream {state}>"
