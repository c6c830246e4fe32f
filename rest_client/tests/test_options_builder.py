"""
Tests for building request options from a request and settings.
"""

import asyncio
from pathlib import Path

import httpx
import pytest
from hypothesis import given, strategies as st, settings

from rest_client.config import CertificateConfig, RestClientSettings
from rest_client.exceptions import BodyStreamError
from rest_client.schemas.http import HttpRequest
from rest_client.services.auth import BasicAuthStrategy, DigestAuthStrategy
from rest_client.services.cookies import ensure_cookie_file
from rest_client.services.options_builder import (
    RequestOptions,
    apply_timeout,
    merge_default_headers,
    normalize_body,
    prepare_options,
)
from rest_client.streams import ByteStream


def build(request: HttpRequest, settings: RestClientSettings | None = None, **kwargs) -> RequestOptions:
    return asyncio.run(prepare_options(request, settings or RestClientSettings(), **kwargs))


header_name_strategy = st.sampled_from(
    ["Content-Type", "Accept", "User-Agent", "X-Trace", "Cache-Control"]
)

case_strategy = st.sampled_from([str.lower, str.upper, lambda s: s])


class TestBodyNormalization:

    def test_string_body_passes_through(self):
        assert asyncio.run(normalize_body("hello")) == "hello"
        assert asyncio.run(normalize_body(None)) is None

    def test_stream_body_is_drained(self):
        stream = ByteStream([b"ab", "cd", b"ef"])
        assert asyncio.run(normalize_body(stream)) == b"abcdef"
        assert stream.consumed

    def test_async_stream_body_is_drained(self):
        async def chunks():
            yield b"one "
            yield b"two"

        assert asyncio.run(normalize_body(ByteStream(chunks()))) == b"one two"

    def test_stream_failure_propagates(self):
        async def broken():
            yield b"partial"
            raise OSError("disk gone")

        with pytest.raises(BodyStreamError):
            asyncio.run(normalize_body(ByteStream(broken())))


class TestBaseOptions:

    def test_method_headers_and_redirects(self):
        request = HttpRequest(method="POST", url="https://example.com", headers={"X-A": "1"}, body="x")
        options = build(request, RestClientSettings(follow_redirect=False, default_headers={}))

        assert options.method == "POST"
        assert options.headers == {"X-A": "1"}
        assert options.body == "x"
        assert options.follow_redirects is False
        assert options.verify is False

    def test_cookie_jar_only_when_remembering_cookies(self, tmp_path: Path):
        cookie_file = ensure_cookie_file(tmp_path / "cookie.txt")
        request = HttpRequest(method="GET", url="https://example.com")

        remembered = build(request, RestClientSettings(), cookie_file=cookie_file)
        forgotten = build(
            request,
            RestClientSettings(remember_cookies_for_subsequent_requests=False),
            cookie_file=cookie_file,
        )

        assert remembered.cookie_jar is not None
        assert forgotten.cookie_jar is None

    def test_missing_headers_are_created_on_both(self):
        request = HttpRequest(method="GET", url="https://example.com", headers=None)
        options = build(request, RestClientSettings(default_headers={}))

        assert options.headers == {}
        assert request.headers is options.headers


class TestTimeout:

    @pytest.mark.parametrize("configured,expected", [(0, None), (1500, 1.5), (1, 0.001)])
    def test_only_positive_timeouts_apply(self, configured: int, expected: float | None):
        options = RequestOptions(method="GET", headers={})
        apply_timeout(options, configured)
        assert options.timeout == expected

    def test_negative_setting_clamps_to_no_timeout(self):
        settings = RestClientSettings(timeout_in_milliseconds=-5)
        assert settings.timeout_in_milliseconds == 0
        options = build(HttpRequest(method="GET", url="https://example.com"), settings)
        assert options.timeout is None


class TestAuthentication:

    def test_basic_header_rewritten(self):
        request = HttpRequest(
            method="GET", url="https://example.com",
            headers={"Authorization": "Basic user pass"}
        )
        options = build(request)

        assert isinstance(options.auth, BasicAuthStrategy)
        assert options.headers["Authorization"] == "Basic dXNlcjpwYXNz"

    def test_digest_installs_strategy(self):
        request = HttpRequest(
            method="GET", url="https://example.com",
            headers={"Authorization": "Digest user pass"}
        )
        options = build(request)

        assert isinstance(options.auth, DigestAuthStrategy)
        assert options.headers["Authorization"] == "Digest user pass"


class TestCertificateAndProxy:

    def test_certificate_attached_with_warnings(self, tmp_path: Path):
        (tmp_path / "client.crt").write_bytes(b"CERT")
        settings = RestClientSettings(
            workspace_root=str(tmp_path),
            certificates={"example.com": CertificateConfig(cert="client.crt", key="missing.key")},
        )
        options = build(HttpRequest(method="GET", url="https://example.com/"), settings)

        assert options.certificate is not None
        assert options.certificate.cert == b"CERT"
        assert len(options.warnings) == 1

    def test_proxy_attached_and_strict_ssl_applies(self):
        settings = RestClientSettings(proxy="http://proxy:8080", proxy_strict_ssl=True)
        options = build(HttpRequest(method="GET", url="https://example.com/"), settings)

        assert isinstance(options.proxy, httpx.Proxy)
        assert options.verify is True

    def test_excluded_host_has_no_proxy(self):
        settings = RestClientSettings(
            proxy="http://proxy:8080", exclude_hosts_for_proxy=["example.com"]
        )
        options = build(HttpRequest(method="GET", url="https://example.com/"), settings)
        assert options.proxy is None
        assert options.verify is False


class TestDefaultHeaderMerge:

    @given(name=header_name_strategy, case=case_strategy, value=st.text(min_size=1, max_size=10))
    @settings(max_examples=100)
    def test_existing_header_is_never_overwritten(self, name: str, case, value: str):
        """
        Property: A header already on the request survives a configured default
        of the same name, whatever the casing.
        """
        user_name = case(name)
        headers = {user_name: value}

        merge_default_headers(headers, {name: "default"}, "https://example.com")

        assert headers == {user_name: value}

    def test_missing_defaults_are_added(self):
        headers = {"content-type": "application/json"}
        merge_default_headers(
            headers,
            {"Content-Type": "text/plain", "User-Agent": "rest-client", "X-Empty": ""},
            "https://example.com",
        )
        assert headers == {"content-type": "application/json", "User-Agent": "rest-client"}

    def test_host_default_only_for_bare_paths(self):
        absolute = {}
        merge_default_headers(absolute, {"Host": "api.local"}, "https://example.com/x")
        bare = {}
        merge_default_headers(bare, {"Host": "api.local"}, "/x")

        assert absolute == {}
        assert bare == {"Host": "api.local"}


class TestCompressionNegotiation:

    @pytest.mark.parametrize("accept_encoding,expected", [
        ("gzip, deflate", True),
        ("br", False),
        (None, False),
    ])
    def test_gzip_enables_decompression(self, accept_encoding: str | None, expected: bool):
        headers = {"accept-encoding": accept_encoding} if accept_encoding else {}
        options = build(
            HttpRequest(method="GET", url="https://example.com", headers=headers),
            RestClientSettings(default_headers={}),
        )
        assert options.decompress is expected
