"""
HTTP execution service for sending user-authored requests.

``HttpClient.send`` prepares options from the current settings, submits the
request through httpx, records timing phases from httpcore trace events,
counts wire bytes and hands the result to the response materializer.
"""

import logging
import re
import ssl
import tempfile
import time
from pathlib import Path
from urllib.parse import quote

import httpx

from ..config import SettingsProvider
from ..exceptions import (
    ClientCertificateError,
    ConnectionFailedError,
    InvalidRequestHeaderError,
    InvalidRequestURLError,
    RequestExecutionError,
    RequestTimeoutError,
)
from ..schemas.http import HttpRequest, HttpResponse, HttpResponseTimingPhases
from .certificates import load_pfx
from .cookies import COOKIE_FILE_PATH, ensure_cookie_file, save_cookie_jar
from .options_builder import RequestOptions, prepare_options
from .response_materializer import materialize_response


logger = logging.getLogger(__name__)

# Characters left alone when encoding a URL; "%" only when it starts a valid escape
_UNSAFE_URL_CHARS = re.compile(
    r"%(?![0-9A-Fa-f]{2})|[^\x21\x23-\x3B\x3D\x3F-\x5F\x61-\x7A\x7C\x7E]"
)


def encode_url(url: str) -> str:
    """
    Percent-encode characters that are not allowed in a URL.

    Existing escape sequences are preserved, so encoding twice is harmless.

    Example:
        >>> encode_url("http://example.com/a b?q=%41&r=100%")
        'http://example.com/a%20b?q=%41&r=100%25'
    """
    return _UNSAFE_URL_CHARS.sub(
        lambda m: quote(m.group(0), safe="", errors="surrogatepass"), url
    )


class TimingRecorder:
    """
    Collects httpcore trace events and turns them into timing phases.

    httpcore reports connection and HTTP/1.1 or HTTP/2 events such as
    ``connection.connect_tcp.started`` or ``http11.receive_response_headers.complete``.
    Name resolution happens inside ``connect_tcp`` and is not reported on
    its own, so the dns phase stays at zero.
    """

    def __init__(self):
        self.started = time.perf_counter()
        self.finished: float | None = None
        self._first: dict[str, float] = {}
        self._last: dict[str, float] = {}

    def start(self) -> None:
        """Restart the clock; everything before this is setup, not the exchange."""
        self.started = time.perf_counter()
        self.finished = None
        self._first.clear()
        self._last.clear()

    async def trace(self, event_name: str, info: dict) -> None:
        now = time.perf_counter()
        # "http11.send_request_headers.started" -> "send_request_headers.started"
        prefix, _, event = event_name.partition(".")
        if prefix not in ("connection", "http11", "http2"):
            event = event_name
        self._first.setdefault(event, now)
        self._last[event] = now

    def finish(self) -> None:
        self.finished = time.perf_counter()

    def _span(self, start: float | None, end: float | None) -> float:
        if start is None or end is None:
            return 0.0
        return max(end - start, 0.0) * 1000

    def phases(self) -> HttpResponseTimingPhases:
        finished = self.finished if self.finished is not None else time.perf_counter()
        last = self._last

        connect_started = last.get("connect_tcp.started")
        connected = last.get("start_tls.complete") or last.get("connect_tcp.complete")
        send_started = last.get("send_request_headers.started")
        sent = last.get("send_request_body.complete") or last.get("send_request_headers.complete")
        headers_received = last.get("receive_response_headers.complete")
        body_received = last.get("receive_response_body.complete") or finished

        socket_assigned = self._first.get("connect_tcp.started") or self._first.get(
            "send_request_headers.started"
        )

        return HttpResponseTimingPhases(
            total=self._span(self.started, finished),
            wait=self._span(self.started, socket_assigned),
            dns=0.0,
            tcp=self._span(connect_started, connected),
            request=self._span(connected or send_started, sent),
            first_byte=self._span(sent, headers_received),
            download=self._span(headers_received, body_received),
        )


class HttpClient:
    """
    Sends HttpRequests and materializes HttpResponses.

    Usage:
        client = HttpClient(SettingsProvider.from_environment())
        response = await client.send(HttpRequest(method="GET", url="https://example.com"))

    Args:
        settings_provider: Source of settings, consulted on every send
        cookie_file: File backing the persistent cookie jar; created here once
        transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests
    """

    def __init__(
        self,
        settings_provider: SettingsProvider,
        cookie_file: Path = COOKIE_FILE_PATH,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        self._settings_provider = settings_provider
        self._cookie_file = ensure_cookie_file(cookie_file)
        self._transport = transport

    def _build_verify(self, options: RequestOptions) -> ssl.SSLContext | bool:
        certificate = options.certificate
        if certificate is None:
            return options.verify

        if certificate.cert_path is None and certificate.pfx is None:
            return options.verify

        context = ssl.create_default_context()
        if not options.verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        try:
            if certificate.cert_path is not None:
                context.load_cert_chain(
                    certfile=str(certificate.cert_path),
                    keyfile=str(certificate.key_path) if certificate.key_path else None,
                    password=certificate.passphrase,
                )
            else:
                self._load_pfx_chain(context, certificate.pfx, certificate.passphrase)
        except (ssl.SSLError, OSError, ValueError) as e:
            raise ClientCertificateError("Failed to load client certificate", str(e)) from e
        return context

    @staticmethod
    def _load_pfx_chain(context: ssl.SSLContext, pfx: bytes, passphrase: str | None) -> None:
        chain, key = load_pfx(pfx, passphrase)
        # load_cert_chain only reads files; the unpacked key lives just as long as this call
        with tempfile.TemporaryDirectory() as folder:
            cert_file = Path(folder) / "client.pem"
            key_file = Path(folder) / "client.key"
            cert_file.write_bytes(chain)
            key_file.write_bytes(key)
            key_file.chmod(0o600)
            context.load_cert_chain(certfile=str(cert_file), keyfile=str(key_file))

    def _client_kwargs(self, options: RequestOptions) -> dict:
        kwargs = {
            "verify": self._build_verify(options),
            "timeout": httpx.Timeout(options.timeout),
            "follow_redirects": options.follow_redirects,
            "cookies": options.cookie_jar,
            "trust_env": False,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        elif options.proxy is not None:
            kwargs["proxy"] = options.proxy
        return kwargs

    async def send(
        self,
        request: HttpRequest,
        source_file: Path | None = None,
        warnings: list[str] | None = None
    ) -> HttpResponse:
        """
        Execute a request and return the materialized response.

        Args:
            request: The request to send
            source_file: File that defined the request, for relative certificate paths
            warnings: List collecting non-fatal warnings (e.g. missing certificates)

        Returns:
            HttpResponse for the final exchange, whatever its status code

        Raises:
            BodyStreamError: If the request body stream cannot be drained
            RequestExecutionError: If the transport fails or a header cannot be encoded
        """
        settings = self._settings_provider.current()
        options = await prepare_options(
            request, settings, cookie_file=self._cookie_file, source_file=source_file
        )
        try:
            request_url = encode_url(request.url)
            recorder = TimingRecorder()

            try:
                async with httpx.AsyncClient(**self._client_kwargs(options)) as client:
                    if not options.decompress:
                        # Without decompression the body is returned as received,
                        # so compression is only advertised when the user asked for it
                        client.headers.pop("Accept-Encoding", None)

                    try:
                        outgoing = client.build_request(
                            options.method,
                            request_url,
                            headers=options.headers,
                            content=options.body,
                            extensions={"trace": recorder.trace},
                        )
                    except UnicodeEncodeError as e:
                        raise InvalidRequestHeaderError(
                            "Invalid request header",
                            f"Header names and values must be ASCII: {e}"
                        ) from e
                    recorder.start()
                    response = await client.send(
                        outgoing, auth=options.auth.transport_auth(), stream=True
                    )
                    try:
                        chunks = response.aiter_bytes() if options.decompress else response.aiter_raw()
                        body_buffer = b"".join([chunk async for chunk in chunks])
                    finally:
                        await response.aclose()
                    recorder.finish()
            except httpx.TimeoutException as e:
                raise RequestTimeoutError(
                    "Request timed out",
                    f"Request exceeded {settings.timeout_in_milliseconds} ms timeout"
                ) from e
            except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
                raise InvalidRequestURLError("Invalid URL", str(e)) from e
            except httpx.TransportError as e:
                raise ConnectionFailedError("Failed to connect to server", str(e)) from e
            except httpx.HTTPError as e:
                raise RequestExecutionError("HTTP error occurred", str(e)) from e

            if options.cookie_jar is not None:
                save_cookie_jar(options.cookie_jar)

            timing_phases = recorder.phases()
            logger.debug(
                "%s %s -> %s in %.1f ms",
                options.method, request_url, response.status_code, timing_phases.total
            )

            return materialize_response(
                response,
                body_buffer,
                request,
                options,
                request_url,
                timing_phases,
                decode_unicode=settings.decode_escaped_unicode_characters,
            )
        finally:
            if warnings is not None:
                warnings.extend(options.warnings)
