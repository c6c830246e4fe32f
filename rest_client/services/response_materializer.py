"""
Response materialization.

Converts what httpx delivered (status line, raw header pairs, body bytes and
timing marks) into an immutable ``HttpResponse``: the body is decoded using
the charset declared in Content-Type, header names get their wire casing
back, and the effectively sent request is echoed alongside.
"""

import codecs
import logging
import re
from collections.abc import Iterable
from email.message import Message
from email.utils import collapse_rfc2231_value

import httpx

from ..schemas.http import HttpRequest, HttpResponse, HttpResponseTimingPhases
from ..streams import ByteStream
from .headers import capitalize_header_names, restore_header_case
from .options_builder import RequestOptions


logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"

_ESCAPED_UNICODE = re.compile(r"\\u([0-9a-fA-F]{4})")
_SURROGATE = re.compile("[\ud800-\udfff]")


def parse_charset(content_type: str | None) -> str | None:
    """
    Extract the charset parameter of a Content-Type value.

    Example:
        >>> parse_charset("text/html; charset=ISO-8859-1")
        'ISO-8859-1'
    """
    if not content_type:
        return None
    message = Message()
    message["content-type"] = content_type
    charset = message.get_param("charset")
    if not charset:
        return None
    return collapse_rfc2231_value(charset).strip() or None


def _is_utf8(charset: str) -> bool:
    try:
        return codecs.lookup(charset).name == "utf-8"
    except LookupError:
        return False


def decode_body(buffer: bytes, charset: str | None) -> str:
    """
    Decode a body buffer, falling back to UTF-8 when the charset fails.

    Unknown charset names and undecodable bytes never raise; the UTF-8
    fallback replaces invalid sequences.
    """
    charset = charset or DEFAULT_CHARSET
    try:
        return buffer.decode(charset)
    except (LookupError, UnicodeDecodeError) as e:
        if not _is_utf8(charset):
            logger.debug("Decoding body as %s failed, falling back to utf-8: %s", charset, e)
        return buffer.decode(DEFAULT_CHARSET, errors="replace")


def decode_escaped_unicode_characters(body: str) -> str:
    r"""Replace every ``\uXXXX`` escape sequence with the character it names."""
    decoded = _ESCAPED_UNICODE.sub(lambda m: chr(int(m.group(1), 16)), body)
    if _SURROGATE.search(decoded):
        # Join escaped surrogate pairs into real characters
        decoded = decoded.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
    return decoded


def compute_headers_size(raw_headers: Iterable[tuple[bytes, bytes]]) -> int:
    """
    Approximate the wire size of a header block.

    Sums name and value lengths and adds one byte per header for the
    separator overhead.
    """
    pairs = list(raw_headers)
    return sum(len(name) + len(value) for name, value in pairs) + len(pairs)


def response_headers(response: httpx.Response) -> dict[str, str]:
    """Response headers keyed with the casing the server sent."""
    raw_names = [name.decode("latin-1") for name, _ in response.headers.raw]
    merged = {name: response.headers[name] for name in response.headers.keys()}
    return restore_header_case(merged, raw_names)


def raw_response_headers(response: httpx.Response) -> list[tuple[str, str]]:
    return [
        (name.decode("latin-1"), value.decode("latin-1"))
        for name, value in response.headers.raw
    ]


def sent_headers(request: httpx.Request) -> dict[str, str]:
    """Headers of the request actually put on the wire, names capitalized."""
    headers: dict[str, str] = {}
    for name, value in request.headers.raw:
        headers[name.decode("latin-1")] = value.decode("latin-1")
    return capitalize_header_names(headers)


def echo_request(
    original: HttpRequest,
    options: RequestOptions,
    request_url: str,
    sent: httpx.Request | None
) -> HttpRequest:
    """Describe the effective request, re-wrapping byte bodies as fresh streams."""
    body = options.body
    if isinstance(body, bytes):
        body = ByteStream.from_bytes(body)

    headers = sent_headers(sent) if sent is not None else capitalize_header_names(options.headers)

    return HttpRequest(
        method=options.method,
        url=request_url,
        headers=headers,
        body=body,
        raw_body=original.raw_body,
        request_variable_cache_key=original.request_variable_cache_key,
    )


def materialize_response(
    response: httpx.Response,
    body_buffer: bytes,
    original: HttpRequest,
    options: RequestOptions,
    request_url: str,
    timing_phases: HttpResponseTimingPhases,
    decode_unicode: bool = False
) -> HttpResponse:
    """
    Assemble the HttpResponse for a completed exchange.

    Args:
        response: The final httpx response (after redirects/auth retries)
        body_buffer: Body bytes as read from the transport
        original: The request as authored by the user
        options: Options the request was sent with
        request_url: The encoded URL submitted to the transport
        timing_phases: Phase durations measured during the exchange
        decode_unicode: Whether to unescape ``\\uXXXX`` sequences in the body

    Returns:
        The immutable HttpResponse
    """
    body = decode_body(body_buffer, parse_charset(response.headers.get("content-type")))
    if decode_unicode:
        body = decode_escaped_unicode_characters(body)

    http_version = response.http_version
    if http_version.upper().startswith("HTTP/"):
        http_version = http_version[5:]

    return HttpResponse(
        status_code=response.status_code,
        status_message=response.reason_phrase,
        http_version=http_version,
        headers=response_headers(response),
        body=body,
        body_size_in_bytes=response.num_bytes_downloaded,
        headers_size_in_bytes=compute_headers_size(response.headers.raw),
        body_buffer=body_buffer,
        timing_phases=timing_phases,
        request=echo_request(original, options, request_url, response.request),
        raw_headers=raw_response_headers(response),
    )
