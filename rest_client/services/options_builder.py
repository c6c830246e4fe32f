"""
Request options builder.

Turns a user-authored ``HttpRequest`` plus the current settings into the
``RequestOptions`` the executor hands to httpx. Each step is a separate
function so it can be exercised on its own; ``prepare_options`` runs them in
order:

1. body normalization (drain streams into bytes)
2. base options (headers, method, body, redirects, cookie jar)
3. timeout
4. header guard
5. authentication rewrite
6. client certificate
7. proxy
8. default header merge
9. compression negotiation
"""

from dataclasses import dataclass, field
from http.cookiejar import CookieJar
from pathlib import Path

import httpx

from ..config import RestClientSettings
from ..exceptions import BodyStreamError, StreamConsumedError
from ..schemas.http import HostCertificate, HttpRequest
from ..streams import ByteStream
from .auth import AuthStrategy, NoAuth, select_auth_strategy
from .certificates import get_request_certificate
from .cookies import load_cookie_jar
from .headers import get_header, has_header
from .proxy import resolve_proxy


@dataclass
class RequestOptions:
    """Fully resolved execution plan for one request. Built fresh per request."""
    method: str
    headers: dict[str, str]
    body: str | bytes | None = None
    follow_redirects: bool = True
    cookie_jar: CookieJar | None = None
    certificate: HostCertificate | None = None
    proxy: httpx.Proxy | None = None
    timeout: float | None = None
    decompress: bool = False
    auth: AuthStrategy = field(default_factory=NoAuth)
    verify: bool = False
    warnings: list[str] = field(default_factory=list)


async def normalize_body(body: str | ByteStream | None) -> str | bytes | None:
    """Drain a stream body into a buffer; strings pass through unchanged."""
    if body is None or isinstance(body, str):
        return body

    try:
        return await body.read()
    except StreamConsumedError:
        raise
    except Exception as e:
        raise BodyStreamError(f"Failed to read request body: {e}") from e


def build_base_options(
    request: HttpRequest,
    body: str | bytes | None,
    settings: RestClientSettings,
    cookie_file: Path | None = None
) -> RequestOptions:
    cookie_jar = None
    if settings.remember_cookies_for_subsequent_requests and cookie_file is not None:
        cookie_jar = load_cookie_jar(cookie_file)

    return RequestOptions(
        method=request.method,
        headers=request.headers,
        body=body,
        follow_redirects=settings.follow_redirect,
        cookie_jar=cookie_jar,
    )


def apply_timeout(options: RequestOptions, timeout_in_milliseconds: int) -> None:
    if timeout_in_milliseconds > 0:
        options.timeout = timeout_in_milliseconds / 1000


def ensure_headers(options: RequestOptions, request: HttpRequest) -> None:
    """Give options and request a shared headers dict when none was authored."""
    if options.headers is None:
        options.headers = request.headers = {}


def apply_authentication(options: RequestOptions) -> None:
    options.auth = select_auth_strategy(options.headers)
    options.auth.apply(options.headers)


def attach_certificate(
    options: RequestOptions,
    url: str,
    settings: RestClientSettings,
    source_file: Path | None = None
) -> None:
    workspace_root = Path(settings.workspace_root) if settings.workspace_root else None
    options.certificate = get_request_certificate(
        url, settings.certificates, workspace_root, source_file, options.warnings
    )


def attach_proxy(options: RequestOptions, url: str, settings: RestClientSettings) -> None:
    options.proxy = resolve_proxy(
        url, settings.proxy, settings.proxy_strict_ssl, settings.exclude_hosts_for_proxy
    )
    if options.proxy is not None:
        options.verify = settings.proxy_strict_ssl


def merge_default_headers(
    headers: dict[str, str],
    default_headers: dict[str, str],
    url: str
) -> None:
    """
    Add configured default headers the request does not already carry.

    A default Host header only applies to bare-path URLs so it never
    overrides the host of an absolute URL.
    """
    for name, value in default_headers.items():
        if has_header(headers, name):
            continue
        if name.lower() == "host" and not url.startswith("/"):
            continue
        if value:
            headers[name] = value


def negotiate_compression(options: RequestOptions) -> None:
    accept_encoding = get_header(options.headers, "Accept-Encoding")
    if accept_encoding and "gzip" in accept_encoding:
        options.decompress = True


async def prepare_options(
    request: HttpRequest,
    settings: RestClientSettings,
    cookie_file: Path | None = None,
    source_file: Path | None = None
) -> RequestOptions:
    """
    Build the execution plan for a request.

    Args:
        request: The request to send; its headers dict is shared with the options
        settings: Settings snapshot for this request
        cookie_file: Backing file for the cookie jar
        source_file: File that defined the request, for relative certificate paths

    Returns:
        The resolved RequestOptions

    Raises:
        BodyStreamError: If a stream body cannot be drained
    """
    body = await normalize_body(request.body)

    options = build_base_options(request, body, settings, cookie_file)
    apply_timeout(options, settings.timeout_in_milliseconds)
    ensure_headers(options, request)
    apply_authentication(options)
    attach_certificate(options, request.url, settings, source_file)
    attach_proxy(options, request.url, settings)
    merge_default_headers(options.headers, settings.default_headers, request.url)
    negotiate_compression(options)

    return options
