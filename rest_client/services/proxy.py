"""
Proxy selection for outgoing requests.

A configured proxy is used unless the request host is listed in the exclusion
list. Entries are either a bare hostname or ``hostname:port``:

- request without explicit port: only a bare entry equal to the hostname matches
- request with explicit port: a bare entry equal to the hostname matches any
  port, a ``hostname:port`` entry matches that port only
"""

import ssl
from urllib.parse import urlsplit

import httpx


SUPPORTED_PROXY_SCHEMES = ("http", "https")


def _request_host_and_port(url: str) -> tuple[str | None, str | None]:
    parts = urlsplit(url)
    try:
        port = parts.port
    except ValueError:
        port = None
    return parts.hostname, (str(port) if port is not None else None)


def should_bypass_proxy(url: str, exclude_hosts: list[str] | None) -> bool:
    """Return True when the request host is excluded from proxying."""
    if not exclude_hosts:
        return False

    hostname, port = _request_host_and_port(url)
    if not hostname:
        return False

    for entry in {host.lower() for host in exclude_hosts}:
        entry_host, _, entry_port = entry.partition(":")
        if port is None:
            if not entry_port and entry_host == hostname:
                return True
        elif entry_host == hostname and (not entry_port or entry_port == port):
            return True

    return False


def create_proxy_ssl_context(strict_ssl: bool) -> ssl.SSLContext:
    context = ssl.create_default_context()
    if not strict_ssl:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def resolve_proxy(
    url: str,
    proxy_url: str | None,
    strict_ssl: bool = False,
    exclude_hosts: list[str] | None = None
) -> httpx.Proxy | None:
    """
    Build the proxy to route ``url`` through, or None for a direct connection.

    Proxy URLs with a scheme other than http/https are ignored.
    """
    if not proxy_url or should_bypass_proxy(url, exclude_hosts):
        return None

    if urlsplit(proxy_url).scheme.lower() not in SUPPORTED_PROXY_SCHEMES:
        return None

    return httpx.Proxy(proxy_url, ssl_context=create_proxy_ssl_context(strict_ssl))
