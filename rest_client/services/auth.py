"""
Authentication strategies selected from the request's Authorization header.

Users write credentials in clear text, e.g. ``Authorization: Basic user pass``.
The header is split on whitespace into scheme, user and password; everything
after the user is the password, re-joined with single spaces. The scheme picks
one strategy from a closed set:

- ``NoAuth``: header missing, unknown scheme, or no password given
- ``BasicAuthStrategy``: the header is rewritten to ``Basic base64(user:pass)``
- ``DigestAuthStrategy``: the header is left alone and httpx performs the
  challenge-response exchange (401 + ``WWW-Authenticate: Digest``, retry once)
"""

import base64
from collections.abc import MutableMapping

import httpx

from .headers import find_header_name


AUTHORIZATION = "Authorization"


class AuthStrategy:
    """Base class for authentication strategies."""
    scheme: str | None = None

    def apply(self, headers: MutableMapping[str, str]) -> None:
        """Rewrite request headers in place before sending."""

    def transport_auth(self) -> httpx.Auth | None:
        """Return the httpx auth flow to run during the exchange, if any."""
        return None


class NoAuth(AuthStrategy):
    pass


class BasicAuthStrategy(AuthStrategy):
    scheme = "Basic"

    def __init__(self, user: str, password: str):
        self.user = user
        self.password = password

    @property
    def header_value(self) -> str:
        token = base64.b64encode(f"{self.user}:{self.password}".encode("utf-8"))
        return f"Basic {token.decode('ascii')}"

    def apply(self, headers: MutableMapping[str, str]) -> None:
        # Overwrite under the existing key so no second Authorization appears
        key = find_header_name(headers, AUTHORIZATION) or AUTHORIZATION
        headers[key] = self.header_value


class DigestAuthStrategy(AuthStrategy):
    scheme = "Digest"

    def __init__(self, user: str, password: str):
        self.user = user
        self.password = password

    def transport_auth(self) -> httpx.Auth:
        return httpx.DigestAuth(self.user, self.password)


_STRATEGIES: dict[str, type[AuthStrategy]] = {
    "Basic": BasicAuthStrategy,
    "Digest": DigestAuthStrategy,
}


def parse_authorization(value: str | None) -> AuthStrategy:
    """
    Pick the strategy for an Authorization header value.

    Example:
        >>> parse_authorization("Basic user my secret").password
        'my secret'
        >>> type(parse_authorization("Bearer token")).__name__
        'NoAuth'
    """
    if not value:
        return NoAuth()

    tokens = value.split()
    # Only "<scheme> <user> <password...>" is rewritten; pre-encoded values pass through
    if len(tokens) < 3:
        return NoAuth()

    scheme, user, *rest = tokens
    strategy = _STRATEGIES.get(scheme)
    if strategy is None:
        return NoAuth()
    return strategy(user, " ".join(rest))


def select_auth_strategy(headers: MutableMapping[str, str] | None) -> AuthStrategy:
    if not headers:
        return NoAuth()
    key = find_header_name(headers, AUTHORIZATION)
    return parse_authorization(headers[key] if key is not None else None)
