"""
Pydantic models for HTTP exchanges handled by the execution engine.

Defines the user-authored request, its persisted form, client certificate
material, timing phases and the materialized response.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..streams import ByteStream


class HttpRequest(BaseModel):
    """
    A request as authored by the user.

    Headers keep the casing the user typed; lookups that test for a header's
    presence must be case-insensitive. A ``ByteStream`` body belongs to the
    request until the engine drains it.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    method: str
    url: str
    headers: dict[str, str] | None = Field(default_factory=dict)
    body: str | ByteStream | None = None
    raw_body: str | None = None
    request_variable_cache_key: str | None = None


class SerializedHttpRequest(HttpRequest):
    """Request as persisted to history, stamped with its start time (epoch ms)."""
    start_time: int


class HostCertificate(BaseModel):
    """Client certificate material resolved for one host."""
    cert: bytes | None = None
    key: bytes | None = None
    pfx: bytes | None = None
    passphrase: str | None = None
    cert_path: Path | None = None
    key_path: Path | None = None
    pfx_path: Path | None = None


class HttpResponseTimingPhases(BaseModel):
    """Millisecond durations partitioning one request's lifetime."""
    model_config = ConfigDict(frozen=True)

    total: float = 0.0
    wait: float = 0.0
    dns: float = 0.0
    tcp: float = 0.0
    request: float = 0.0
    first_byte: float = 0.0
    download: float = 0.0


class HttpResponse(BaseModel):
    """
    A completed exchange.

    ``body_size_in_bytes`` and ``headers_size_in_bytes`` count bytes observed
    on the wire, not the length of the decoded body. ``request`` echoes the
    request that was effectively sent.
    ``headers`` merges repeated names with ", "; ``raw_headers`` keeps every
    header line as received, so repeated Set-Cookie values stay apart.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status_code: int
    status_message: str
    http_version: str
    headers: dict[str, str]
    body: str
    body_size_in_bytes: int
    headers_size_in_bytes: int
    body_buffer: bytes
    timing_phases: HttpResponseTimingPhases
    request: HttpRequest
    raw_headers: list[tuple[str, str]] = Field(default_factory=list)
