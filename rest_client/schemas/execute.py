"""
Pydantic schemas for request execution.

Defines schemas for executing ad-hoc requests and returning execution results.
"""

from typing import Any

from pydantic import BaseModel

from .http import HttpResponseTimingPhases


class ExecuteRequest(BaseModel):
    """
    Schema for executing an ad-hoc request.

    ``document`` is the text the request was authored in; its
    ``@name = value`` declarations are substituted into URL, headers and body.
    """
    request_id: str | None = None
    method: str = "GET"
    url: str
    headers: dict[str, str] = {}
    body: str | None = None
    document: str | None = None
    source_file: str | None = None
    request_variable_cache_key: str | None = None


class EchoedRequest(BaseModel):
    """The request that was effectively sent."""
    method: str
    url: str
    headers: dict[str, str]
    body: str | None = None
    raw_body: str | None = None
    request_variable_cache_key: str | None = None


class ExecuteResponse(BaseModel):
    """
    Schema for request execution response.

    Contains all response details including status, headers, body,
    timing and size information, and any non-fatal warnings.
    """
    request_id: str
    status_code: int
    status_message: str
    http_version: str
    headers: dict[str, str]
    body: str
    body_json: Any | None = None
    body_size_in_bytes: int
    headers_size_in_bytes: int
    timing_phases: HttpResponseTimingPhases
    request: EchoedRequest
    duration: str
    duration_breakdown: list[str]
    size: str
    size_breakdown: list[str]
    warnings: list[str] = []


class CancelRequest(BaseModel):
    """Schema for cancelling a request; defaults to the current one."""
    request_id: str | None = None


class RequestStateResponse(BaseModel):
    request_id: str | None
    state: str
    cancelled: bool
    completed: bool


class CurrentRequestResponse(BaseModel):
    request_id: str
    method: str
    url: str
    headers: dict[str, str]
    state: str


class SavedResponse(BaseModel):
    """Schema returned after exporting a response to a file."""
    path: str
