"""
Pydantic schemas package.

Exports the engine's HTTP models and the schemas used by the API.
"""

from .http import (
    HttpRequest,
    SerializedHttpRequest,
    HostCertificate,
    HttpResponseTimingPhases,
    HttpResponse,
)

from .execute import (
    ExecuteRequest,
    EchoedRequest,
    ExecuteResponse,
    CancelRequest,
    RequestStateResponse,
    CurrentRequestResponse,
    SavedResponse,
)

from .history import (
    HistoryResponse,
    HistoryListResponse,
)

from .variables import (
    DefinitionRange,
    DefinitionLookupRequest,
    DefinitionLookupResponse,
)

__all__ = [
    # HTTP models
    "HttpRequest",
    "SerializedHttpRequest",
    "HostCertificate",
    "HttpResponseTimingPhases",
    "HttpResponse",
    # Execute schemas
    "ExecuteRequest",
    "EchoedRequest",
    "ExecuteResponse",
    "CancelRequest",
    "RequestStateResponse",
    "CurrentRequestResponse",
    "SavedResponse",
    # History schemas
    "HistoryResponse",
    "HistoryListResponse",
    # Variable schemas
    "DefinitionRange",
    "DefinitionLookupRequest",
    "DefinitionLookupResponse",
]
