# Services package

from .variable_definitions import (
    build_http_request,
    extract_variables,
    find_definition_ranges,
    parse_variable_definitions,
    substitute,
    substitute_dict,
)
from .http_client import HttpClient, encode_url
from .options_builder import RequestOptions, prepare_options
from .request_store import RequestState, RequestStore
from .response_export import get_full_response_string, save_response
from .history_service import list_history, save_history

__all__ = [
    "build_http_request",
    "extract_variables",
    "find_definition_ranges",
    "parse_variable_definitions",
    "substitute",
    "substitute_dict",
    "HttpClient",
    "encode_url",
    "RequestOptions",
    "prepare_options",
    "RequestState",
    "RequestStore",
    "get_full_response_string",
    "save_response",
    "list_history",
    "save_history",
]
