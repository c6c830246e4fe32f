"""
Request execution API routes.

Executes ad-hoc HTTP requests through the engine. Each execution is tracked
in the lifecycle store under its request id, recorded in history and, unless
it was cancelled while in flight, returned with its response details.
"""

import time
import uuid
from pathlib import Path

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..engine import Engine, get_engine
from ..exceptions import RequestCancelledError
from ..schemas.execute import EchoedRequest, ExecuteRequest, ExecuteResponse
from ..schemas.http import HttpResponse, SerializedHttpRequest
from ..services.headers import get_header
from ..services.history_service import save_history
from ..services.response_summary import parse_json_body, summarize
from ..services.variable_definitions import build_http_request


router = APIRouter(prefix="/api/execute", tags=["execute"])


def to_execute_response(
    request_id: str,
    response: HttpResponse,
    warnings: list[str],
    size_display: str = "auto"
) -> ExecuteResponse:
    """Convert an HttpResponse into the API response schema."""
    echoed = response.request
    return ExecuteResponse(
        request_id=request_id,
        status_code=response.status_code,
        status_message=response.status_message,
        http_version=response.http_version,
        headers=response.headers,
        body=response.body,
        body_json=parse_json_body(response.body, get_header(response.headers, "Content-Type")),
        body_size_in_bytes=response.body_size_in_bytes,
        headers_size_in_bytes=response.headers_size_in_bytes,
        timing_phases=response.timing_phases,
        request=EchoedRequest(
            method=echoed.method,
            url=echoed.url,
            headers=echoed.headers or {},
            body=echoed.body if isinstance(echoed.body, str) else None,
            raw_body=echoed.raw_body,
            request_variable_cache_key=echoed.request_variable_cache_key,
        ),
        warnings=warnings,
        **summarize(response, size_display),
    )


@router.post(
    "",
    response_model=ExecuteResponse,
    responses={
        200: {"description": "Successful execution"},
        400: {"description": "Invalid URL or client certificate"},
        409: {"description": "Request cancelled while in flight"},
        502: {"description": "Network error"},
        504: {"description": "Request timeout"},
    }
)
async def execute_request(
    payload: ExecuteRequest,
    engine: Engine = Depends(get_engine),
    db: Session = Depends(get_db)
):
    """
    Execute an ad-hoc HTTP request.

    File variables declared in ``document`` are substituted into the URL,
    headers and body before sending. The request is saved to history when
    it starts.

    Args:
        payload: The request configuration to execute
        engine: Request execution engine
        db: Database session

    Returns:
        ExecuteResponse with status, headers, body, timing and size info

    Raises:
        RequestCancelledError: 409 if the request was cancelled while in flight
    """
    request, warnings = build_http_request(payload)
    request_id = payload.request_id or uuid.uuid4().hex

    save_history(
        db=db,
        request=SerializedHttpRequest(
            **request.model_dump(), start_time=int(time.time() * 1000)
        ),
    )

    response = await engine.execute(
        request_id,
        request,
        source_file=Path(payload.source_file) if payload.source_file else None,
        warnings=warnings,
    )
    if response is None:
        raise RequestCancelledError(request_id)

    settings = engine.settings_provider.current()
    return to_execute_response(request_id, response, warnings, settings.size_display)
