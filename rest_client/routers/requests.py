"""
Request lifecycle API routes.

Lets the UI cancel in-flight requests and query their state. Cancellation
is advisory: the exchange runs to completion and its response is discarded.
"""

from fastapi import APIRouter, Depends

from ..engine import Engine, get_engine
from ..exceptions import ResourceNotFoundError
from ..schemas.execute import CancelRequest, CurrentRequestResponse, RequestStateResponse


router = APIRouter(prefix="/api/requests", tags=["requests"])


def _state_response(engine: Engine, request_id: str | None) -> RequestStateResponse:
    return RequestStateResponse(
        request_id=request_id,
        state=engine.store.state(request_id).value,
        cancelled=engine.store.is_cancelled(request_id),
        completed=engine.store.is_completed(request_id) if request_id else False,
    )


@router.post("/cancel", response_model=RequestStateResponse)
def cancel_request(
    payload: CancelRequest | None = None,
    engine: Engine = Depends(get_engine)
):
    """
    Cancel a request, or the current one when no id is given.

    Cancelling twice is harmless.
    """
    request_id = engine.store.cancel(payload.request_id if payload else None)
    return _state_response(engine, request_id)


@router.get("/current", response_model=CurrentRequestResponse)
def get_current_request(engine: Engine = Depends(get_engine)):
    """
    Get the most recently registered request.

    Raises:
        ResourceNotFoundError: 404 if no request has been registered
    """
    request = engine.store.get_current()
    request_id = engine.store.current_id
    if request is None or request_id is None:
        raise ResourceNotFoundError("Current request", request_id)

    return CurrentRequestResponse(
        request_id=request_id,
        method=request.method,
        url=request.url,
        headers=request.headers or {},
        state=engine.store.state(request_id).value,
    )


@router.get("/{request_id}/state", response_model=RequestStateResponse)
def get_request_state(request_id: str, engine: Engine = Depends(get_engine)):
    """Get the lifecycle state of a request."""
    return _state_response(engine, request_id)
