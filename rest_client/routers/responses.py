"""
Response export API routes.

Renders a received response as raw HTTP text, or saves that rendering to the
responses folder.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..engine import Engine, get_engine
from ..exceptions import ResourceNotFoundError
from ..schemas.execute import SavedResponse
from ..schemas.http import HttpResponse
from ..services.response_export import get_full_response_string, save_response


router = APIRouter(prefix="/api/responses", tags=["responses"])


def _get_response(engine: Engine, request_id: str) -> HttpResponse:
    response = engine.get_response(request_id)
    if response is None:
        raise ResourceNotFoundError("Response", request_id)
    return response


@router.get("/{request_id}/raw", response_class=PlainTextResponse)
def get_raw_response(request_id: str, engine: Engine = Depends(get_engine)):
    """Get the response of a request rendered as raw HTTP text (CRLF line endings)."""
    response = _get_response(engine, request_id)
    return PlainTextResponse(get_full_response_string(response, eol="\r\n"))


@router.post("/{request_id}/save", response_model=SavedResponse)
def save_raw_response(request_id: str, engine: Engine = Depends(get_engine)):
    """
    Save the response of a request to ``Response-<timestamp>.http``.

    Raises:
        ResourceNotFoundError: 404 if no response is kept for the request
    """
    response = _get_response(engine, request_id)
    path = save_response(response, engine.response_folder)
    return SavedResponse(path=str(path))
