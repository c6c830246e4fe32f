"""
File variable API routes.

Provides go-to-definition for ``{{name}}`` references in request documents.
"""

from fastapi import APIRouter

from ..schemas.variables import DefinitionLookupRequest, DefinitionLookupResponse
from ..services.variable_definitions import find_definition_ranges


router = APIRouter(prefix="/api/variables", tags=["variables"])


@router.post("/definitions", response_model=DefinitionLookupResponse)
def lookup_definitions(payload: DefinitionLookupRequest):
    """Find where a variable is declared (``@name = value``) in a document."""
    return DefinitionLookupResponse(
        name=payload.name,
        definitions=find_definition_ranges(payload.document, payload.name),
    )
