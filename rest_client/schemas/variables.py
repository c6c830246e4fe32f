"""
Pydantic schemas for file variable lookups.
"""

from pydantic import BaseModel


class DefinitionRange(BaseModel):
    """Location of a variable declaration: zero-based line, start and end columns."""
    line: int
    start: int
    end: int


class DefinitionLookupRequest(BaseModel):
    """Schema for looking up where a variable is declared."""
    document: str
    name: str


class DefinitionLookupResponse(BaseModel):
    name: str
    definitions: list[DefinitionRange]
