"""
Pydantic schemas for request history.

Defines schemas for returning history records.
"""

from pydantic import BaseModel, ConfigDict


class HistoryResponse(BaseModel):
    """Schema for a history record: the serialized request and when it started."""
    id: int
    method: str
    url: str
    headers: dict[str, str]
    body: str | None
    start_time: int

    model_config = ConfigDict(from_attributes=True)


class HistoryListResponse(BaseModel):
    """Schema for paginated history list response."""
    items: list[HistoryResponse]
    total: int
