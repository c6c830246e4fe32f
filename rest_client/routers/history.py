"""
Request history API routes.

Provides endpoints for viewing and managing the history of sent requests.
History records are created automatically when requests are executed.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import ResourceNotFoundError
from ..models.history import History
from ..schemas.history import HistoryResponse, HistoryListResponse
from ..services.history_service import list_history


router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("", response_model=HistoryListResponse)
def get_history_list(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """
    Get history records ordered by start time (descending).

    Args:
        skip: Number of records to skip (for pagination)
        limit: Maximum number of records to return
        db: Database session
    """
    items, total = list_history(db, skip=skip, limit=limit)
    return HistoryListResponse(items=items, total=total)


@router.get("/{history_id}", response_model=HistoryResponse)
def get_history(history_id: int, db: Session = Depends(get_db)):
    """
    Get a single history record by ID.

    Raises:
        ResourceNotFoundError: 404 if history record not found
    """
    db_history = db.query(History).filter(History.id == history_id).first()
    if db_history is None:
        raise ResourceNotFoundError("History record", history_id)
    return db_history


@router.delete("/{history_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_history(history_id: int, db: Session = Depends(get_db)):
    """
    Delete a single history record by ID.

    Raises:
        ResourceNotFoundError: 404 if history record not found
    """
    db_history = db.query(History).filter(History.id == history_id).first()
    if db_history is None:
        raise ResourceNotFoundError("History record", history_id)

    db.delete(db_history)
    db.commit()
    return None


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_all_history(db: Session = Depends(get_db)):
    """Clear all history records."""
    db.query(History).delete()
    db.commit()
    return None
