"""
History service for recording sent requests.

Every request sent through the service is stored with its start time. Only
the most recent ``HISTORY_ITEMS_MAX_COUNT`` entries are kept.
"""

from sqlalchemy.orm import Session

from ..models.history import History
from ..schemas.http import SerializedHttpRequest


HISTORY_ITEMS_MAX_COUNT = 50


def save_history(db: Session, request: SerializedHttpRequest) -> History:
    """
    Save a request to history and drop entries beyond the cap.

    Args:
        db: Database session
        request: The serialized request; only text bodies are stored

    Returns:
        The created history record
    """
    history = History(
        method=request.method,
        url=request.url,
        headers=dict(request.headers or {}),
        body=request.body if isinstance(request.body, str) else None,
        start_time=request.start_time,
    )
    db.add(history)
    db.flush()

    stale_ids = [
        row.id
        for row in (
            db.query(History.id)
            .order_by(History.start_time.desc(), History.id.desc())
            .offset(HISTORY_ITEMS_MAX_COUNT)
            .all()
        )
    ]
    if stale_ids:
        db.query(History).filter(History.id.in_(stale_ids)).delete(synchronize_session=False)

    db.commit()
    db.refresh(history)
    return history


def list_history(db: Session, skip: int = 0, limit: int = 100) -> tuple[list[History], int]:
    """Return history records, newest first, with the total count."""
    total = db.query(History).count()
    items = (
        db.query(History)
        .order_by(History.start_time.desc(), History.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return items, total

