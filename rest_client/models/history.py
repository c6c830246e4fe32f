"""
History model for storing sent requests.

Each request sent through the service creates a history entry holding the
serialized request and the time it started.
"""

from typing import Optional

from sqlalchemy import BigInteger, String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class History(Base):
    """
    SQLAlchemy model for request history.

    Attributes:
        id: Unique identifier for the history entry
        method: HTTP method used
        url: Target URL (after variable substitution)
        headers: Headers as authored, after variable substitution
        body: Text body, if the request had one
        start_time: Epoch milliseconds at which the request was started
    """
    __tablename__ = "history"

    id: Mapped[int] = mapped_column(primary_key=True)
    method: Mapped[str] = mapped_column(String(16))
    url: Mapped[str] = mapped_column(Text)
    headers: Mapped[dict] = mapped_column(JSON, default=dict)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start_time: Mapped[int] = mapped_column(BigInteger, index=True)
