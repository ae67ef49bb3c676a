from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlalchemy.sql import func


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamps.

    created_at is filled on the Python side as well so that feeds ordered by
    creation time keep sub-second resolution on every backend.
    """
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)
