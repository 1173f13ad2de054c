"""Declarative base and the columns every marketplace record shares."""
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class RecordMixin:
    """UUID primary key plus created/updated timestamps.

    Catalogue listings sort newest first, so ``created_at`` is indexed.
    """
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class OwnerMixin:
    """Id of the submitting user. Updates are filtered on it."""
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
