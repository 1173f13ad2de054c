"""Journal model - a journal article submission."""
from sqlalchemy import String, Text, Integer, Float, Boolean, JSON
from sqlalchemy.orm import Mapped, mapped_column
from marketplace.models.base import Base, RecordMixin, OwnerMixin


class Journal(Base, RecordMixin, OwnerMixin):
    __tablename__ = "journals"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    authors: Mapped[list] = mapped_column(JSON, nullable=False)
    journal_name: Mapped[str] = mapped_column(String(300), nullable=False)
    volume: Mapped[str | None] = mapped_column(String(50), nullable=True)
    issue: Mapped[str | None] = mapped_column(String(50), nullable=True)
    pages: Mapped[str | None] = mapped_column(String(50), nullable=True)
    doi: Mapped[str | None] = mapped_column(String(200), nullable=True)
    abstract: Mapped[str | None] = mapped_column(Text, nullable=True)
    publication_date: Mapped[str | None] = mapped_column(String(20), nullable=True)
    keywords_list: Mapped[list | None] = mapped_column(JSON, nullable=True)
    citations_count: Mapped[int] = mapped_column(Integer, default=0)
    impact_factor: Mapped[float | None] = mapped_column(Float, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    open_access: Mapped[bool] = mapped_column(Boolean, default=False)
    peer_reviewed: Mapped[bool] = mapped_column(Boolean, default=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
