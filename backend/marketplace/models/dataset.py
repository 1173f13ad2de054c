"""Dataset model - research data shared with the community."""
from sqlalchemy import String, Text, Float, JSON
from sqlalchemy.orm import Mapped, mapped_column
from marketplace.models.base import Base, RecordMixin, OwnerMixin


class Dataset(Base, RecordMixin, OwnerMixin):
    __tablename__ = "datasets"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    data_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    file_format: Mapped[str | None] = mapped_column(String(50), nullable=True)
    size_mb: Mapped[float | None] = mapped_column(Float, nullable=True)
    keywords: Mapped[list | None] = mapped_column(JSON, nullable=True)
    license: Mapped[str | None] = mapped_column(String(100), nullable=True)
    version: Mapped[str | None] = mapped_column(String(50), nullable=True)
    access_level: Mapped[str] = mapped_column(String(20), default="Public")
    doi: Mapped[str | None] = mapped_column(String(200), nullable=True)
    citation: Mapped[str | None] = mapped_column(Text, nullable=True)
    contributor_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    dataset_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
