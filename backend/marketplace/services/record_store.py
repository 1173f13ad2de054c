"""Structured record store. SQLAlchemy tables for dev, hosted REST tables for production.

Both adapters speak in plain row dicts so the submission pipeline never sees
ORM objects or HTTP payloads.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

from sqlalchemy import select, desc, asc, false, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models import MODELS_BY_TABLE
from marketplace.services.baas_client import BaaSAPIError, BaaSClient

logger = logging.getLogger(__name__)

# (column, descending)
Order = tuple[str, bool]


class RecordStoreError(Exception):
    """Raised when the store rejects a read or write."""

    def __init__(self, message: str, table: str = ""):
        self.message = message
        self.table = table
        super().__init__(message)


class RecordStore(ABC):
    """select / insert / update over named tables with equality filters."""

    @abstractmethod
    async def select(
        self, table: str, filters: dict[str, Any], order: Optional[Order] = None,
    ) -> list[dict]:
        ...

    @abstractmethod
    async def insert(self, table: str, payload: dict) -> list[dict]:
        """Insert one row. Returns the inserted rows as stored."""

    @abstractmethod
    async def update(self, table: str, payload: dict, filters: dict[str, Any]) -> list[dict]:
        """Update every row matching ``filters``. Returns the affected rows."""


class SqlRecordStore(RecordStore):
    """Record store backed by the local SQLAlchemy models."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _model(table: str):
        model = MODELS_BY_TABLE.get(table)
        if model is None:
            raise RecordStoreError(f"Unknown table: {table}", table)
        return model

    @staticmethod
    def _where(model, filters: dict[str, Any]) -> list:
        if _has_malformed_id(filters):
            return [false()]
        clauses = []
        for column, value in filters.items():
            if column == "id" and isinstance(value, str):
                value = uuid.UUID(value)
            clauses.append(getattr(model, column) == value)
        return clauses

    async def select(
        self, table: str, filters: dict[str, Any], order: Optional[Order] = None,
    ) -> list[dict]:
        model = self._model(table)
        query = select(model).where(*self._where(model, filters))
        if order:
            column, descending = order
            attr = getattr(model, column)
            query = query.order_by(desc(attr) if descending else asc(attr))
        try:
            result = await self.db.execute(query)
            return [_to_row(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RecordStoreError(f"Select from {table} failed: {e.__class__.__name__}", table) from e

    async def insert(self, table: str, payload: dict) -> list[dict]:
        model = self._model(table)
        record = model(**payload)
        self.db.add(record)
        try:
            await self.db.commit()
            await self.db.refresh(record)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RecordStoreError(f"Insert into {table} failed: {e.__class__.__name__}", table) from e
        logger.info("Inserted %s row %s", table, record.id)
        return [_to_row(record)]

    async def update(self, table: str, payload: dict, filters: dict[str, Any]) -> list[dict]:
        model = self._model(table)
        try:
            result = await self.db.execute(select(model).where(*self._where(model, filters)))
            records = result.scalars().all()
            if not records:
                logger.info("Update of %s matched no rows for %s", table, filters)
                return []

            for record in records:
                for key, value in payload.items():
                    setattr(record, key, value)
            await self.db.commit()
            for record in records:
                await self.db.refresh(record)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RecordStoreError(f"Update of {table} failed: {e.__class__.__name__}", table) from e
        return [_to_row(r) for r in records]


class RemoteRecordStore(RecordStore):
    """Record store backed by the hosted backend's REST tables.

    Row-level security is applied remotely, so an update the caller may not
    perform comes back as an empty row list rather than an error.
    """

    def __init__(self, client: BaaSClient):
        self.client = client

    async def select(
        self, table: str, filters: dict[str, Any], order: Optional[Order] = None,
    ) -> list[dict]:
        if _has_malformed_id(filters):
            return []
        try:
            return await self.client.select_rows(table, filters, order) or []
        except BaaSAPIError as e:
            raise RecordStoreError(e.message, table) from e

    async def insert(self, table: str, payload: dict) -> list[dict]:
        try:
            return await self.client.insert_rows(table, payload) or []
        except BaaSAPIError as e:
            raise RecordStoreError(e.message, table) from e

    async def update(self, table: str, payload: dict, filters: dict[str, Any]) -> list[dict]:
        if _has_malformed_id(filters):
            return []
        try:
            return await self.client.update_rows(table, payload, filters) or []
        except BaaSAPIError as e:
            raise RecordStoreError(e.message, table) from e


def _has_malformed_id(filters: dict[str, Any]) -> bool:
    """Ids are UUIDs; a malformed one matches nothing in either adapter."""
    value = filters.get("id")
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return True
    return False


def _to_row(record) -> dict:
    """Convert a SQLAlchemy model instance to a plain row dict."""
    row = {attr.key: getattr(record, attr.key) for attr in inspect(record).mapper.column_attrs}
    row["id"] = str(row["id"])
    return row
