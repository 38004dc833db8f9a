"""Document store backed by SQLAlchemy async sessions."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine

from wphub.storage.database import create_session_maker
from wphub.storage.documents import DocumentNotFoundError, DocumentStore, RESERVED_KEYS
from wphub.storage.models import DocumentRecord

logger = logging.getLogger(__name__)


class SqlDocumentStore(DocumentStore):
    """Stores every collection in the ``documents`` table."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._session_maker = create_session_maker(engine)

    async def _load(self, session, collection: str, doc_id: str) -> DocumentRecord | None:
        record = await session.get(DocumentRecord, doc_id)
        if record is None or record.collection != collection:
            return None
        return record

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        async with self._session_maker() as session:
            record = await self._load(session, collection, doc_id)
            return record.to_document() if record else None

    async def list_by_owner(self, collection: str, owner_id: str) -> list[dict[str, Any]]:
        query = (
            select(DocumentRecord)
            .where(
                DocumentRecord.collection == collection,
                DocumentRecord.owner_id == owner_id,
            )
            .order_by(DocumentRecord.created_at.asc())
        )
        async with self._session_maker() as session:
            result = await session.execute(query)
            return [record.to_document() for record in result.scalars().all()]

    async def create(
        self,
        collection: str,
        owner_id: str,
        data: dict[str, Any],
        doc_id: str | None = None,
    ) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        record = DocumentRecord(
            id=doc_id or str(uuid4()),
            collection=collection,
            owner_id=owner_id,
            data={k: v for k, v in data.items() if k not in RESERVED_KEYS},
            created_at=now,
            updated_at=now,
        )
        async with self._session_maker() as session:
            async with session.begin():
                session.add(record)
            return record.to_document()

    async def update_fields(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        async with self._session_maker() as session:
            async with session.begin():
                record = await self._load(session, collection, doc_id)
                if record is None:
                    raise DocumentNotFoundError(f"Document not found: {collection}/{doc_id}")
                # JSON columns only detect reassignment, not in-place mutation
                record.data = {
                    **record.data,
                    **{k: v for k, v in fields.items() if k not in RESERVED_KEYS},
                }
                record.updated_at = datetime.now(timezone.utc)
            return record.to_document()

    async def delete(self, collection: str, doc_id: str) -> bool:
        async with self._session_maker() as session:
            async with session.begin():
                record = await self._load(session, collection, doc_id)
                if record is None:
                    return False
                await session.delete(record)
        return True

    async def close(self) -> None:
        await self.engine.dispose()
