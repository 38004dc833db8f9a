"""Document store contract and the in-memory implementation.

Documents are flat dicts. The store owns four keys on every document:
``id``, ``owner_id``, ``created_at`` and ``updated_at``; everything else is
caller data.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

RESERVED_KEYS = frozenset({"id", "owner_id", "created_at", "updated_at"})


class DocumentNotFoundError(LookupError):
    """Raised when a document id does not exist in a collection."""


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _strip_reserved(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in RESERVED_KEYS}


class DocumentStore(ABC):
    """Owner-scoped document persistence."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Fetch one document or None."""

    @abstractmethod
    async def list_by_owner(self, collection: str, owner_id: str) -> list[dict[str, Any]]:
        """All documents in ``collection`` whose owner_id equals ``owner_id``."""

    @abstractmethod
    async def create(
        self,
        collection: str,
        owner_id: str,
        data: dict[str, Any],
        doc_id: str | None = None,
    ) -> dict[str, Any]:
        """Insert a document and return it."""

    @abstractmethod
    async def update_fields(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge ``fields`` into a document as one write.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document; returns False if it did not exist."""

    async def close(self) -> None:
        """Release held resources."""


class InMemoryDocumentStore(DocumentStore):
    """Per-instance dictionaries. Inject one instance per application."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def list_by_owner(self, collection: str, owner_id: str) -> list[dict[str, Any]]:
        docs = [d for d in self._collection(collection).values() if d["owner_id"] == owner_id]
        docs.sort(key=lambda d: d["created_at"])
        return copy.deepcopy(docs)

    async def create(
        self,
        collection: str,
        owner_id: str,
        data: dict[str, Any],
        doc_id: str | None = None,
    ) -> dict[str, Any]:
        docs = self._collection(collection)
        doc_id = doc_id or str(uuid4())
        if doc_id in docs:
            raise ValueError(f"Document already exists: {collection}/{doc_id}")
        now = _utcnow_iso()
        doc = {
            **copy.deepcopy(_strip_reserved(data)),
            "id": doc_id,
            "owner_id": owner_id,
            "created_at": now,
            "updated_at": now,
        }
        docs[doc_id] = doc
        return copy.deepcopy(doc)

    async def update_fields(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise DocumentNotFoundError(f"Document not found: {collection}/{doc_id}")
        updated = {**docs[doc_id], **copy.deepcopy(_strip_reserved(fields)), "updated_at": _utcnow_iso()}
        docs[doc_id] = updated
        return copy.deepcopy(updated)

    async def delete(self, collection: str, doc_id: str) -> bool:
        return self._collection(collection).pop(doc_id, None) is not None
