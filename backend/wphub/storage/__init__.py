"""Storage package init."""
from wphub.storage.database import Base, create_engine, create_session_maker, init_db
from wphub.storage.documents import DocumentNotFoundError, DocumentStore, InMemoryDocumentStore
from wphub.storage.models import DocumentRecord
from wphub.storage.sql_store import SqlDocumentStore

__all__ = [
    "Base",
    "create_engine",
    "create_session_maker",
    "init_db",
    "DocumentNotFoundError",
    "DocumentStore",
    "InMemoryDocumentStore",
    "DocumentRecord",
    "SqlDocumentStore",
]
