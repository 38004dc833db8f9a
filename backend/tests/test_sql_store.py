"""Tests for the SQLAlchemy-backed document store."""

import pytest
from sqlalchemy.pool import StaticPool

from wphub.storage import DocumentNotFoundError, SqlDocumentStore, create_engine, init_db


@pytest.fixture
def sql_store():
    engine = create_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    return SqlDocumentStore(engine)


@pytest.mark.asyncio
async def test_create_get_update_delete(sql_store):
    await init_db(sql_store.engine)
    try:
        created = await sql_store.create("sites", "u1", {"site_name": "Blog", "password": ""})
        assert created["owner_id"] == "u1"
        assert created["site_name"] == "Blog"

        updated = await sql_store.update_fields("sites", created["id"], {"password": "sealed", "id": "ignored"})
        assert updated["id"] == created["id"]
        assert updated["password"] == "sealed"
        assert updated["site_name"] == "Blog"

        fetched = await sql_store.get("sites", created["id"])
        assert fetched["password"] == "sealed"

        assert await sql_store.delete("sites", created["id"]) is True
        assert await sql_store.get("sites", created["id"]) is None
        assert await sql_store.delete("sites", created["id"]) is False
    finally:
        await sql_store.close()


@pytest.mark.asyncio
async def test_list_by_owner_filters_collection_and_owner(sql_store):
    await init_db(sql_store.engine)
    try:
        await sql_store.create("sites", "u1", {"site_name": "A"})
        await sql_store.create("sites", "u2", {"site_name": "B"})
        await sql_store.create("other", "u1", {"site_name": "C"})

        docs = await sql_store.list_by_owner("sites", "u1")
        assert [d["site_name"] for d in docs] == ["A"]
    finally:
        await sql_store.close()


@pytest.mark.asyncio
async def test_update_missing_document(sql_store):
    await init_db(sql_store.engine)
    try:
        with pytest.raises(DocumentNotFoundError):
            await sql_store.update_fields("sites", "missing", {"password": "x"})
    finally:
        await sql_store.close()


@pytest.mark.asyncio
async def test_get_from_wrong_collection(sql_store):
    await init_db(sql_store.engine)
    try:
        created = await sql_store.create("sites", "u1", {"site_name": "A"})
        assert await sql_store.get("other", created["id"]) is None
    finally:
        await sql_store.close()
