"""Tests for the owner-scoped site registry."""

import asyncio

import pytest

from wphub.errors import SiteNotFoundError, UnauthorizedError
from wphub.sites import ConnectionStatus, Site, SiteService, normalize_site_url, validate_base_url
from wphub.storage import InMemoryDocumentStore


@pytest.fixture
def service():
    return SiteService(InMemoryDocumentStore())


def test_create_site_starts_unconnected(service, alice):
    site = asyncio.run(service.create_site(alice, "  Blog ", "https://blog.example.com/"))

    assert site.name == "Blog"
    assert site.base_url == "https://blog.example.com"
    assert site.owner_id == alice.user_id
    assert site.status is ConnectionStatus.unconnected


def test_list_is_scoped_to_owner(service, alice, bob):
    async def scenario():
        await service.create_site(alice, "A1", "https://a1.example")
        await service.create_site(alice, "A2", "https://a2.example")
        await service.create_site(bob, "B1", "https://b1.example")
        return await service.list_sites(alice), await service.list_sites(bob)

    alice_sites, bob_sites = asyncio.run(scenario())

    assert [s.name for s in alice_sites] == ["A1", "A2"]
    assert [s.name for s in bob_sites] == ["B1"]


def test_foreign_site_looks_missing(service, alice, bob):
    async def scenario():
        site = await service.create_site(alice, "A1", "https://a1.example")
        await service.get_site(bob, site.id)

    with pytest.raises(SiteNotFoundError):
        asyncio.run(scenario())


def test_every_operation_requires_identity(service):
    with pytest.raises(UnauthorizedError):
        asyncio.run(service.list_sites(None))
    with pytest.raises(UnauthorizedError):
        asyncio.run(service.create_site(None, "x", "https://x.example"))
    with pytest.raises(UnauthorizedError):
        asyncio.run(service.get_site(None, "missing"))


def test_update_site_keeps_credentials(service, alice):
    async def scenario():
        site = await service.create_site(alice, "Blog", "https://blog.example")
        await service.store_credentials(alice, site.id, username="admin", sealed_secret="s3cret")
        return await service.update_site(alice, site.id, name="Renamed")

    site = asyncio.run(scenario())

    assert site.name == "Renamed"
    assert site.is_connected
    assert site.username == "admin"


def test_invalid_url_is_rejected(service, alice):
    with pytest.raises(ValueError):
        asyncio.run(service.create_site(alice, "Blog", "ftp://blog.example"))


def test_delete_site(service, alice):
    async def scenario():
        site = await service.create_site(alice, "Blog", "https://blog.example")
        await service.delete_site(alice, site.id)
        return await service.list_sites(alice)

    assert asyncio.run(scenario()) == []


def test_clear_credentials_disconnects(service, alice):
    async def scenario():
        site = await service.create_site(alice, "Blog", "https://blog.example")
        await service.store_credentials(alice, site.id, username="admin", sealed_secret="s3cret")
        return await service.clear_credentials(alice, site.id)

    site = asyncio.run(scenario())

    assert site.status is ConnectionStatus.unconnected
    assert site.username == ""


def test_to_dict_never_contains_secret():
    site = Site(id="s1", owner_id="u1", name="Blog", base_url="https://blog.example", secret="s3cret")
    payload = site.to_dict()

    assert "s3cret" not in payload.values()
    assert "secret" not in payload
    assert payload["status"] == "connected"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://Example.com/", "example.com"),
        ("http://example.com", "example.com"),
        ("HTTPS://example.com/blog/", "example.com/blog"),
        ("example.com", "example.com"),
    ],
)
def test_normalize_site_url(url, expected):
    assert normalize_site_url(url) == expected


def test_validate_base_url_requires_host():
    with pytest.raises(ValueError):
        validate_base_url("https://")


def test_moving_site_drops_credentials(service, alice):
    async def scenario():
        site = await service.create_site(alice, "Blog", "https://blog.example")
        await service.store_credentials(alice, site.id, username="admin", sealed_secret="s3cret")
        same = await service.update_site(alice, site.id, base_url="https://blog.example/")
        moved = await service.update_site(alice, site.id, base_url="https://other-host.org")
        return same, moved

    same, moved = asyncio.run(scenario())

    assert same.is_connected
    assert moved.base_url == "https://other-host.org"
    assert moved.status is ConnectionStatus.unconnected
    assert moved.username == ""
