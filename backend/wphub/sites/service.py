"""Owner-scoped site registry on top of the document store."""

from __future__ import annotations

import logging

from wphub.auth.models import Identity, require_identity
from wphub.errors import SiteNotFoundError
from wphub.sites.models import Site, validate_base_url
from wphub.storage.documents import DocumentNotFoundError, DocumentStore

logger = logging.getLogger(__name__)

SITES_COLLECTION = "sites"


class SiteService:
    """Reads and writes Site records for their owner only.

    A site owned by someone else is reported as not found.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def list_sites(self, identity: Identity | None) -> list[Site]:
        identity = require_identity(identity)
        docs = await self.store.list_by_owner(SITES_COLLECTION, identity.user_id)
        return [Site.from_document(doc) for doc in docs]

    async def get_site(self, identity: Identity | None, site_id: str) -> Site:
        identity = require_identity(identity)
        doc = await self.store.get(SITES_COLLECTION, site_id)
        if doc is None or doc.get("owner_id") != identity.user_id:
            raise SiteNotFoundError(f"Site not found: {site_id}")
        return Site.from_document(doc)

    async def create_site(self, identity: Identity | None, name: str, base_url: str) -> Site:
        identity = require_identity(identity)
        if not name or not name.strip():
            raise ValueError("Site name cannot be empty")
        doc = await self.store.create(
            SITES_COLLECTION,
            identity.user_id,
            {
                "site_name": name.strip(),
                "site_url": validate_base_url(base_url),
                "username": "",
                "password": "",
            },
        )
        logger.info("[Sites] Created site %s for user %s", doc["id"], identity.user_id)
        return Site.from_document(doc)

    async def update_site(
        self,
        identity: Identity | None,
        site_id: str,
        *,
        name: str | None = None,
        base_url: str | None = None,
    ) -> Site:
        """Rename or move a site.

        Credentials are written only by the handshake. Moving the site to a
        different URL drops them, since they were granted by the old host.
        """
        site = await self.get_site(identity, site_id)
        fields: dict = {}
        if name is not None:
            if not name.strip():
                raise ValueError("Site name cannot be empty")
            fields["site_name"] = name.strip()
        if base_url is not None:
            new_url = validate_base_url(base_url)
            if new_url != site.base_url:
                fields.update(site_url=new_url, username="", password="", encryption_disabled=False)
                logger.info("[Sites] Site %s moved to %s, credentials dropped", site.id, new_url)
        if not fields:
            return site
        return await self._update(site.id, fields)

    async def delete_site(self, identity: Identity | None, site_id: str) -> None:
        site = await self.get_site(identity, site_id)
        await self.store.delete(SITES_COLLECTION, site.id)
        logger.info("[Sites] Deleted site %s", site.id)

    async def store_credentials(
        self,
        identity: Identity | None,
        site_id: str,
        *,
        username: str,
        sealed_secret: str,
        encryption_disabled: bool = False,
    ) -> Site:
        """Persist delegated credentials; the site becomes connected."""
        if not username or not sealed_secret:
            raise ValueError("username and secret are required to connect a site")
        site = await self.get_site(identity, site_id)
        return await self._update(
            site.id,
            {
                "username": username,
                "password": sealed_secret,
                "encryption_disabled": encryption_disabled,
            },
        )

    async def clear_credentials(self, identity: Identity | None, site_id: str) -> Site:
        """Drop delegated credentials; the site becomes unconnected."""
        site = await self.get_site(identity, site_id)
        return await self._update(
            site.id,
            {"username": "", "password": "", "encryption_disabled": False},
        )

    async def _update(self, site_id: str, fields: dict) -> Site:
        try:
            doc = await self.store.update_fields(SITES_COLLECTION, site_id, fields)
        except DocumentNotFoundError as exc:
            raise SiteNotFoundError(f"Site not found: {site_id}") from exc
        return Site.from_document(doc)
