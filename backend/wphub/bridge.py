"""Wiring of the remote site bridge components."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from wphub.auth.sealing import SealingPolicy
from wphub.auth.session import SessionProvider, SignedTokenSessionProvider
from wphub.config import Settings
from wphub.execution.backend import AppwriteExecutionBackend, ExecutionBackend
from wphub.execution.client import POLL_INTERVAL_SECONDS, ExecutionClient
from wphub.handshake.controller import HandshakeController
from wphub.proxy.cache import ResourceCache
from wphub.proxy.commands import CommandProxy
from wphub.proxy.toggle import ToggleReconciler
from wphub.sites.service import SiteService
from wphub.storage.database import create_engine, init_db
from wphub.storage.documents import DocumentStore
from wphub.storage.sql_store import SqlDocumentStore

logger = logging.getLogger(__name__)


@dataclass
class Bridge:
    """Every long-lived collaborator of one application instance."""
    settings: Settings
    store: DocumentStore
    backend: ExecutionBackend
    sessions: SessionProvider
    sites: SiteService
    client: ExecutionClient
    cache: ResourceCache
    proxy: CommandProxy
    reconciler: ToggleReconciler
    handshake: HandshakeController

    async def start(self) -> None:
        if isinstance(self.store, SqlDocumentStore):
            await init_db(self.store.engine)
            logger.info("[Bridge] Database initialized")

    async def close(self) -> None:
        await self.backend.close()
        await self.store.close()
        logger.info("[Bridge] Closed")


def build_bridge(
    settings: Settings,
    *,
    store: DocumentStore | None = None,
    backend: ExecutionBackend | None = None,
    sessions: SessionProvider | None = None,
    poll_interval: float = POLL_INTERVAL_SECONDS,
) -> Bridge:
    """Assemble a bridge; omitted collaborators are built from ``settings``."""
    if store is None:
        store = SqlDocumentStore(create_engine(settings.database_url, echo=settings.debug))
    if backend is None:
        backend = AppwriteExecutionBackend.from_settings(settings)
    if sessions is None:
        sessions = SignedTokenSessionProvider(settings.auth_secret_key)

    sites = SiteService(store)
    client = ExecutionClient(backend, poll_interval=poll_interval)
    cache = ResourceCache()
    proxy = CommandProxy(client, sites, cache, function_id=settings.proxy_function_id)
    handshake = HandshakeController(
        sites,
        SealingPolicy.from_settings(settings),
        callback_url=settings.callback_url,
        app_name=settings.app_name,
    )
    return Bridge(
        settings=settings,
        store=store,
        backend=backend,
        sessions=sessions,
        sites=sites,
        client=client,
        cache=cache,
        proxy=proxy,
        reconciler=ToggleReconciler(proxy, cache),
        handshake=handshake,
    )
