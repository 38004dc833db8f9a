"""Busy-guarded mutations of remote plugins and themes.

Each (site, kind, resource) is either idle or has exactly one change in
flight. A second request for a busy resource is rejected, never queued.
On success the cached list for that site is invalidated so the next read
fetches what the site really reports; the cache is never patched from a
mutation response.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from wphub.auth.models import Identity, require_identity
from wphub.errors import BusyError
from wphub.proxy.cache import PLUGINS, THEMES, ResourceCache
from wphub.proxy.commands import CommandProxy
from wphub.proxy.models import ACTIVE_STATUSES, WordPressPlugin

logger = logging.getLogger(__name__)


def inverse_status(current_status: str) -> str:
    """Target status of a toggle."""
    if current_status in ACTIVE_STATUSES:
        return "inactive"
    if current_status == "inactive":
        return "active"
    raise ValueError(f"Unknown plugin status: {current_status}")


@dataclass(frozen=True)
class ToggleResult:
    site_id: str
    slug: str
    previous_status: str
    status: str
    plugin: WordPressPlugin | None = None


class ToggleReconciler:
    def __init__(self, proxy: CommandProxy, cache: ResourceCache) -> None:
        self.proxy = proxy
        self.cache = cache
        self._in_flight: dict[tuple[str, str, str], str] = {}

    def is_busy(self, site_id: str, resource: str, kind: str = PLUGINS) -> bool:
        return (site_id, kind, resource) in self._in_flight

    def pending_toggles(self, site_id: str, kind: str = PLUGINS) -> dict[str, str]:
        """In-flight targets for ``site_id``, keyed by resource.

        Meant for an optimistic overlay in the UI; nothing here is durable.
        """
        return {
            resource: target
            for (sid, k, resource), target in self._in_flight.items()
            if sid == site_id and k == kind
        }

    @contextmanager
    def _claim(self, site_id: str, kind: str, resource: str, target: str) -> Iterator[None]:
        # Check and claim run without an await in between
        key = (site_id, kind, resource)
        if key in self._in_flight:
            logger.debug("[Toggle] %s %s on site %s is busy, rejecting", kind, resource, site_id)
            raise BusyError(site_id, resource)
        self._in_flight[key] = target
        try:
            yield
        finally:
            self._in_flight.pop(key, None)

    async def toggle_active(
        self,
        identity: Identity | None,
        site_id: str,
        slug: str,
        current_status: str,
    ) -> ToggleResult:
        """Flip a plugin between active and inactive.

        Raises:
            BusyError: a change for this plugin is already in flight.
            RemoteFailedError, NoResponseError: surfaced from the proxy; the
                cache is left untouched.
        """
        identity = require_identity(identity)
        target = inverse_status(current_status)
        await self.proxy.sites.get_site(identity, site_id)
        with self._claim(site_id, PLUGINS, slug, target):
            plugin = await self.proxy.set_plugin_status(identity, site_id, slug, target)
            self.cache.invalidate(PLUGINS, site_id)
        logger.info("[Toggle] Plugin %s on site %s is now %s", slug, site_id, target)
        return ToggleResult(
            site_id=site_id,
            slug=slug,
            previous_status=current_status,
            status=target,
            plugin=plugin,
        )

    async def apply_plugin_action(
        self,
        identity: Identity | None,
        site_id: str,
        action: str,
        *,
        plugin: str = "",
        slug: str = "",
    ) -> Any:
        identity = require_identity(identity)
        resource = plugin or slug
        if not resource:
            raise ValueError("A plugin path or slug is required")
        await self.proxy.sites.get_site(identity, site_id)
        with self._claim(site_id, PLUGINS, resource, action):
            result = await self.proxy.manage_plugin(identity, site_id, action, plugin=plugin, slug=slug)
            self.cache.invalidate(PLUGINS, site_id)
        return result

    async def apply_theme_action(self, identity: Identity | None, site_id: str, action: str, slug: str) -> Any:
        identity = require_identity(identity)
        if not slug:
            raise ValueError("Theme actions need a theme slug")
        await self.proxy.sites.get_site(identity, site_id)
        with self._claim(site_id, THEMES, slug, action):
            result = await self.proxy.manage_theme(identity, site_id, action, slug)
            self.cache.invalidate(THEMES, site_id)
        return result
