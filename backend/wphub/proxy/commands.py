"""Command proxy: WordPress operations relayed through the execution backend."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from wphub.auth.models import Identity
from wphub.errors import (
    MalformedResponseError,
    NoResponseError,
    RemoteFailedError,
    SiteNotConnectedError,
)
from wphub.execution.client import FETCH_POLL_ATTEMPTS, INTERACTIVE_POLL_ATTEMPTS, ExecutionClient
from wphub.execution.models import ExecutionOutcome, Failed, Succeeded, TimedOut
from wphub.proxy.cache import PLUGINS, THEMES, ResourceCache
from wphub.proxy.models import WordPressPlugin, WordPressTheme
from wphub.sites.models import Site
from wphub.sites.service import SiteService

logger = logging.getLogger(__name__)

DEFAULT_FUNCTION_ID = "wp-proxy"

PLUGINS_ENDPOINT = "/wp/v2/plugins"
THEMES_ENDPOINT = "/wp/v2/themes"
MANAGE_PLUGIN_ENDPOINT = "/wphubpro/v1/plugins/manage"
MANAGE_THEME_ENDPOINT = "/wphubpro/v1/themes/manage"

PLUGIN_STATUSES = frozenset({"active", "inactive"})
PLUGIN_ACTIONS = frozenset({"activate", "deactivate", "update", "delete", "install"})
PLUGIN_PATH_ACTIONS = frozenset({"activate", "deactivate", "update", "delete"})
THEME_ACTIONS = frozenset({"activate", "update", "delete", "install"})


def plugin_endpoint(slug: str) -> str:
    """Endpoint of one plugin; ``dir/file.php`` becomes one path segment."""
    if not slug:
        raise ValueError("Plugin slug cannot be empty")
    return f"{PLUGINS_ENDPOINT}/{quote(slug, safe='')}"


def _as_list(body: Any, what: str) -> list[dict[str, Any]]:
    if not isinstance(body, list):
        raise RemoteFailedError(200, f"Expected a {what} list, got {type(body).__name__}")
    return [item for item in body if isinstance(item, dict)]


class CommandProxy:
    """Maps site commands onto single execution-client calls."""

    def __init__(
        self,
        client: ExecutionClient,
        sites: SiteService,
        cache: ResourceCache,
        *,
        function_id: str = DEFAULT_FUNCTION_ID,
    ) -> None:
        self.client = client
        self.sites = sites
        self.cache = cache
        self.function_id = function_id

    async def run_site_command(
        self,
        identity: Identity | None,
        site_id: str,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        *,
        max_attempts: int = FETCH_POLL_ATTEMPTS,
    ) -> Any:
        """Run one REST call on the site and return its parsed body unchanged.

        Raises:
            SiteNotFoundError: unknown site or not owned by the caller.
            SiteNotConnectedError: no credentials stored for the site.
            MalformedResponseError: the reply was not JSON.
            RemoteFailedError: the backend or the site reported an error.
            NoResponseError: nothing came back in time; the remote state is unknown.
        """
        site = await self._connected_site(identity, site_id)
        return await self._dispatch(site, endpoint, method, body, max_attempts)

    async def list_plugins(
        self,
        identity: Identity | None,
        site_id: str,
        *,
        refresh: bool = False,
    ) -> list[WordPressPlugin]:
        site = await self._connected_site(identity, site_id)
        if not refresh:
            cached = self.cache.get(PLUGINS, site.id)
            if cached is not None:
                return cached

        generation = self.cache.begin_fill(PLUGINS, site.id)
        body = await self._dispatch(site, PLUGINS_ENDPOINT, "GET", None, FETCH_POLL_ATTEMPTS)
        plugins = [WordPressPlugin.from_remote(item) for item in _as_list(body, "plugin")]
        self.cache.fill(PLUGINS, site.id, plugins, generation)
        return plugins

    async def list_themes(
        self,
        identity: Identity | None,
        site_id: str,
        *,
        refresh: bool = False,
    ) -> list[WordPressTheme]:
        site = await self._connected_site(identity, site_id)
        if not refresh:
            cached = self.cache.get(THEMES, site.id)
            if cached is not None:
                return cached

        generation = self.cache.begin_fill(THEMES, site.id)
        body = await self._dispatch(site, THEMES_ENDPOINT, "GET", None, FETCH_POLL_ATTEMPTS)
        themes = [WordPressTheme.from_remote(item) for item in _as_list(body, "theme")]
        self.cache.fill(THEMES, site.id, themes, generation)
        return themes

    async def set_plugin_status(
        self,
        identity: Identity | None,
        site_id: str,
        slug: str,
        status: str,
    ) -> WordPressPlugin | None:
        """Activate or deactivate one plugin. Does not touch the cache."""
        if status not in PLUGIN_STATUSES:
            raise ValueError(f"Unsupported plugin status: {status}")
        endpoint = plugin_endpoint(slug)
        site = await self._connected_site(identity, site_id)
        body = await self._dispatch(site, endpoint, "POST", {"status": status}, INTERACTIVE_POLL_ATTEMPTS)
        logger.info("[Proxy] Plugin %s on site %s set to %s", slug, site.id, status)
        return WordPressPlugin.from_remote(body) if isinstance(body, dict) else None

    async def manage_plugin(
        self,
        identity: Identity | None,
        site_id: str,
        action: str,
        *,
        plugin: str = "",
        slug: str = "",
    ) -> Any:
        if action not in PLUGIN_ACTIONS:
            raise ValueError(f"Unsupported plugin action: {action}")
        if action in PLUGIN_PATH_ACTIONS and "/" not in plugin:
            raise ValueError(f"Plugin action {action!r} needs a plugin path like dir/file.php")
        if action == "install" and not slug:
            raise ValueError("Installing a plugin needs its slug")
        site = await self._connected_site(identity, site_id)
        body = await self._dispatch(
            site,
            MANAGE_PLUGIN_ENDPOINT,
            "POST",
            {"action": action, "plugin": plugin, "slug": slug},
            INTERACTIVE_POLL_ATTEMPTS,
        )
        logger.info("[Proxy] Plugin %s %s on site %s", action, plugin or slug, site.id)
        return body

    async def manage_theme(self, identity: Identity | None, site_id: str, action: str, slug: str) -> Any:
        if action not in THEME_ACTIONS:
            raise ValueError(f"Unsupported theme action: {action}")
        if not slug:
            raise ValueError("Theme actions need a theme slug")
        site = await self._connected_site(identity, site_id)
        body = await self._dispatch(
            site,
            MANAGE_THEME_ENDPOINT,
            "POST",
            {"action": action, "slug": slug},
            INTERACTIVE_POLL_ATTEMPTS,
        )
        logger.info("[Proxy] Theme %s %s on site %s", action, slug, site.id)
        return body

    async def _connected_site(self, identity: Identity | None, site_id: str) -> Site:
        site = await self.sites.get_site(identity, site_id)
        if not site.is_connected:
            raise SiteNotConnectedError(f"Site {site.id} is not connected")
        return site

    async def _dispatch(self, site: Site, endpoint: str, method: str, body: Any, max_attempts: int) -> Any:
        payload = {"siteId": site.id, "method": method.upper(), "endpoint": endpoint, "body": body}
        outcome = await self.client.execute(
            self.function_id,
            payload,
            synchronous=True,
            max_attempts=max_attempts,
            site_id=site.id,
        )
        return self._unwrap(outcome, f"{method.upper()} {endpoint}")

    @staticmethod
    def _unwrap(outcome: ExecutionOutcome, command: str) -> Any:
        if isinstance(outcome, Succeeded):
            return outcome.body
        if isinstance(outcome, TimedOut):
            raise NoResponseError(command, outcome.attempts)
        if isinstance(outcome, Failed):
            if outcome.malformed:
                raise MalformedResponseError(outcome.status_code, outcome.raw_body or outcome.message)
            raise RemoteFailedError(outcome.status_code, outcome.message)
        raise TypeError(f"Unexpected execution outcome: {outcome!r}")
