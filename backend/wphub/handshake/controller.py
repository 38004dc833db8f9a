"""Connection handshake: redirect out to WordPress, consume the callback.

States per site::

    unconnected --begin_connect--> pending_external_auth --callback--> connected
    connected --disconnect--> unconnected

``pending_external_auth`` has no timeout. A ticket that never sees its
callback simply stays until the next ``begin_connect`` for that site
replaces it.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import unquote, urlencode

from wphub.auth.models import Identity, require_identity
from wphub.auth.sealing import PlaintextSecretSealer, SealingPolicy
from wphub.errors import MissingParametersError, NoMatchingSiteError
from wphub.handshake.tickets import HandshakeTicket, TicketStore
from wphub.sites.models import ConnectionStatus, Site, normalize_site_url
from wphub.sites.service import SiteService

logger = logging.getLogger(__name__)

AUTHORIZATION_PATH = "/wp-admin/authorize-application.php"
SECRET_PARAMS = ("password", "api_key")
MAX_REMEMBERED_CALLBACKS = 1024


@dataclass(frozen=True)
class ConnectRedirect:
    url: str
    ticket: HandshakeTicket


@dataclass(frozen=True)
class CallbackResult:
    site: Site
    already_processed: bool = False


def _callback_fingerprint(owner_id: str, target: str, username: str, secret: str) -> str:
    material = "\x1f".join((owner_id, target, username, secret))
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


class HandshakeController:
    """Drives the per-site connection state machine."""

    def __init__(
        self,
        sites: SiteService,
        sealing: SealingPolicy,
        *,
        callback_url: str,
        app_name: str,
        tickets: TicketStore | None = None,
    ) -> None:
        self.sites = sites
        self.sealing = sealing
        self.callback_url = callback_url
        self.app_name = app_name
        self.tickets = tickets if tickets is not None else TicketStore()
        self._lock = asyncio.Lock()
        self._processed: OrderedDict[str, str] = OrderedDict()

    def build_authorization_url(self, site: Site) -> str:
        """Authorization page of ``site`` with our callback as success_url."""
        success_url = f"{self.callback_url}?{urlencode({'site_id': site.id})}"
        query = urlencode({"app_name": self.app_name, "success_url": success_url})
        return f"{site.base_url.rstrip('/')}{AUTHORIZATION_PATH}?{query}"

    async def begin_connect(
        self,
        identity: Identity | None,
        site_id: str,
        *,
        disable_encryption: bool = False,
    ) -> ConnectRedirect:
        """Issue a ticket for the site and return where to send the user."""
        identity = require_identity(identity)
        site = await self.sites.get_site(identity, site_id)
        async with self._lock:
            ticket = self.tickets.issue(identity.user_id, site.id, disable_encryption=disable_encryption)
            self._forget_site(site.id)
        logger.info("[Handshake] Connect started for site %s", site.id)
        return ConnectRedirect(url=self.build_authorization_url(site), ticket=ticket)

    async def handle_callback(self, identity: Identity | None, params: Mapping[str, str]) -> CallbackResult:
        """Persist the delegated credentials carried by a callback.

        Runs at most once per distinct callback: replaying the same
        parameters returns the already-connected site without writing.

        Raises:
            MissingParametersError: site_url, user_login or secret absent.
            NoMatchingSiteError: neither a ticket nor a URL identifies a site.
        """
        identity = require_identity(identity)

        site_url = (params.get("site_url") or "").strip()
        username = (params.get("user_login") or "").strip()
        secret = next((params[p] for p in SECRET_PARAMS if params.get(p)), "")

        missing = [
            name
            for name, value in (("site_url", site_url), ("user_login", username), ("password", secret))
            if not value
        ]
        if missing:
            logger.warning("[Handshake] Callback missing parameters: %s", ", ".join(missing))
            raise MissingParametersError(missing)

        target = normalize_site_url(unquote(site_url))
        fingerprint = _callback_fingerprint(identity.user_id, target, username, secret)

        async with self._lock:
            processed_site_id = self._processed.get(fingerprint)
            if processed_site_id is not None:
                logger.info("[Handshake] Duplicate callback for site %s ignored", processed_site_id)
                site = await self.sites.get_site(identity, processed_site_id)
                return CallbackResult(site=site, already_processed=True)

            ticket, site = await self._match(identity, params.get("site_id"), target)

            disable_encryption = params.get("disable_encryption") == "1" or (
                ticket is not None and ticket.disable_encryption
            )
            sealer = self.sealing.sealer_for(disable_encryption)

            # Store first; the ticket survives a failed write so nothing is half-applied
            site = await self.sites.store_credentials(
                identity,
                site.id,
                username=username,
                sealed_secret=sealer.seal(unquote(secret)),
                encryption_disabled=isinstance(sealer, PlaintextSecretSealer),
            )

            if ticket is not None:
                self.tickets.consume(ticket)
            else:
                self.tickets.discard(site.id)
            self._remember(fingerprint, site.id)

        logger.info("[Handshake] Site %s connected as %s", site.id, username)
        return CallbackResult(site=site)

    async def disconnect(self, identity: Identity | None, site_id: str) -> Site:
        """Clear stored credentials. Unconditional once invoked."""
        identity = require_identity(identity)
        async with self._lock:
            site = await self.sites.clear_credentials(identity, site_id)
            self.release_site(site.id)
        logger.info("[Handshake] Site %s disconnected", site.id)
        return site

    async def connection_state(self, identity: Identity | None, site_id: str) -> ConnectionStatus:
        site = await self.sites.get_site(identity, site_id)
        return self.state_of(site)

    def state_of(self, site: Site) -> ConnectionStatus:
        """Connected with a stored secret, pending with a live ticket."""
        if site.is_connected:
            return ConnectionStatus.connected
        if self.tickets.get(site.id) is not None:
            return ConnectionStatus.pending_external_auth
        return ConnectionStatus.unconnected

    async def _match(
        self,
        identity: Identity,
        explicit_site_id: str | None,
        target: str,
    ) -> tuple[HandshakeTicket | None, Site]:
        owned = {site.id: site for site in await self.sites.list_sites(identity)}

        # A named site is authoritative; another site's ticket never stands in for it
        if explicit_site_id and explicit_site_id in owned:
            site = owned[explicit_site_id]
            ticket = self.tickets.get(site.id)
            if ticket is not None and ticket.owner_id != identity.user_id:
                ticket = None
            if site.normalized_url != target:
                logger.warning("[Handshake] Callback for site %s reports URL %s", site.id, target)
            return ticket, site

        if not explicit_site_id:
            ticket = self.tickets.latest_for_owner(identity.user_id)
            if ticket is not None and ticket.site_id in owned and owned[ticket.site_id].normalized_url == target:
                return ticket, owned[ticket.site_id]

        for site in owned.values():
            if site.normalized_url == target:
                return None, site

        logger.warning("[Handshake] No site of user %s matches %s", identity.user_id, target)
        raise NoMatchingSiteError(f"No site matches {target}")

    def release_site(self, site_id: str) -> None:
        """Drop the live ticket and remembered callbacks of ``site_id``."""
        self.tickets.discard(site_id)
        self._forget_site(site_id)

    def _remember(self, fingerprint: str, site_id: str) -> None:
        self._processed[fingerprint] = site_id
        while len(self._processed) > MAX_REMEMBERED_CALLBACKS:
            self._processed.popitem(last=False)

    def _forget_site(self, site_id: str) -> None:
        for key in [k for k, v in self._processed.items() if v == site_id]:
            del self._processed[key]
