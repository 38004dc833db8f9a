"""Process-local tickets linking a pending redirect to its site."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandshakeTicket:
    """A connect attempt waiting for its callback."""

    site_id: str
    owner_id: str
    disable_encryption: bool = False
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    sequence: int = 0


class TicketStore:
    """At most one live ticket per site; a new ticket supersedes the old one."""

    def __init__(self) -> None:
        self._tickets: dict[str, HandshakeTicket] = {}
        self._sequence = itertools.count(1)

    def issue(self, owner_id: str, site_id: str, *, disable_encryption: bool = False) -> HandshakeTicket:
        ticket = HandshakeTicket(
            site_id=site_id,
            owner_id=owner_id,
            disable_encryption=disable_encryption,
            sequence=next(self._sequence),
        )
        previous = self._tickets.get(site_id)
        if previous is not None:
            logger.info("[Handshake] Superseding ticket for site %s issued at %s", site_id, previous.issued_at)
        self._tickets[site_id] = ticket
        return ticket

    def get(self, site_id: str) -> HandshakeTicket | None:
        return self._tickets.get(site_id)

    def latest_for_owner(self, owner_id: str) -> HandshakeTicket | None:
        """Most recently issued live ticket of ``owner_id``."""
        owned = [t for t in self._tickets.values() if t.owner_id == owner_id]
        if not owned:
            return None
        return max(owned, key=lambda t: t.sequence)

    def consume(self, ticket: HandshakeTicket) -> bool:
        """Remove ``ticket`` if it is still the live ticket of its site."""
        if self._tickets.get(ticket.site_id) is ticket:
            del self._tickets[ticket.site_id]
            return True
        return False

    def discard(self, site_id: str) -> HandshakeTicket | None:
        return self._tickets.pop(site_id, None)

    def __len__(self) -> int:
        return len(self._tickets)
