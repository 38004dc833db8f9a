"""Per-site read-through cache of remote resource lists.

Writes happen only as invalidate-then-refetch. Each key carries a
generation; a fill that started before an invalidation is dropped so a
slow read cannot bring back the pre-mutation list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

PLUGINS = "plugins"
THEMES = "themes"
KINDS = (PLUGINS, THEMES)


@dataclass(slots=True)
class _Entry:
    generation: int = 0
    items: tuple[Any, ...] | None = None


class ResourceCache:
    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], _Entry] = {}

    def _entry(self, kind: str, site_id: str) -> _Entry:
        if kind not in KINDS:
            raise ValueError(f"Unknown resource kind: {kind}")
        return self._entries.setdefault((kind, site_id), _Entry())

    def get(self, kind: str, site_id: str) -> list[Any] | None:
        items = self._entry(kind, site_id).items
        return list(items) if items is not None else None

    def generation(self, kind: str, site_id: str) -> int:
        return self._entry(kind, site_id).generation

    def begin_fill(self, kind: str, site_id: str) -> int:
        """Return the token a later ``fill`` must present."""
        return self._entry(kind, site_id).generation

    def fill(self, kind: str, site_id: str, items: list[Any], generation: int) -> bool:
        entry = self._entry(kind, site_id)
        if entry.generation != generation:
            logger.debug("[Cache] Dropping stale %s list for site %s", kind, site_id)
            return False
        entry.items = tuple(items)
        return True

    def invalidate(self, kind: str, site_id: str) -> None:
        entry = self._entry(kind, site_id)
        entry.generation += 1
        entry.items = None

    def invalidate_site(self, site_id: str) -> None:
        for kind in KINDS:
            self.invalidate(kind, site_id)
