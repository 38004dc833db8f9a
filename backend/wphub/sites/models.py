"""Site value objects and connection status."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlparse

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


class ConnectionStatus(str, Enum):
    """Connection lifecycle of a managed site."""
    unconnected = "unconnected"
    pending_external_auth = "pending_external_auth"
    connected = "connected"


def normalize_site_url(url: str) -> str:
    """Comparable form of a site URL: no scheme, no trailing slash, lowercase."""
    return _SCHEME_RE.sub("", url.strip()).rstrip("/").lower()


def validate_base_url(url: str) -> str:
    """Return ``url`` without trailing slash, or raise ValueError."""
    candidate = url.strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Site URL must be an absolute http(s) URL: {url!r}")
    return candidate.rstrip("/")


@dataclass(frozen=True)
class Site:
    """One managed WordPress installation.

    ``status`` is derived here and nowhere else: a stored secret means
    connected, no secret means unconnected. Pending handshakes are tracked by
    tickets, not by the record.
    """

    id: str
    owner_id: str
    name: str
    base_url: str
    username: str = ""
    secret: str = field(default="", repr=False)
    encryption_disabled: bool = False
    created_at: str | None = None
    updated_at: str | None = None
    status: ConnectionStatus = field(init=False)

    def __post_init__(self) -> None:
        status = ConnectionStatus.connected if self.secret else ConnectionStatus.unconnected
        object.__setattr__(self, "status", status)

    @property
    def is_connected(self) -> bool:
        return self.status is ConnectionStatus.connected

    @property
    def normalized_url(self) -> str:
        return normalize_site_url(self.base_url)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Site":
        return cls(
            id=doc["id"],
            owner_id=doc["owner_id"],
            name=doc.get("site_name") or "",
            base_url=doc.get("site_url") or "",
            username=doc.get("username") or "",
            secret=doc.get("password") or "",
            encryption_disabled=bool(doc.get("encryption_disabled", False)),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize without the secret (safe for API responses)."""
        return {
            "id": self.id,
            "name": self.name,
            "base_url": self.base_url,
            "username": self.username,
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
