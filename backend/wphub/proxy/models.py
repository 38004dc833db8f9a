"""Normalized views of remote plugin and theme records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

ACTIVE_STATUSES = frozenset({"active", "network-active"})


def _text(value: Any) -> str:
    # Core REST returns some fields as {"raw": ..., "rendered": ...}
    if isinstance(value, dict):
        value = value.get("rendered") or value.get("raw")
    return str(value) if value is not None else ""


def _optional_text(value: Any) -> str | None:
    return _text(value) or None


def _update_version(value: Any) -> str | None:
    if isinstance(value, dict):
        value = value.get("new_version") or value.get("version")
    if isinstance(value, str) and value:
        return value
    return None


class WordPressPlugin(BaseModel):
    """A plugin as reported by a managed site."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    plugin: str
    name: str = ""
    status: str = "inactive"
    version: str | None = None
    update_version: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @classmethod
    def from_remote(cls, raw: dict[str, Any]) -> "WordPressPlugin":
        """Accept both the core REST shape and the bridge plugin shape."""
        if "status" in raw:
            status = str(raw["status"])
        else:
            status = "active" if raw.get("active") else "inactive"
        return cls(
            plugin=_text(raw.get("plugin") or raw.get("file")),
            name=_text(raw.get("name")),
            status=status,
            version=_optional_text(raw.get("version")),
            update_version=_update_version(raw.get("update")),
        )


class WordPressTheme(BaseModel):
    """A theme as reported by a managed site."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    stylesheet: str
    name: str = ""
    status: str = "inactive"
    version: str | None = None
    update_version: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @classmethod
    def from_remote(cls, raw: dict[str, Any]) -> "WordPressTheme":
        status = raw.get("status")
        if status is None:
            status = "active" if raw.get("active") else "inactive"
        return cls(
            stylesheet=_text(raw.get("stylesheet") or raw.get("slug")),
            name=_text(raw.get("name")),
            status=str(status),
            version=_optional_text(raw.get("version")),
            update_version=_update_version(raw.get("update")),
        )
