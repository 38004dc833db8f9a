"""Caller identity model."""

from dataclasses import dataclass
from typing import Optional

from wphub.errors import UnauthorizedError


@dataclass(frozen=True)
class Identity:
    """The authenticated user a request acts for."""
    user_id: str
    email: Optional[str] = None
    name: str = ""

    def to_dict(self) -> dict:
        return {"id": self.user_id, "email": self.email, "name": self.name}


def require_identity(identity: Optional[Identity]) -> Identity:
    """Return the identity or fail; absence of identity is never tolerated."""
    if identity is None or not identity.user_id:
        raise UnauthorizedError("Authentication required")
    return identity
