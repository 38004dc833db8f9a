"""Session providers: turn a request credential into an Identity."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from wphub.auth.models import Identity
from wphub.auth.tokens import validate_session_token

logger = logging.getLogger(__name__)


class SessionProvider(ABC):
    """Resolves the current identity, or None when nobody is signed in."""

    @abstractmethod
    async def resolve(self, credential: Optional[str]) -> Optional[Identity]:
        """Return the identity behind ``credential``."""


class SignedTokenSessionProvider(SessionProvider):
    """Validates HMAC-signed session tokens issued by ``create_session_token``."""

    def __init__(self, secret_key: str):
        if not secret_key:
            raise ValueError("secret_key cannot be empty")
        self._secret_key = secret_key

    async def resolve(self, credential: Optional[str]) -> Optional[Identity]:
        if not credential:
            return None
        payload = validate_session_token(credential, self._secret_key)
        if payload is None:
            logger.info("[Session] Rejected invalid or expired session token")
            return None
        return Identity(
            user_id=payload["user_id"],
            email=payload.get("email"),
            name=payload.get("name") or "",
        )


class StaticSessionProvider(SessionProvider):
    """Maps fixed credentials to identities (tests and local tooling)."""

    def __init__(self, identities: dict[str, Identity] | None = None):
        self._identities = dict(identities or {})

    async def resolve(self, credential: Optional[str]) -> Optional[Identity]:
        if not credential:
            return None
        return self._identities.get(credential)
