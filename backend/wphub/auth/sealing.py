"""Secret sealing for delegated site credentials.

Sealed values use the ``iv:ciphertext:tag`` hex layout already present in
stored site documents:
- 12-byte random IV
- AES-256-GCM with key = SHA-256(encryption key)
- 16-byte authentication tag kept separately from the ciphertext
"""

import hashlib
import logging
import os
from abc import ABC, abstractmethod

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from wphub.config import Settings

logger = logging.getLogger(__name__)

IV_BYTES = 12
TAG_BYTES = 16


class SecretSealingError(Exception):
    """Raised when a sealed secret cannot be opened."""


class SecretSealer(ABC):
    """Protects delegated secrets at rest."""

    @abstractmethod
    def seal(self, plaintext: str) -> str:
        """Return the storable form of ``plaintext``."""

    @abstractmethod
    def unseal(self, sealed: str) -> str:
        """Recover the plaintext from a stored value."""


class PlaintextSecretSealer(SecretSealer):
    """Stores secrets as-is. Only for non-production targets."""

    def seal(self, plaintext: str) -> str:
        return plaintext

    def unseal(self, sealed: str) -> str:
        return sealed


class AesGcmSecretSealer(SecretSealer):
    """AES-256-GCM sealer."""

    def __init__(self, key: str):
        if not key:
            raise ValueError("An encryption key is required for AES-GCM sealing")
        self._aead = AESGCM(hashlib.sha256(key.encode("utf-8")).digest())

    def seal(self, plaintext: str) -> str:
        iv = os.urandom(IV_BYTES)
        sealed = self._aead.encrypt(iv, plaintext.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
        return f"{iv.hex()}:{ciphertext.hex()}:{tag.hex()}"

    def unseal(self, sealed: str) -> str:
        parts = sealed.split(":")
        if len(parts) != 3 or not all(parts):
            # Rows written before sealing was introduced hold plaintext
            return sealed
        try:
            iv, ciphertext, tag = (bytes.fromhex(p) for p in parts)
        except ValueError:
            return sealed
        try:
            return self._aead.decrypt(iv, ciphertext + tag, None).decode("utf-8")
        except InvalidTag as exc:
            raise SecretSealingError("Sealed secret failed authentication") from exc


class SealingPolicy:
    """Chooses the sealer for a handshake target.

    Plaintext storage is honoured only outside production and only when the
    target asked for it.
    """

    def __init__(self, encryption_key: str | None, *, allow_plaintext: bool):
        self._encryption_key = encryption_key
        self._allow_plaintext = allow_plaintext
        self._plaintext = PlaintextSecretSealer()
        self._aes: AesGcmSecretSealer | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SealingPolicy":
        return cls(settings.encryption_key, allow_plaintext=not settings.is_production)

    def sealer_for(self, disable_encryption: bool = False) -> SecretSealer:
        if disable_encryption:
            if self._allow_plaintext:
                return self._plaintext
            logger.warning("[Sealing] disable_encryption ignored in production")
        if self._aes is None:
            if not self._encryption_key:
                raise ValueError("encryption_key is not configured")
            self._aes = AesGcmSecretSealer(self._encryption_key)
        return self._aes
