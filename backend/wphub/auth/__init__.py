"""Authentication package: identities, sessions and secret sealing."""

from wphub.auth.models import Identity, require_identity
from wphub.auth.sealing import (
    AesGcmSecretSealer,
    PlaintextSecretSealer,
    SealingPolicy,
    SecretSealer,
    SecretSealingError,
)
from wphub.auth.session import SessionProvider, SignedTokenSessionProvider, StaticSessionProvider
from wphub.auth.tokens import create_session_token, validate_session_token

__all__ = [
    # Identity
    "Identity",
    "require_identity",

    # Sessions
    "SessionProvider",
    "SignedTokenSessionProvider",
    "StaticSessionProvider",
    "create_session_token",
    "validate_session_token",

    # Sealing
    "SecretSealer",
    "AesGcmSecretSealer",
    "PlaintextSecretSealer",
    "SealingPolicy",
    "SecretSealingError",
]
