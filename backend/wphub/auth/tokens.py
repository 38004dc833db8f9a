"""Signed session tokens."""

import base64
import hashlib
import hmac
import json
from datetime import datetime, timezone, timedelta
from typing import Optional


def _sign(payload_b64: str, secret_key: str) -> str:
    """Sign a payload with HMAC-SHA256."""
    return hmac.new(secret_key.encode(), payload_b64.encode(), hashlib.sha256).hexdigest()


def create_session_token(
    user_id: str,
    secret_key: str,
    *,
    email: Optional[str] = None,
    name: str = "",
    expires_in: timedelta = timedelta(hours=24),
) -> str:
    """Create a signed session token.

    Format: ``base64url(payload).hex(hmac)``.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "email": email,
        "name": name,
        "issued_at": now.isoformat(),
        "expires_at": (now + expires_in).isoformat(),
    }
    payload_json = json.dumps(payload, separators=(",", ":"))
    payload_b64 = base64.urlsafe_b64encode(payload_json.encode()).decode()
    return f"{payload_b64}.{_sign(payload_b64, secret_key)}"


def validate_session_token(token: str, secret_key: str) -> Optional[dict]:
    """Return the token payload if the signature holds and it has not expired."""
    parts = token.split(".")
    if len(parts) != 2:
        return None

    payload_b64, signature = parts
    if not hmac.compare_digest(signature, _sign(payload_b64, secret_key)):
        return None

    try:
        payload = json.loads(base64.urlsafe_b64decode(payload_b64).decode())
        expires_at = datetime.fromisoformat(payload["expires_at"])
    except (ValueError, KeyError, TypeError):
        return None

    if datetime.now(timezone.utc) > expires_at:
        return None
    return payload
