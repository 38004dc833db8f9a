"""FastAPI dependencies: the bridge instance and the calling identity."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from wphub.auth.models import Identity, require_identity
from wphub.bridge import Bridge

SESSION_COOKIE = "wphub_session"

security = HTTPBearer(auto_error=False)


def get_bridge(request: Request) -> Bridge:
    return request.app.state.bridge


async def get_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    bridge: Bridge = Depends(get_bridge),
) -> Identity:
    """Resolve the caller from a bearer token, falling back to the session cookie.

    Raises UnauthorizedError when neither yields an identity.
    """
    credential = credentials.credentials if credentials else request.cookies.get(SESSION_COOKIE)
    identity = await bridge.sessions.resolve(credential)
    return require_identity(identity)


BridgeDep = Annotated[Bridge, Depends(get_bridge)]
CurrentIdentity = Annotated[Identity, Depends(get_identity)]
