"""Connection handshake endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

from wphub.api.dependencies import BridgeDep, CurrentIdentity
from wphub.api.sites import site_payload

router = APIRouter(prefix="/api", tags=["connect"])


@router.get("/sites/{site_id}/connect")
async def begin_connect(
    site_id: str,
    bridge: BridgeDep,
    identity: CurrentIdentity,
    disable_encryption: bool = False,
):
    """Send the browser to the site's application-password authorization page."""
    redirect = await bridge.handshake.begin_connect(identity, site_id, disable_encryption=disable_encryption)
    return RedirectResponse(redirect.url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/connect/callback")
async def connect_callback(request: Request, bridge: BridgeDep, identity: CurrentIdentity):
    """Consume the query string WordPress appended to our success URL."""
    result = await bridge.handshake.handle_callback(identity, dict(request.query_params))
    if not result.already_processed:
        bridge.cache.invalidate_site(result.site.id)
    return {
        "site": site_payload(bridge, result.site),
        "already_processed": result.already_processed,
    }


@router.post("/sites/{site_id}/disconnect")
async def disconnect(site_id: str, bridge: BridgeDep, identity: CurrentIdentity):
    site = await bridge.handshake.disconnect(identity, site_id)
    bridge.cache.invalidate_site(site.id)
    return site_payload(bridge, site)
