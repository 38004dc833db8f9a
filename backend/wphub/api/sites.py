"""Site registry endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from wphub.api.dependencies import BridgeDep, CurrentIdentity
from wphub.bridge import Bridge
from wphub.sites.models import Site

router = APIRouter(prefix="/api/sites", tags=["sites"])


class CreateSiteRequest(BaseModel):
    name: str
    base_url: str


class UpdateSiteRequest(BaseModel):
    name: Optional[str] = None
    base_url: Optional[str] = None


def site_payload(bridge: Bridge, site: Site) -> dict:
    """Site as returned by the API, with the handshake-aware status."""
    payload = site.to_dict()
    payload["status"] = bridge.handshake.state_of(site).value
    return payload


@router.get("")
async def list_sites(bridge: BridgeDep, identity: CurrentIdentity):
    sites = await bridge.sites.list_sites(identity)
    return {"sites": [site_payload(bridge, site) for site in sites]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_site(request: CreateSiteRequest, bridge: BridgeDep, identity: CurrentIdentity):
    site = await bridge.sites.create_site(identity, request.name, request.base_url)
    return site_payload(bridge, site)


@router.get("/{site_id}")
async def get_site(site_id: str, bridge: BridgeDep, identity: CurrentIdentity):
    site = await bridge.sites.get_site(identity, site_id)
    return site_payload(bridge, site)


@router.patch("/{site_id}")
async def update_site(
    site_id: str,
    request: UpdateSiteRequest,
    bridge: BridgeDep,
    identity: CurrentIdentity,
):
    before = await bridge.sites.get_site(identity, site_id)
    site = await bridge.sites.update_site(identity, site_id, name=request.name, base_url=request.base_url)
    if site.base_url != before.base_url:
        bridge.handshake.release_site(site.id)
        bridge.cache.invalidate_site(site.id)
    return site_payload(bridge, site)


@router.delete("/{site_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_site(site_id: str, bridge: BridgeDep, identity: CurrentIdentity):
    await bridge.sites.delete_site(identity, site_id)
    bridge.handshake.release_site(site_id)
    bridge.cache.invalidate_site(site_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
