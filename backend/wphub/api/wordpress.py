"""Plugin and theme endpoints of a connected site."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from wphub.api.dependencies import BridgeDep, CurrentIdentity
from wphub.proxy.cache import THEMES

router = APIRouter(prefix="/api/sites/{site_id}", tags=["wordpress"])


class ToggleRequest(BaseModel):
    slug: str
    current_status: str


class PluginActionRequest(BaseModel):
    action: str
    plugin: str = ""
    slug: str = ""


class ThemeActionRequest(BaseModel):
    action: str
    slug: str


@router.get("/plugins")
async def list_plugins(site_id: str, bridge: BridgeDep, identity: CurrentIdentity, refresh: bool = False):
    plugins = await bridge.proxy.list_plugins(identity, site_id, refresh=refresh)
    return {
        "plugins": [plugin.model_dump() for plugin in plugins],
        "pending": bridge.reconciler.pending_toggles(site_id),
    }


@router.post("/plugins/toggle")
async def toggle_plugin(site_id: str, request: ToggleRequest, bridge: BridgeDep, identity: CurrentIdentity):
    result = await bridge.reconciler.toggle_active(identity, site_id, request.slug, request.current_status)
    return {
        "slug": result.slug,
        "previous_status": result.previous_status,
        "status": result.status,
        "plugin": result.plugin.model_dump() if result.plugin else None,
    }


@router.post("/plugins/manage")
async def manage_plugin(site_id: str, request: PluginActionRequest, bridge: BridgeDep, identity: CurrentIdentity):
    result = await bridge.reconciler.apply_plugin_action(
        identity,
        site_id,
        request.action,
        plugin=request.plugin,
        slug=request.slug,
    )
    return {"action": request.action, "result": result}


@router.get("/themes")
async def list_themes(site_id: str, bridge: BridgeDep, identity: CurrentIdentity, refresh: bool = False):
    themes = await bridge.proxy.list_themes(identity, site_id, refresh=refresh)
    return {
        "themes": [theme.model_dump() for theme in themes],
        "pending": bridge.reconciler.pending_toggles(site_id, kind=THEMES),
    }


@router.post("/themes/manage")
async def manage_theme(site_id: str, request: ThemeActionRequest, bridge: BridgeDep, identity: CurrentIdentity):
    result = await bridge.reconciler.apply_theme_action(identity, site_id, request.action, request.slug)
    return {"action": request.action, "result": result}
