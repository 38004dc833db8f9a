"""Health check endpoint."""

from fastapi import APIRouter

from wphub.api.dependencies import BridgeDep

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
async def health_check(bridge: BridgeDep):
    return {
        "status": "healthy",
        "service": bridge.settings.app_name,
        "environment": bridge.settings.environment,
    }
