"""API route registration."""

from fastapi import APIRouter

from cloudmgr.api.routes import drives, files, health, preferences, proxy, raw

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(proxy.router, tags=["proxy"])
api_router.include_router(drives.router, prefix="/drives", tags=["drives"])
api_router.include_router(files.router, prefix="/files", tags=["files"])
api_router.include_router(raw.router, tags=["files"])
api_router.include_router(preferences.router, prefix="/preferences", tags=["preferences"])
