"""Health check endpoints."""

from fastapi import APIRouter

from cloudmgr import __version__
from cloudmgr.schemas.system import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight connectivity check."""
    return HealthResponse(version=__version__)


@router.get("/ping")
async def ping():
    return {"status": "ok"}
