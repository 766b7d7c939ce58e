"""FastAPI dependency injection for the preference and drive stores."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cloudmgr.database import get_db
from cloudmgr.services import get_file_service
from cloudmgr.services.drive_store import DriveStore
from cloudmgr.services.file_service import FileService
from cloudmgr.services.preference_store import PreferenceStore


async def get_preference_store(db: AsyncSession = Depends(get_db)) -> PreferenceStore:
    return PreferenceStore(db)


async def get_drive_store(
    preferences: PreferenceStore = Depends(get_preference_store),
    file_service: FileService = Depends(get_file_service),
) -> DriveStore:
    return DriveStore(preferences, file_service.local)
