"""Drive registry — the built-in local drive plus user-configured WebDAV drives.

Saved drives live under a single preference key as a JSON list. The local
drive is never persisted; it is synthesized on every read.
"""

from __future__ import annotations

import json
import logging
import uuid

from pydantic import ValidationError

from cloudmgr.exceptions import DriveConfigError, DriveNotFoundError
from cloudmgr.schemas.drives import Drive, DriveCreate, DriveType, DriveUpdate
from cloudmgr.services.local_backend import LocalBackend
from cloudmgr.services.preference_store import PreferenceStore

logger = logging.getLogger(__name__)

DRIVES_KEY = "cloud_mgr_drives"
LOCAL_DRIVE_ID = "local"


class DriveStore:
    def __init__(self, preferences: PreferenceStore, local_backend: LocalBackend):
        self._prefs = preferences
        self._local = local_backend

    def local_drive(self, with_quota: bool = False) -> Drive:
        """The built-in drive; the quota walks the whole sandbox, so it is opt-in."""
        return Drive(
            id=LOCAL_DRIVE_ID,
            name="Local Device",
            type=DriveType.LOCAL,
            path="/",
            quota=self._local.quota() if with_quota else None,
        )

    async def _load_saved(self) -> list[Drive]:
        raw = await self._prefs.get(DRIVES_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Stored drive list is not valid JSON, ignoring: %s", e)
            return []

        drives: list[Drive] = []
        for item in data if isinstance(data, list) else []:
            try:
                drive = Drive.model_validate(item)
            except ValidationError as e:
                logger.warning("Skipping invalid stored drive %r: %s", item, e)
                continue
            if drive.id != LOCAL_DRIVE_ID:
                drives.append(drive)
        return drives

    async def _save(self, drives: list[Drive]) -> None:
        saved = [d.model_dump(mode="json", exclude_none=True) for d in drives if d.id != LOCAL_DRIVE_ID]
        await self._prefs.set(DRIVES_KEY, json.dumps(saved))

    async def get_drives(self) -> list[Drive]:
        return [self.local_drive(with_quota=True), *await self._load_saved()]

    async def resolve(self, drive_id: str) -> Drive:
        if drive_id == LOCAL_DRIVE_ID:
            return self.local_drive()
        for drive in await self._load_saved():
            if drive.id == drive_id:
                return drive
        raise DriveNotFoundError(f"Drive not found: {drive_id}")

    async def add_drive(self, config: DriveCreate) -> list[Drive]:
        """Persist a new drive and return the full list, local first."""
        if config.type != DriveType.WEBDAV:
            raise DriveConfigError("Only WebDAV drives can be added")
        saved = await self._load_saved()
        drive_id = config.id or uuid.uuid4().hex
        if drive_id == LOCAL_DRIVE_ID or any(d.id == drive_id for d in saved):
            raise DriveConfigError(f"Drive id already in use: {drive_id}")

        drive = Drive(
            id=drive_id,
            name=config.name,
            type=config.type,
            url=config.url,
            username=config.username,
            password=config.password,
        )
        saved.append(drive)
        await self._save(saved)
        logger.info("Added drive %s (%s)", drive.id, drive.url)
        return [self.local_drive(with_quota=True), *saved]

    async def remove_drive(self, drive_id: str) -> None:
        if drive_id == LOCAL_DRIVE_ID:
            logger.info("Ignoring request to remove the local drive")
            return
        saved = await self._load_saved()
        remaining = [d for d in saved if d.id != drive_id]
        if len(remaining) == len(saved):
            raise DriveNotFoundError(f"Drive not found: {drive_id}")
        await self._save(remaining)
        logger.info("Removed drive %s", drive_id)

    async def update_drive(self, drive_id: str, updates: DriveUpdate) -> Drive:
        if drive_id == LOCAL_DRIVE_ID:
            raise DriveConfigError("The local drive cannot be modified")
        saved = await self._load_saved()
        for index, drive in enumerate(saved):
            if drive.id == drive_id:
                merged = drive.model_copy(update=updates.model_dump(exclude_unset=True))
                saved[index] = merged
                await self._save(saved)
                return merged
        raise DriveNotFoundError(f"Drive not found: {drive_id}")
