"""Drive registry routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from cloudmgr.api.deps import get_drive_store
from cloudmgr.schemas.drives import DriveCreate, DriveOut, DriveUpdate
from cloudmgr.services.drive_store import DriveStore

router = APIRouter()


@router.get("", response_model=list[DriveOut])
async def list_drives(store: DriveStore = Depends(get_drive_store)):
    """Local drive first, then the saved WebDAV drives."""
    return [DriveOut.from_drive(d) for d in await store.get_drives()]


@router.post("", response_model=list[DriveOut], status_code=status.HTTP_201_CREATED)
async def add_drive(body: DriveCreate, store: DriveStore = Depends(get_drive_store)):
    drives = await store.add_drive(body)
    return [DriveOut.from_drive(d) for d in drives]


@router.patch("/{drive_id}", response_model=DriveOut)
async def update_drive(
    drive_id: str,
    body: DriveUpdate,
    store: DriveStore = Depends(get_drive_store),
):
    return DriveOut.from_drive(await store.update_drive(drive_id, body))


@router.delete("/{drive_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_drive(drive_id: str, store: DriveStore = Depends(get_drive_store)):
    """Remove a saved drive. The local drive is silently kept."""
    await store.remove_drive(drive_id)
