"""Raw file bytes for previews, thumbnails and downloads."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from fastapi.responses import FileResponse

from cloudmgr.api.deps import get_drive_store
from cloudmgr.schemas.drives import DriveType
from cloudmgr.services import get_file_service
from cloudmgr.services.drive_store import DriveStore
from cloudmgr.services.file_service import FileService
from cloudmgr.services.local_backend import guess_mime_type
from cloudmgr.utils.paths import basename

router = APIRouter()


@router.get("/raw")
async def raw_file(
    path: str,
    drive: str = "local",
    store: DriveStore = Depends(get_drive_store),
    file_service: FileService = Depends(get_file_service),
):
    """Stream a file from the given drive with its guessed MIME type."""
    active = await store.resolve(drive)
    media_type = guess_mime_type(basename(path))

    if active.type == DriveType.LOCAL:
        return FileResponse(file_service.local_file(path), media_type=media_type)

    data = await file_service.read_file(active, path)
    return Response(content=data, media_type=media_type)
