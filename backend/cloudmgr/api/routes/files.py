"""File API routes: every operation is dispatched on the drive's type."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from cloudmgr.api.deps import get_drive_store
from cloudmgr.schemas.files import (
    BatchResult,
    DeleteRequest,
    FileListResponse,
    FileUrlResponse,
    MkdirRequest,
    MoveRequest,
    RenameRequest,
)
from cloudmgr.services import get_file_service
from cloudmgr.services.drive_store import DriveStore
from cloudmgr.services.file_service import FileService
from cloudmgr.utils.paths import normalize_path

router = APIRouter()

# Partial success of a multi-item operation
HTTP_207_MULTI_STATUS = 207


@router.get("/list", response_model=FileListResponse)
async def list_files(
    path: str = "/",
    drive: str = "local",
    store: DriveStore = Depends(get_drive_store),
    file_service: FileService = Depends(get_file_service),
):
    active = await store.resolve(drive)
    path = normalize_path(path)
    files = await file_service.list_files(active, path)
    return FileListResponse(drive=active.id, path=path, files=files)


@router.post("/mkdir", status_code=status.HTTP_201_CREATED)
async def create_directory(
    body: MkdirRequest,
    store: DriveStore = Depends(get_drive_store),
    file_service: FileService = Depends(get_file_service),
):
    """Create a folder; 409 when the name is already taken."""
    active = await store.resolve(body.drive)
    return {"path": await file_service.create_directory(active, body.path)}


@router.post("/delete", response_model=BatchResult)
async def delete_items(
    body: DeleteRequest,
    response: Response,
    store: DriveStore = Depends(get_drive_store),
    file_service: FileService = Depends(get_file_service),
):
    """Delete each item independently; 207 lists the ones that failed."""
    active = await store.resolve(body.drive)
    result = await file_service.delete(active, body.paths)
    if not result.ok:
        response.status_code = HTTP_207_MULTI_STATUS
    return result


@router.post("/rename")
async def rename_item(
    body: RenameRequest,
    store: DriveStore = Depends(get_drive_store),
    file_service: FileService = Depends(get_file_service),
):
    active = await store.resolve(body.drive)
    return {"path": await file_service.rename(active, body.path, body.new_name)}


@router.post("/move", response_model=BatchResult)
async def move_items(
    body: MoveRequest,
    response: Response,
    store: DriveStore = Depends(get_drive_store),
    file_service: FileService = Depends(get_file_service),
):
    """Move each item into the destination folder; no rollback on failure."""
    active = await store.resolve(body.drive)
    result = await file_service.move(active, body.paths, body.destination)
    if not result.ok:
        response.status_code = HTTP_207_MULTI_STATUS
    return result


@router.post("/upload", response_model=BatchResult, status_code=status.HTTP_201_CREATED)
async def upload_files(
    response: Response,
    files: list[UploadFile] = File(...),
    drive: str = Form("local"),
    path: str = Form("/"),
    overwrite: bool = Form(False),
    store: DriveStore = Depends(get_drive_store),
    file_service: FileService = Depends(get_file_service),
):
    """Upload one or more files into ``path``; 207 lists the ones that failed."""
    active = await store.resolve(drive)
    contents = [(f.filename or "", await f.read()) for f in files]
    result = await file_service.upload_files(active, path, contents, overwrite=overwrite)
    if not result.ok:
        response.status_code = HTTP_207_MULTI_STATUS
    return result


@router.get("/url", response_model=FileUrlResponse)
async def file_url(
    path: str,
    drive: str = "local",
    store: DriveStore = Depends(get_drive_store),
    file_service: FileService = Depends(get_file_service),
):
    """Display URL for previews (served by the raw route)."""
    active = await store.resolve(drive)
    return FileUrlResponse(url=file_service.get_file_url(active, path))
