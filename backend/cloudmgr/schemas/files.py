"""File schemas: normalized listing entries and file operation payloads."""

from datetime import datetime

from pydantic import BaseModel, Field


class FileEntry(BaseModel):
    """Backend-independent projection of a directory entry."""
    name: str
    path: str
    is_directory: bool = False
    size: int = 0
    mtime: datetime | None = None
    type: str = "application/octet-stream"  # "folder" for directories


class FileListResponse(BaseModel):
    drive: str
    path: str
    files: list[FileEntry]


class BatchFailure(BaseModel):
    path: str
    error: str


class BatchResult(BaseModel):
    """Per-item outcome of a multi-item delete, move or upload (no rollback)."""
    succeeded: list[str] = []
    failed: list[BatchFailure] = []

    @property
    def ok(self) -> bool:
        return not self.failed


class MkdirRequest(BaseModel):
    drive: str = "local"
    path: str


class DeleteRequest(BaseModel):
    drive: str = "local"
    paths: list[str] = Field(min_length=1)


class RenameRequest(BaseModel):
    drive: str = "local"
    path: str
    new_name: str = Field(min_length=1, max_length=255)


class MoveRequest(BaseModel):
    drive: str = "local"
    paths: list[str] = Field(min_length=1)
    destination: str


class FileUrlResponse(BaseModel):
    url: str
