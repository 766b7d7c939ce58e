"""Storage dispatcher — routes each file operation to the drive's backend.

Multi-item delete, move and upload issue one backend call per item,
concurrently and unordered. There is no rollback: a partial failure leaves
the successful items in place and is reported per item in ``BatchResult``.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Union
from urllib.parse import urlencode

from cloudmgr.config import settings
from cloudmgr.exceptions import (
    DriveConfigError,
    InvalidPathError,
    PathConflictError,
    PathNotFoundError,
)
from cloudmgr.schemas.drives import Drive, DriveType
from cloudmgr.schemas.files import BatchFailure, BatchResult, FileEntry
from cloudmgr.services.local_backend import LocalBackend
from cloudmgr.services.webdav_backend import WebDAVBackend
from cloudmgr.utils.paths import basename, join_path, normalize_path, parent_path, validate_name

logger = logging.getLogger(__name__)

Backend = Union[LocalBackend, WebDAVBackend]


class FileService:
    """Backend-agnostic file operations for a single drive at a time."""

    def __init__(self, local_root: str | Path | None = None):
        self.local = LocalBackend(local_root or settings.local_root)

    @property
    def local_root(self) -> Path:
        return self.local.root

    def backend_for(self, drive: Drive) -> Backend:
        if drive.type == DriveType.LOCAL:
            return self.local
        if drive.type == DriveType.WEBDAV:
            return WebDAVBackend(drive)
        raise DriveConfigError(f"Unsupported drive type: {drive.type}")

    @asynccontextmanager
    async def _open(self, drive: Drive) -> AsyncIterator[Backend]:
        """Backend for one operation; WebDAV connections are closed afterwards."""
        backend = self.backend_for(drive)
        try:
            yield backend
        finally:
            if backend is not self.local:
                backend.close()

    async def list_files(self, drive: Drive, path: str) -> list[FileEntry]:
        async with self._open(drive) as backend:
            return await backend.list_dir(normalize_path(path))

    async def create_directory(self, drive: Drive, path: str) -> str:
        """Create a folder, including missing parents on the local drive."""
        path = normalize_path(path)
        if path == "/":
            raise InvalidPathError("Cannot create the drive root", path=path)
        validate_name(basename(path))
        async with self._open(drive) as backend:
            await self._ensure_name_free(backend, parent_path(path), basename(path))
            await backend.mkdir(path)
        logger.info("Created folder %s on drive %s", path, drive.id)
        return path

    async def delete(self, drive: Drive, paths: list[str]) -> BatchResult:
        async with self._open(drive) as backend:

            async def _delete_one(item: str) -> None:
                await backend.remove(normalize_path(item))

            return await self._run_batch([(p, _delete_one(p)) for p in paths])

    async def rename(self, drive: Drive, old_path: str, new_name: str) -> str:
        """Rename within the same directory. Returns the new path."""
        old_path = normalize_path(old_path)
        if old_path == "/":
            raise InvalidPathError("Cannot rename the drive root", path=old_path)
        new_name = validate_name(new_name)
        parent = parent_path(old_path)
        new_path = join_path(parent, new_name)
        if new_path == old_path:
            return old_path

        async with self._open(drive) as backend:
            await self._ensure_name_free(backend, parent, new_name)
            await backend.move(old_path, new_path)
        logger.info("Renamed %s -> %s on drive %s", old_path, new_path, drive.id)
        return new_path

    async def move(self, drive: Drive, paths: list[str], destination: str) -> BatchResult:
        destination = normalize_path(destination)

        async with self._open(drive) as backend:

            async def _move_one(item: str) -> None:
                src = normalize_path(item)
                if destination == src or destination.startswith(src.rstrip("/") + "/"):
                    raise InvalidPathError("Cannot move a folder into itself", path=src)
                dst = join_path(destination, basename(src))
                if dst == src:
                    raise InvalidPathError("Item is already in the destination folder", path=src)
                await backend.move(src, dst)

            return await self._run_batch([(p, _move_one(p)) for p in paths])

    async def read_file(self, drive: Drive, path: str) -> bytes:
        async with self._open(drive) as backend:
            return await backend.read_bytes(normalize_path(path))

    def local_file(self, path: str) -> Path:
        return self.local.file_path(normalize_path(path))

    async def upload_file(
        self, drive: Drive, path: str, data: bytes, overwrite: bool = False,
    ) -> str:
        path = normalize_path(path)
        validate_name(basename(path))
        async with self._open(drive) as backend:
            await self._write(backend, drive, path, data, overwrite)
        return path

    async def upload_files(
        self,
        drive: Drive,
        directory: str,
        files: list[tuple[str, bytes]],
        overwrite: bool = False,
    ) -> BatchResult:
        """Upload several files into ``directory``; outcomes are per file."""
        directory = normalize_path(directory)

        async with self._open(drive) as backend:

            async def _upload_one(name: str, data: bytes) -> None:
                target = join_path(directory, validate_name(name))
                await self._write(backend, drive, target, data, overwrite)

            jobs = [
                (join_path(directory, name.strip()), _upload_one(name, data))
                for name, data in files
            ]
            return await self._run_batch(jobs)

    def get_file_url(self, drive: Drive, path: str) -> str:
        """URL of the raw-bytes route, used for previews and downloads."""
        query = urlencode({"path": normalize_path(path), "drive": drive.id})
        return f"{settings.api_prefix}/raw?{query}"

    async def _write(
        self, backend: Backend, drive: Drive, path: str, data: bytes, overwrite: bool,
    ) -> None:
        if not overwrite and await backend.exists(path):
            raise PathConflictError(f"Already exists: {path}", path=path)
        await backend.write_bytes(path, data)
        logger.info("Uploaded %s (%d bytes) to drive %s", path, len(data), drive.id)

    async def _ensure_name_free(self, backend: Backend, parent: str, name: str) -> None:
        # Pre-flight check only; a concurrent writer can still win the race.
        try:
            entries = await backend.list_dir(parent)
        except PathNotFoundError:
            # Missing parent: nothing can clash, mkdir creates the chain
            return
        if any(entry.name == name for entry in entries):
            raise PathConflictError(f"{name} already exists", path=join_path(parent, name))

    async def _run_batch(self, jobs: list[tuple[str, Awaitable[Any]]]) -> BatchResult:
        results = await asyncio.gather(*(job for _, job in jobs), return_exceptions=True)
        batch = BatchResult()
        for (path, _), outcome in zip(jobs, results):
            if isinstance(outcome, Exception):
                logger.warning("Batch item %s failed: %s", path, outcome)
                batch.failed.append(BatchFailure(path=path, error=str(outcome)))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                batch.succeeded.append(path)
        return batch
