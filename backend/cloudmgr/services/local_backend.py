"""Local drive backend — a sandboxed directory on the server's disk."""

from __future__ import annotations

import logging
import mimetypes
import shutil
from datetime import datetime, timezone
from pathlib import Path

from cloudmgr.exceptions import InvalidPathError, PathConflictError, PathNotFoundError
from cloudmgr.schemas.drives import DriveQuota
from cloudmgr.schemas.files import FileEntry
from cloudmgr.utils.paths import join_path, normalize_path
from cloudmgr.utils.storage import sandbox_quota

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(name: str) -> str:
    return mimetypes.guess_type(name)[0] or DEFAULT_MIME_TYPE


class LocalBackend:
    """All drive paths map below ``root``; nothing outside it is reachable."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def resolve(self, path: str) -> Path:
        rel = normalize_path(path).lstrip("/")
        root = self.root.resolve()
        full_path = (root / rel).resolve()
        if not full_path.is_relative_to(root):
            raise InvalidPathError("Path traversal is not allowed", path=path)
        return full_path

    def _entry(self, parent: str, child: Path) -> FileEntry:
        stat = child.stat()
        is_dir = child.is_dir()
        return FileEntry(
            name=child.name,
            path=join_path(parent, child.name),
            is_directory=is_dir,
            size=0 if is_dir else stat.st_size,
            mtime=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            type="folder" if is_dir else guess_mime_type(child.name),
        )

    async def list_dir(self, path: str) -> list[FileEntry]:
        full_path = self.resolve(path)
        if not full_path.exists():
            raise PathNotFoundError(f"Directory not found: {path}", path=path)
        if not full_path.is_dir():
            raise InvalidPathError(f"Not a directory: {path}", path=path)
        return [self._entry(path, child) for child in sorted(full_path.iterdir())]

    async def exists(self, path: str) -> bool:
        return self.resolve(path).exists()

    async def mkdir(self, path: str) -> None:
        full_path = self.resolve(path)
        try:
            full_path.mkdir(parents=True, exist_ok=True)
        except FileExistsError:
            raise PathConflictError(f"A file already exists at {path}", path=path)

    async def remove(self, path: str) -> None:
        full_path = self.resolve(path)
        if full_path == self.root.resolve():
            raise InvalidPathError("Cannot delete the drive root", path=path)
        if not full_path.exists():
            raise PathNotFoundError(f"Not found: {path}", path=path)
        if full_path.is_dir():
            shutil.rmtree(full_path)
        else:
            full_path.unlink()

    async def move(self, src: str, dst: str) -> None:
        src_path = self.resolve(src)
        dst_path = self.resolve(dst)
        if not src_path.exists():
            raise PathNotFoundError(f"Not found: {src}", path=src)
        if dst_path.exists():
            raise PathConflictError(f"Already exists: {dst}", path=dst)
        if not dst_path.parent.is_dir():
            raise PathNotFoundError(f"Destination folder not found: {dst}", path=dst)
        shutil.move(str(src_path), str(dst_path))

    def file_path(self, path: str) -> Path:
        """Resolve an existing regular file, for streaming responses."""
        full_path = self.resolve(path)
        if not full_path.exists():
            raise PathNotFoundError(f"File not found: {path}", path=path)
        if not full_path.is_file():
            raise InvalidPathError(f"Not a file: {path}", path=path)
        return full_path

    async def read_bytes(self, path: str) -> bytes:
        return self.file_path(path).read_bytes()

    async def write_bytes(self, path: str, data: bytes) -> None:
        full_path = self.resolve(path)
        if full_path.is_dir():
            raise PathConflictError(f"A folder already exists at {path}", path=path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(data)
        logger.debug("Wrote %d bytes to %s", len(data), full_path)

    def quota(self) -> DriveQuota | None:
        if not self.root.is_dir():
            return None
        return sandbox_quota(self.root)
