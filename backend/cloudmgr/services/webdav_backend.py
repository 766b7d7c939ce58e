"""WebDAV drive backend — thin async wrapper around the webdav4 client.

The protocol (PROPFIND multi-status parsing, MOVE/MKCOL semantics) lives in
``webdav4``. This module only runs the blocking client calls off the event
loop, normalizes listing entries into ``FileEntry`` and translates library
errors into ``cloudmgr.exceptions``.
"""

from __future__ import annotations

import asyncio
import io
import logging
from datetime import datetime
from typing import Any, Callable

import httpx
from webdav4.client import Client, ClientError, ResourceAlreadyExists, ResourceNotFound

from cloudmgr.config import settings
from cloudmgr.exceptions import (
    BackendError,
    DriveConfigError,
    PathConflictError,
    PathNotFoundError,
)
from cloudmgr.schemas.drives import Drive
from cloudmgr.schemas.files import FileEntry
from cloudmgr.utils.paths import normalize_path

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def _remote(path: str) -> str:
    """webdav4 paths are relative to the client's base URL."""
    return normalize_path(path).lstrip("/")


def normalize_webdav_entry(item: dict[str, Any]) -> FileEntry:
    """Project a ``Client.ls(detail=True)`` record onto ``FileEntry``."""
    rel = (item.get("name") or "").strip("/")
    is_dir = item.get("type") == "directory"
    mtime = item.get("modified")
    return FileEntry(
        name=rel.rsplit("/", 1)[-1] or item.get("display_name") or "",
        path="/" + rel,
        is_directory=is_dir,
        size=0 if is_dir else int(item.get("content_length") or 0),
        mtime=mtime if isinstance(mtime, datetime) else None,
        type="folder" if is_dir else (item.get("content_type") or DEFAULT_MIME_TYPE),
    )


class WebDAVBackend:
    """One client per drive; created on demand like the drive config itself.

    A backend that built its own client owns that client's connection pool
    and must be closed after use.
    """

    def __init__(self, drive: Drive, client: Client | None = None):
        if not drive.url:
            raise DriveConfigError(f"Drive {drive.id} has no WebDAV url")
        self.drive = drive
        self._owns_client = client is None
        self._client = client if client is not None else self._connect(drive)

    @staticmethod
    def _connect(drive: Drive) -> Client:
        auth = (drive.username, drive.password or "") if drive.username else None
        return Client(
            drive.url,
            auth=auth,
            retry=False,
            timeout=settings.webdav_timeout_seconds,
        )

    def close(self) -> None:
        if self._owns_client:
            # webdav4 exposes its underlying httpx.Client as ``http``
            self._client.http.close()

    async def _call(self, fn: Callable[..., Any], path: str, *args, **kwargs) -> Any:
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except ResourceNotFound as exc:
            raise PathNotFoundError(f"Not found: {path}", path=path) from exc
        except ResourceAlreadyExists as exc:
            raise PathConflictError(f"Already exists: {path}", path=path) from exc
        except (ClientError, httpx.HTTPError) as exc:
            logger.warning(
                "WebDAV %s failed on %s (%s): %s",
                getattr(fn, "__name__", "request"), self.drive.id, path, exc,
            )
            raise BackendError(f"WebDAV request failed: {exc}", path=path) from exc

    async def list_dir(self, path: str) -> list[FileEntry]:
        items = await self._call(self._client.ls, path, _remote(path), detail=True)
        own = _remote(path)
        return [
            normalize_webdav_entry(item)
            for item in items
            # Some servers list the collection itself
            if (item.get("name") or "").strip("/") != own
        ]

    async def exists(self, path: str) -> bool:
        return await self._call(self._client.exists, path, _remote(path))

    async def mkdir(self, path: str) -> None:
        await self._call(self._client.mkdir, path, _remote(path))

    async def remove(self, path: str) -> None:
        await self._call(self._client.remove, path, _remote(path))

    async def move(self, src: str, dst: str) -> None:
        await self._call(self._client.move, src, _remote(src), _remote(dst), overwrite=False)

    async def read_bytes(self, path: str) -> bytes:
        buffer = io.BytesIO()
        await self._call(self._client.download_fileobj, path, _remote(path), buffer)
        return buffer.getvalue()

    async def write_bytes(self, path: str, data: bytes) -> None:
        await self._call(
            self._client.upload_fileobj,
            path,
            io.BytesIO(data),
            _remote(path),
            overwrite=True,
        )
