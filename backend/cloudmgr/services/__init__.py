"""Business logic services — singleton registry."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from cloudmgr.config import settings

if TYPE_CHECKING:
    from cloudmgr.services.file_service import FileService
    from cloudmgr.services.webdav_proxy import WebDAVProxy

logger = logging.getLogger(__name__)

_file_service: FileService | None = None
_webdav_proxy: WebDAVProxy | None = None


async def init_services() -> None:
    """Create the stateless service singletons."""
    global _file_service, _webdav_proxy

    from cloudmgr.services.file_service import FileService
    from cloudmgr.services.webdav_proxy import WebDAVProxy

    Path(settings.local_root).mkdir(parents=True, exist_ok=True)
    _file_service = FileService(settings.local_root)
    _webdav_proxy = WebDAVProxy()
    logger.info(
        "Services initialized (local root %s, proxy upstream %s)",
        settings.local_root, _webdav_proxy.upstream_url,
    )


async def shutdown_services() -> None:
    global _file_service, _webdav_proxy
    _file_service = None
    _webdav_proxy = None


def get_file_service() -> FileService:
    if _file_service is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _file_service


def get_webdav_proxy() -> WebDAVProxy:
    if _webdav_proxy is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _webdav_proxy
