"""Application-level exception types.

Convention:
- Storage and drive errors derive from ``FileServiceError`` and carry the HTTP
  status the global handler in ``cloudmgr/main.py`` responds with. Their
  message is safe to forward to clients as the ``detail`` field.
- Errors raised by the WebDAV client library are translated into these types
  at the backend seam (``cloudmgr/services/webdav_backend.py``) so routes never
  see library exceptions.
"""

from __future__ import annotations


class FileServiceError(Exception):
    """Base class for errors surfaced by drives and storage backends."""

    status_code = 500

    def __init__(self, message: str, *, path: str | None = None):
        super().__init__(message)
        self.path = path


class InvalidPathError(FileServiceError):
    """Path is malformed or escapes the drive root."""

    status_code = 400


class PathNotFoundError(FileServiceError):
    status_code = 404


class PathConflictError(FileServiceError):
    """Target name already exists in the destination directory."""

    status_code = 409


class DriveNotFoundError(FileServiceError):
    status_code = 404


class DriveConfigError(FileServiceError):
    """Drive configuration is invalid or cannot be modified."""

    status_code = 400


class BackendError(FileServiceError):
    """Remote storage failed or is unreachable."""

    status_code = 502
