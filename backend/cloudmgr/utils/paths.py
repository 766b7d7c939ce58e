"""Drive path helpers: all drive paths are absolute, '/'-separated strings."""

from __future__ import annotations

from cloudmgr.exceptions import InvalidPathError


def normalize_path(path: str | None) -> str:
    """Collapse duplicate slashes and strip the trailing slash.

    ``None`` and empty strings map to the root. ``..`` segments are rejected
    rather than resolved so a path can never climb above its drive root.
    """
    if not path:
        return "/"
    parts = [p for p in path.replace("\\", "/").split("/") if p and p != "."]
    if ".." in parts:
        raise InvalidPathError("Path traversal is not allowed", path=path)
    return "/" + "/".join(parts)


def join_path(parent: str, name: str) -> str:
    parent = normalize_path(parent)
    return f"/{name}" if parent == "/" else f"{parent}/{name}"


def parent_path(path: str) -> str:
    path = normalize_path(path)
    return path.rsplit("/", 1)[0] or "/"


def basename(path: str) -> str:
    return normalize_path(path).rsplit("/", 1)[-1]


def validate_name(name: str) -> str:
    """Check a single path component (new file or folder name)."""
    name = name.strip()
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise InvalidPathError(f"Invalid name: {name!r}")
    return name
