"""Quota for the local drive: bytes stored in the sandbox against the disk size."""

import shutil
from pathlib import Path

from cloudmgr.schemas.drives import DriveQuota


def sandbox_size(root: str | Path) -> int:
    """Total size of regular files under ``root``; symlinks are not followed."""
    total = 0
    for entry in Path(root).rglob("*"):
        if entry.is_file() and not entry.is_symlink():
            total += entry.stat().st_size
    return total


def sandbox_quota(root: str | Path) -> DriveQuota:
    return DriveQuota(used=sandbox_size(root), total=shutil.disk_usage(str(root)).total)
