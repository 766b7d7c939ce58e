"""Drive schemas: stored configuration and API views."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class DriveType(str, Enum):
    LOCAL = "local"
    WEBDAV = "webdav"


class DriveQuota(BaseModel):
    used: int = 0
    total: int = 0


class Drive(BaseModel):
    """Persisted drive configuration (credentials included)."""
    id: str
    name: str
    type: DriveType
    url: str | None = None
    username: str | None = None
    password: str | None = None
    path: str | None = None
    quota: DriveQuota | None = None


class DriveCreate(BaseModel):
    id: str | None = Field(default=None, max_length=64)
    name: str = Field(min_length=1, max_length=200)
    type: DriveType = DriveType.WEBDAV
    url: str | None = None
    username: str | None = None
    password: str | None = None

    @model_validator(mode="after")
    def _require_url(self) -> "DriveCreate":
        if self.type == DriveType.WEBDAV and not self.url:
            raise ValueError("WebDAV drives need a url")
        return self


class DriveUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    url: str | None = None
    username: str | None = None
    password: str | None = None


class DriveOut(BaseModel):
    """Drive as returned to clients: the password never leaves the server."""
    id: str
    name: str
    type: DriveType
    url: str | None = None
    username: str | None = None
    path: str | None = None
    quota: DriveQuota | None = None
    has_password: bool = False

    @classmethod
    def from_drive(cls, drive: Drive) -> "DriveOut":
        data = drive.model_dump(exclude={"password"})
        return cls(**data, has_password=bool(drive.password))
