"""SQLAlchemy ORM models for CloudMgr."""

from cloudmgr.models.base import Base
from cloudmgr.models.preference import Preference

__all__ = [
    "Base",
    "Preference",
]
