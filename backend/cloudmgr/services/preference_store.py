"""Key/value preference storage on top of the ``preferences`` table."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from cloudmgr.models.preference import Preference


class PreferenceStore:
    def __init__(self, db: AsyncSession):
        self._db = db

    async def get(self, key: str) -> str | None:
        pref = await self._db.get(Preference, key)
        return pref.value if pref else None

    async def set(self, key: str, value: str) -> None:
        """Insert or overwrite; last write wins."""
        pref = await self._db.get(Preference, key)
        if pref is None:
            self._db.add(Preference(key=key, value=value))
        else:
            pref.value = value
        await self._db.commit()

    async def delete(self, key: str) -> bool:
        pref = await self._db.get(Preference, key)
        if pref is None:
            return False
        await self._db.delete(pref)
        await self._db.commit()
        return True
