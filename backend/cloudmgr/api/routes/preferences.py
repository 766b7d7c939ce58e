"""UI preference routes — last path, last drive, language, cached drive list."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from cloudmgr.api.deps import get_preference_store
from cloudmgr.schemas.preferences import PreferenceOut, PreferenceValue
from cloudmgr.services.preference_store import PreferenceStore

router = APIRouter()

# The drive list key is owned by the drive registry
ALLOWED_KEYS = frozenset({"last_path", "last_drive", "app_lang", "cached_drives"})


def _check_key(key: str) -> str:
    if key not in ALLOWED_KEYS:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Unknown preference key: {key}")
    return key


@router.get("/{key}", response_model=PreferenceOut)
async def get_preference(key: str, prefs: PreferenceStore = Depends(get_preference_store)):
    value = await prefs.get(_check_key(key))
    if value is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, f"Preference not set: {key}")
    return PreferenceOut(key=key, value=value)


@router.put("/{key}", response_model=PreferenceOut)
async def set_preference(
    key: str,
    body: PreferenceValue,
    prefs: PreferenceStore = Depends(get_preference_store),
):
    await prefs.set(_check_key(key), body.value)
    return PreferenceOut(key=key, value=body.value)


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_preference(key: str, prefs: PreferenceStore = Depends(get_preference_store)):
    if not await prefs.delete(_check_key(key)):
        raise HTTPException(status.HTTP_404_NOT_FOUND, f"Preference not set: {key}")
