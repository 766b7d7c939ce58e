"""Preference schemas."""

from pydantic import BaseModel


class PreferenceValue(BaseModel):
    value: str


class PreferenceOut(BaseModel):
    key: str
    value: str
