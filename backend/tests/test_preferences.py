"""Tests for the UI preference routes."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_roundtrip(client: AsyncClient):
    resp = await client.put("/api/preferences/last_path", json={"value": "/docs"})
    assert resp.status_code == 200

    resp = await client.get("/api/preferences/last_path")
    assert resp.json() == {"key": "last_path", "value": "/docs"}

    resp = await client.put("/api/preferences/last_path", json={"value": "/"})
    assert (await client.get("/api/preferences/last_path")).json()["value"] == "/"


@pytest.mark.asyncio
async def test_unset_is_404(client: AsyncClient):
    resp = await client.get("/api/preferences/app_lang")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete(client: AsyncClient):
    await client.put("/api/preferences/last_drive", json={"value": "nut"})

    assert (await client.delete("/api/preferences/last_drive")).status_code == 204
    assert (await client.delete("/api/preferences/last_drive")).status_code == 404


@pytest.mark.asyncio
async def test_drive_registry_key_not_writable(client: AsyncClient):
    resp = await client.put("/api/preferences/cloud_mgr_drives", json={"value": "[]"})
    assert resp.status_code == 400
