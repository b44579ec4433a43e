"""Tests for the homepage banner and the options debug view."""
from __future__ import annotations

import pytest

from conftest import ADMIN_HEADERS, get_test_session
from ekusey.db.tables import MediaRow, OptionRow


async def _set_option(key, value):
    async with get_test_session() as session:
        session.add(OptionRow(key=key, value=value))
        await session.commit()


@pytest.mark.asyncio
async def test_no_banner_configured(client):
    resp = await client.get("/api/v1/homepage-banner")
    assert resp.json() == {"ok": True, "count": 0, "items": []}


@pytest.mark.asyncio
async def test_rows_resolve_images(client):
    async with get_test_session() as session:
        session.add(MediaRow(id=5, url="https://cdn.test/hero.jpg", alt="Hero"))
        await session.commit()
    await _set_option("homepage_banner", [
        {"banner": 5},
        {"banner": {"ID": 5, "url": "https://cdn.test/custom.jpg"}},
        {"banner": "https://cdn.test/plain.jpg"},
    ])

    items = (await client.get("/api/v1/homepage-banner")).json()["items"]
    assert [i["index"] for i in items] == [0, 1, 2]
    assert items[0]["image_url"] == "https://cdn.test/hero.jpg"
    assert items[0]["image_alt"] == "Hero"
    assert items[1]["image_url"] == "https://cdn.test/custom.jpg"
    assert items[1]["image_alt"] == "Hero"
    assert items[2]["image_id"] is None
    assert items[2]["image_url"] == "https://cdn.test/plain.jpg"
    assert items[2]["raw"] == {"banner": "https://cdn.test/plain.jpg"}


@pytest.mark.asyncio
async def test_falls_back_to_later_keys(client):
    await _set_option("homepage_banner", [])
    await _set_option("scf_ekusey_options", {"0": {"banner": "https://cdn.test/a.jpg"}})

    data = (await client.get("/api/v1/homepage-banner")).json()
    assert data["count"] == 1
    assert data["items"][0]["image_url"] == "https://cdn.test/a.jpg"


@pytest.mark.asyncio
async def test_options_debug_view(client):
    await _set_option("homepage_banner", [{"banner": 1}, {"banner": 2}])
    await _set_option("ekusey_options", "legacy")

    resp = await client.get("/api/v1/options", headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    checked = resp.json()["checked"]
    assert checked["homepage_banner"] == {"type": "array", "count": 2}
    assert checked["ekusey_options"] == {"type": "str", "value_preview": "legacy"}
    assert checked["scf_ekusey_options"] == {"type": "NULL", "value_preview": None}


@pytest.mark.asyncio
async def test_options_debug_view_requires_admin(client):
    resp = await client.get("/api/v1/options")
    assert resp.status_code == 403
