"""Homepage banner rows, read from site options."""
from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ekusey.db.repository import ProductRepository

logger = logging.getLogger(__name__)

# Checked in order; the first non-empty one wins
BANNER_OPTION_KEYS = (
    "homepage_banner",
    "ekusey_options",
    "ekusey_options_fields",
    "scf_ekusey_options",
    "scf_options_ekusey_options",
)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


async def _resolve_row(repo: ProductRepository, index: int, row: dict) -> dict:
    banner = row.get("banner")
    image_id: Optional[int] = None
    url: Optional[str] = None
    alt: Optional[str] = None

    if _as_int(banner) is not None:
        image_id = _as_int(banner)
    elif isinstance(banner, dict):
        image_id = _as_int(banner.get("ID"))
        url = banner.get("url")
        alt = banner.get("alt")
    elif isinstance(banner, str):
        url = banner

    if image_id and (not url or not alt):
        media = await repo.get_media(image_id)
        if media is not None:
            url = url or media.url
            alt = alt or media.alt

    return {
        "index": index,
        "image_id": image_id,
        "image_url": url,
        "image_alt": alt,
        "raw": row,
    }


async def get_banner(session: AsyncSession) -> dict:
    repo = ProductRepository(session)

    rows: Any = None
    for key in BANNER_OPTION_KEYS:
        value = await repo.get_option(key)
        if value:
            rows = value
            break

    if isinstance(rows, dict):
        # Repeater rows saved as {"0": {...}, "1": {...}}
        rows = list(rows.values())
    if not isinstance(rows, list):
        rows = []

    items = [
        await _resolve_row(repo, i, row)
        for i, row in enumerate(rows)
        if isinstance(row, dict)
    ]
    return {"ok": True, "count": len(items), "items": items}


async def inspect_options(session: AsyncSession) -> dict:
    """Which banner option keys hold data (operator debug view)."""
    repo = ProductRepository(session)
    checked = {}
    for key in BANNER_OPTION_KEYS:
        value = await repo.get_option(key)
        if isinstance(value, (list, dict)):
            checked[key] = {"type": "array", "count": len(value)}
        else:
            checked[key] = {
                "type": type(value).__name__ if value is not None else "NULL",
                "value_preview": value[:120] if isinstance(value, str) else value,
            }
    return {
        "ok": True,
        "checked": checked,
        "note": "If none contains your data, the banner rows are stored under a different option key.",
    }
