"""Homepage banner endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ekusey.auth import CAP_MANAGE_OPTIONS, Actor, get_actor
from ekusey.db.engine import get_session
from ekusey.errors import PermissionDenied
from ekusey.services.banner import get_banner, inspect_options

router = APIRouter(prefix="/api/v1", tags=["Homepage"])


@router.get("/homepage-banner")
async def homepage_banner(session: AsyncSession = Depends(get_session)):
    return await get_banner(session)


@router.get("/options")
async def options_debug(
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
):
    """Operator-only: which option keys hold banner data."""
    if not actor.can(CAP_MANAGE_OPTIONS):
        raise PermissionDenied("You do not have permission to view options.")
    return await inspect_options(session)
