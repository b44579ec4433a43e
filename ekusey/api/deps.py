"""Shared FastAPI dependencies for the commission endpoints."""
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from ekusey.db.engine import get_session
from ekusey.services.commission import CommissionCalculator
from ekusey.services.commission_lifecycle import CommissionLifecycle
from ekusey.services.conversion_gateway import ConversionGateway, build_conversion_gateway


def get_commission_calculator() -> CommissionCalculator:
    return CommissionCalculator(rate=settings.AFFILIATE_COMMISSION_RATE)


def get_conversion_gateway() -> ConversionGateway:
    return build_conversion_gateway()


def get_commission_lifecycle(
    session: AsyncSession = Depends(get_session),
    calculator: CommissionCalculator = Depends(get_commission_calculator),
    gateway: ConversionGateway = Depends(get_conversion_gateway),
) -> CommissionLifecycle:
    return CommissionLifecycle(
        session,
        calculator=calculator,
        gateway=gateway,
        currency_symbol=settings.CURRENCY_SYMBOL,
    )
