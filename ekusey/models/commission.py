"""Commission data models shared by the lifecycle service and the admin API."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class CommissionStatus(str, Enum):
    PENDING = "pending"
    CLAIMED = "claimed"
    PAID = "paid"


class CommissionView(BaseModel):
    """What the order screen shows for a referred order."""
    order_id: int
    referral_code: str
    net_profit: Decimal
    commission_rate: Decimal
    rate_percentage: str  # "30%"
    commission_amount: Decimal
    status: CommissionStatus
    claimable: bool
    claimed_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None


class ClaimResult(BaseModel):
    success: bool = True
    message: str
    order_id: int
    status: CommissionStatus
    api_response: Any = None


class MarkPaidResult(BaseModel):
    success: bool = True
    changed: int
    message: str
