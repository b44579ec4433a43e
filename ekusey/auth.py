"""Operator authentication, capabilities and action nonces."""
from __future__ import annotations

import hashlib
import hmac
import math
import time
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Header

from config.settings import settings

# ---- Capabilities ----

CAP_EDIT_SHOP_ORDERS = "edit_shop_orders"
CAP_EDIT_PRODUCTS = "edit_products"
CAP_MANAGE_OPTIONS = "manage_options"

OPERATOR_CAPABILITIES = frozenset({CAP_EDIT_SHOP_ORDERS, CAP_EDIT_PRODUCTS, CAP_MANAGE_OPTIONS})


@dataclass(frozen=True)
class Actor:
    """Whoever triggered an operator action."""
    id: str
    capabilities: frozenset[str] = field(default_factory=frozenset)

    def can(self, capability: str) -> bool:
        return capability in self.capabilities


ANONYMOUS = Actor(id="anonymous")
OPERATOR = Actor(id="operator", capabilities=OPERATOR_CAPABILITIES)


def actor_for_key(api_key: Optional[str]) -> Actor:
    """Timing-safe admin key check. Unknown keys get no capabilities."""
    expected = settings.ADMIN_API_KEY
    if not expected or not api_key:
        return ANONYMOUS
    if not hmac.compare_digest(api_key.encode(), expected.encode()):
        return ANONYMOUS
    return OPERATOR


async def get_actor(x_admin_key: Optional[str] = Header(None)) -> Actor:
    """FastAPI dependency. Capability checks happen in the services."""
    return actor_for_key(x_admin_key)


# ---- Action nonces ----
# A nonce is valid for the current 12-hour tick and the one before it,
# so a page rendered just before a tick boundary keeps working.

_NONCE_LIFE = 24 * 3600
CLAIM_COMMISSION_ACTION = "affiliate_claim_commission"


def _tick(now: Optional[float] = None) -> int:
    now = time.time() if now is None else now
    return math.ceil(now / (_NONCE_LIFE / 2))


def _nonce_for(tick: int, action: str, actor_id: str) -> str:
    msg = f"{tick}|{action}|{actor_id}".encode()
    digest = hmac.new(settings.NONCE_SECRET.encode(), msg, hashlib.sha256).hexdigest()
    return digest[-12:]


def create_nonce(action: str, actor: Actor, now: Optional[float] = None) -> str:
    return _nonce_for(_tick(now), action, actor.id)


def verify_nonce(nonce: Optional[str], action: str, actor: Actor, now: Optional[float] = None) -> bool:
    if not nonce:
        return False
    tick = _tick(now)
    for candidate in (tick, tick - 1):
        if hmac.compare_digest(nonce.encode(), _nonce_for(candidate, action, actor.id).encode()):
            return True
    return False
