"""
Conversion-reporting client for the affiliate network.

Claiming a commission POSTs ``{affiliate_code, commission_amount, order_id}``
to the affiliate site's ``/wp-json/affiliate-bloom/v1/conversion`` endpoint.
Only 200/201 count as success. There are no retries: the operator re-triggers
the claim by hand.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

import httpx

from config.settings import settings
from ekusey.errors import ExternalCallFailed, ExternalCallRejected

logger = logging.getLogger(__name__)

SUCCESS_CODES = (200, 201)


@dataclass(frozen=True)
class ConversionReport:
    affiliate_code: str
    commission_amount: Decimal
    order_id: int

    def to_payload(self) -> dict:
        return {
            "affiliate_code": self.affiliate_code,
            "commission_amount": float(self.commission_amount),
            "order_id": self.order_id,
        }


@dataclass(frozen=True)
class ConversionReceipt:
    status_code: int
    body: str

    @property
    def payload(self) -> Any:
        """Decoded JSON body, or None when the body isn't JSON."""
        try:
            return json.loads(self.body)
        except ValueError:
            return None


class ConversionGateway:
    """Synchronous-per-request call to the conversion API."""

    def __init__(
        self,
        url: str,
        api_key: str = "",
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._transport = transport

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def report_conversion(self, report: ConversionReport) -> ConversionReceipt:
        """Send the conversion. Raises ExternalCallFailed / ExternalCallRejected."""
        client_kwargs: dict = {"timeout": self.timeout, "verify": self.verify_ssl}
        if self._transport is not None:
            client_kwargs["transport"] = self._transport

        try:
            async with httpx.AsyncClient(**client_kwargs) as client:
                resp = await client.post(self.url, json=report.to_payload(), headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("Conversion API call failed for order %s: %s", report.order_id, exc)
            raise ExternalCallFailed(f"API call failed: {exc}") from exc

        receipt = ConversionReceipt(status_code=resp.status_code, body=resp.text)
        if resp.status_code not in SUCCESS_CODES:
            logger.warning(
                "Conversion API rejected order %s: HTTP %s %s",
                report.order_id, resp.status_code, receipt.body[:200],
            )
            raise ExternalCallRejected(resp.status_code, receipt.body)

        logger.info(
            "Conversion reported: order=%s code=%s amount=%s",
            report.order_id, report.affiliate_code, report.commission_amount,
        )
        return receipt


def build_conversion_gateway() -> ConversionGateway:
    return ConversionGateway(
        url=settings.AFFILIATE_CONVERSION_URL,
        api_key=settings.AFFILIATE_CONVERSION_API_KEY,
        timeout=settings.AFFILIATE_CONVERSION_TIMEOUT,
        verify_ssl=settings.AFFILIATE_CONVERSION_VERIFY_SSL,
    )
