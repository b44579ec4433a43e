"""Tests for the commission admin endpoints (claim, mark paid, order panel)."""
from __future__ import annotations

import pytest

from conftest import ADMIN_HEADERS
from ekusey.auth import CLAIM_COMMISSION_ACTION, OPERATOR, create_nonce
from ekusey.middleware.referral import get_referral_tracker
from ekusey.services.referral import COOKIE_NAME

CART = {"items": [{"product_id": 10, "quantity": 2}, {"product_id": 11, "quantity": 1}]}


async def _checkout(client, code="ABC123") -> int:
    headers = {}
    if code:
        headers["Cookie"] = f"{COOKIE_NAME}={get_referral_tracker().capture(code).value}"
    resp = await client.post("/api/v1/checkout", json=CART, headers=headers)
    assert resp.status_code == 200
    return resp.json()["order_id"]


def _nonce() -> str:
    return create_nonce(CLAIM_COMMISSION_ACTION, OPERATOR)


class TestOrderPanel:
    @pytest.mark.asyncio
    async def test_referred_order(self, client, catalog):
        order_id = await _checkout(client)
        resp = await client.get(f"/api/v1/admin/orders/{order_id}/commission", headers=ADMIN_HEADERS)
        assert resp.status_code == 200
        data = resp.json()
        assert data["referred"] is True
        assert data["referral_code"] == "ABC123"
        assert data["commission_amount"] == "24.00"
        assert data["rate_percentage"] == "30%"
        assert data["status"] == "pending"
        assert data["claimable"] is True

    @pytest.mark.asyncio
    async def test_unreferred_order(self, client, catalog):
        order_id = await _checkout(client, code="")
        resp = await client.get(f"/api/v1/admin/orders/{order_id}/commission", headers=ADMIN_HEADERS)
        assert resp.json() == {"order_id": order_id, "referred": False}

    @pytest.mark.asyncio
    async def test_missing_order(self, client):
        resp = await client.get("/api/v1/admin/orders/777/commission", headers=ADMIN_HEADERS)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_admin_key(self, client, catalog):
        order_id = await _checkout(client)
        resp = await client.get(f"/api/v1/admin/orders/{order_id}/commission", headers={"X-Admin-Key": "nope"})
        assert resp.status_code == 403


class TestClaimEndpoint:
    @pytest.mark.asyncio
    async def test_claim(self, client, catalog, conversion_api):
        order_id = await _checkout(client)
        resp = await client.post(
            "/api/v1/admin/commissions/claim",
            json={"order_id": order_id, "nonce": _nonce()},
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["message"] == "Commission claimed successfully! Amount: $24.00"
        assert data["status"] == "claimed"
        assert conversion_api.payloads == [
            {"affiliate_code": "ABC123", "commission_amount": 24.0, "order_id": order_id}
        ]

        panel = await client.get(f"/api/v1/admin/orders/{order_id}/commission", headers=ADMIN_HEADERS)
        assert panel.json()["status"] == "claimed"
        assert panel.json()["claimable"] is False

    @pytest.mark.asyncio
    async def test_second_claim_is_conflict(self, client, catalog, conversion_api):
        order_id = await _checkout(client)
        body = {"order_id": order_id, "nonce": _nonce()}
        await client.post("/api/v1/admin/commissions/claim", json=body, headers=ADMIN_HEADERS)
        resp = await client.post("/api/v1/admin/commissions/claim", json=body, headers=ADMIN_HEADERS)
        assert resp.status_code == 409
        assert resp.json() == {
            "success": False,
            "error": "already_processed",
            "message": "Commission has already been claimed.",
        }
        assert len(conversion_api.requests) == 1

    @pytest.mark.asyncio
    async def test_bad_nonce(self, client, catalog, conversion_api):
        order_id = await _checkout(client)
        resp = await client.post(
            "/api/v1/admin/commissions/claim",
            json={"order_id": order_id, "nonce": "forged"},
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 403
        assert resp.json()["message"] == "Security check failed. Please refresh the page and try again."
        assert conversion_api.requests == []

    @pytest.mark.asyncio
    async def test_anonymous_claim(self, client, catalog, conversion_api):
        order_id = await _checkout(client)
        resp = await client.post(
            "/api/v1/admin/commissions/claim",
            json={"order_id": order_id, "nonce": _nonce()},
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_conversion_api_error_surfaces(self, client, catalog, conversion_api):
        conversion_api.status_code = 500
        conversion_api.body = "Internal Server Error"
        order_id = await _checkout(client)
        resp = await client.post(
            "/api/v1/admin/commissions/claim",
            json={"order_id": order_id, "nonce": _nonce()},
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 502
        data = resp.json()
        assert data["success"] is False
        assert data["error"] == "external_call_rejected"
        assert data["message"] == "API returned error (Code: 500): Internal Server Error"
        assert data["code"] == 500
        assert data["details"] == "Internal Server Error"

        panel = await client.get(f"/api/v1/admin/orders/{order_id}/commission", headers=ADMIN_HEADERS)
        assert panel.json()["status"] == "pending"

    @pytest.mark.asyncio
    async def test_invalid_order_id(self, client, conversion_api):
        resp = await client.post(
            "/api/v1/admin/commissions/claim",
            json={"order_id": 0, "nonce": _nonce()},
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid order ID."


class TestMarkPaidEndpoint:
    @pytest.mark.asyncio
    async def test_bulk_mark_paid(self, client, catalog):
        referred = [await _checkout(client, code="A"), await _checkout(client, code="B")]
        plain = await _checkout(client, code="")

        resp = await client.post(
            "/api/v1/admin/commissions/mark-paid",
            json={"order_ids": referred + [plain]},
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "changed": 2, "message": "2 commissions marked as paid."}

        for order_id in referred:
            panel = await client.get(f"/api/v1/admin/orders/{order_id}/commission", headers=ADMIN_HEADERS)
            assert panel.json()["status"] == "paid"
            assert panel.json()["paid_at"] is not None

    @pytest.mark.asyncio
    async def test_singular_message(self, client, catalog):
        order_id = await _checkout(client)
        resp = await client.post(
            "/api/v1/admin/commissions/mark-paid",
            json={"order_ids": [order_id]},
            headers=ADMIN_HEADERS,
        )
        assert resp.json()["message"] == "1 commission marked as paid."

    @pytest.mark.asyncio
    async def test_requires_admin_key(self, client, catalog):
        order_id = await _checkout(client)
        resp = await client.post("/api/v1/admin/commissions/mark-paid", json={"order_ids": [order_id]})
        assert resp.status_code == 403
