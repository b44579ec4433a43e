"""Tests for structured error responses."""
from __future__ import annotations

import pytest

from ekusey.errors import (
    AlreadyProcessed,
    CommerceError,
    ExternalCallFailed,
    ExternalCallRejected,
    InvalidInput,
    NotFound,
    PermissionDenied,
)


@pytest.mark.parametrize("cls,code,status", [
    (PermissionDenied, "permission_denied", 403),
    (NotFound, "not_found", 404),
    (InvalidInput, "invalid_input", 400),
    (AlreadyProcessed, "already_processed", 409),
    (ExternalCallFailed, "external_call_failed", 502),
])
def test_error_codes(cls, code, status):
    err = cls("boom")
    assert isinstance(err, CommerceError)
    assert err.status_code == status
    assert err.to_dict() == {"success": False, "error": code, "message": "boom"}


def test_rejected_carries_code_and_details():
    err = ExternalCallRejected(418, "teapot")
    assert err.to_dict() == {
        "success": False,
        "error": "external_call_rejected",
        "message": "API returned error (Code: 418): teapot",
        "code": 418,
        "details": "teapot",
    }


@pytest.mark.asyncio
async def test_404_returns_structured_error(client):
    resp = await client.get("/api/v1/does-not-exist")
    assert resp.status_code == 404
    data = resp.json()
    assert data["success"] is False
    assert "error" in data
    assert "message" in data


@pytest.mark.asyncio
async def test_validation_error_returns_structured_error(client):
    resp = await client.get("/api/v1/products?page=abc")
    assert resp.status_code == 422
    data = resp.json()
    assert data["error"] == "validation_error"
    assert isinstance(data["details"], list)
    assert data["details"][0]["field"] == "query → page"


@pytest.mark.asyncio
async def test_malformed_claim_body(client):
    resp = await client.post(
        "/api/v1/admin/commissions/claim",
        json={"order_id": "not-a-number"},
        headers={"X-Admin-Key": "test-admin-key"},
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"
