"""Domain errors surfaced to API callers as structured failures."""
from __future__ import annotations

from typing import Any


class CommerceError(Exception):
    """Base class. Each subclass maps to an error code and HTTP status."""

    code = "error"
    status_code = 400

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": self.code,
            "message": self.message,
            **self.extra,
        }


class PermissionDenied(CommerceError):
    code = "permission_denied"
    status_code = 403


class NotFound(CommerceError):
    code = "not_found"
    status_code = 404


class InvalidInput(CommerceError):
    code = "invalid_input"
    status_code = 400


class AlreadyProcessed(CommerceError):
    code = "already_processed"
    status_code = 409


class ExternalCallFailed(CommerceError):
    """Transport-level failure talking to the conversion API."""

    code = "external_call_failed"
    status_code = 502


class ExternalCallRejected(CommerceError):
    """Conversion API answered with a non-success status."""

    code = "external_call_rejected"
    status_code = 502

    def __init__(self, http_status: int, body: str):
        super().__init__(
            f"API returned error (Code: {http_status}): {body[:200]}",
            code=http_status,
            details=body,
        )
        self.http_status = http_status
        self.body = body
