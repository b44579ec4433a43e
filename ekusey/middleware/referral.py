"""Referral capture middleware: stores ?ref= codes in the affiliate cookie."""
from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from config.settings import settings
from ekusey.services.referral import COOKIE_NAME, REF_PARAM, ReferralTracker

_tracker = ReferralTracker(lifetime_days=settings.AFFILIATE_COOKIE_DAYS)


def get_referral_tracker() -> ReferralTracker:
    return _tracker


def current_referral_code(request: Request) -> str:
    """Referral for this request: captured on this very request, else from the cookie."""
    captured = getattr(request.state, "referral_code", "")
    if captured:
        return captured
    return get_referral_tracker().current(request.cookies.get(COOKIE_NAME))


class ReferralCookieMiddleware(BaseHTTPMiddleware):
    """Capture ``?ref=`` on storefront GETs. Operator endpoints never capture."""

    _SKIP_PREFIXES = ("/api/v1/admin/",)

    async def dispatch(self, request: Request, call_next) -> Response:
        cookie = None
        if request.method == "GET" and not request.url.path.startswith(self._SKIP_PREFIXES):
            tracker = get_referral_tracker()
            cookie = tracker.capture(
                request.query_params.get(REF_PARAM),
                host=request.headers.get("host", ""),
                secure=request.url.scheme == "https",
            )
            if cookie is not None:
                request.state.referral_code = cookie.code

        response = await call_next(request)

        if cookie is not None:
            response.set_cookie(
                key=cookie.name,
                value=cookie.value,
                max_age=cookie.max_age,
                expires=cookie.expires,
                path=cookie.path,
                domain=cookie.domain,
                secure=cookie.secure,
                httponly=cookie.httponly,
                samesite="lax",
            )
        return response
