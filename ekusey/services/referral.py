"""
Referral tracking for the affiliate program.

A storefront visit with ``?ref=CODE`` stores the code client-side in the
``affiliate_bloom_ref`` cookie for a fixed lifetime (30 days by default).
The cookie value carries its own expiry, so a replayed cookie past its
lifetime reads as "no referral".

Flow:
  GET /?ref=ABC123 →
  ReferralTracker.capture() → Set-Cookie: affiliate_bloom_ref=ABC123|<expires>
  POST /api/v1/checkout (cookie) → ReferralTracker.current() → "ABC123"
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)

COOKIE_NAME = "affiliate_bloom_ref"
REF_PARAM = "ref"
DEFAULT_LIFETIME_DAYS = 30

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*?>")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"[\r\n\t ]+")


def sanitize_text_field(value: Optional[str]) -> str:
    """Strip tags, percent-encoded octets, control characters and extra whitespace."""
    if not value:
        return ""
    text = _SCRIPT_STYLE_RE.sub("", value)
    text = _TAG_RE.sub("", text)
    text = text.replace("<", "&lt;")  # lone '<' that did not open a tag
    text = _CONTROL_RE.sub("", text)
    while _OCTET_RE.search(text):
        text = _OCTET_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def cookie_domain_for(host: str) -> Optional[str]:
    """Scope the cookie to the host, except on local/dev hosts (no domain attribute)."""
    if not host or "localhost" in host or ":" in host:
        return None
    return host


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ReferralAttribution:
    """The referral a visitor currently carries."""
    code: str
    captured_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def cookie_value(self) -> str:
        return f"{quote(self.code, safe='')}|{int(self.expires_at.timestamp())}"


@dataclass(frozen=True)
class ReferralCookie:
    """Everything needed to emit the Set-Cookie header."""
    code: str
    value: str
    max_age: int
    expires: datetime
    domain: Optional[str]
    secure: bool
    name: str = COOKIE_NAME
    path: str = "/"
    httponly: bool = True


class ReferralTracker:
    """Captures and reads the visitor's referral attribution."""

    def __init__(
        self,
        lifetime_days: int = DEFAULT_LIFETIME_DAYS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.lifetime = timedelta(days=lifetime_days)
        self._clock = clock

    def capture(self, ref: Optional[str], host: str = "", secure: bool = False) -> Optional[ReferralCookie]:
        """Build the cookie for a request's ``ref`` parameter, or None if there is nothing to store."""
        code = sanitize_text_field(ref)
        if not code:
            return None

        now = self._clock()
        attribution = ReferralAttribution(
            code=code,
            captured_at=now,
            expires_at=now + self.lifetime,
        )
        logger.info("Affiliate referral captured: %s", code)
        return ReferralCookie(
            code=attribution.code,
            value=attribution.cookie_value(),
            max_age=int(self.lifetime.total_seconds()),
            expires=attribution.expires_at,
            domain=cookie_domain_for(host),
            secure=secure,
        )

    def parse(self, cookie_value: Optional[str]) -> Optional[ReferralAttribution]:
        if not cookie_value:
            return None
        raw_code, sep, raw_expires = cookie_value.rpartition("|")
        if not sep:
            return None
        try:
            expires_at = datetime.fromtimestamp(int(raw_expires), tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
        code = sanitize_text_field(unquote(raw_code))
        if not code:
            return None
        return ReferralAttribution(
            code=code,
            captured_at=expires_at - self.lifetime,
            expires_at=expires_at,
        )

    def current(self, cookie_value: Optional[str]) -> str:
        """Return the stored referral code, or "" if none or expired."""
        attribution = self.parse(cookie_value)
        if attribution is None or attribution.is_expired(self._clock()):
            return ""
        return attribution.code
