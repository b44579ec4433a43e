"""Startup validation: catch misconfigurations before the app serves traffic."""
from __future__ import annotations

import logging
import sys

from config.settings import settings
from ekusey.services.commission import to_decimal

logger = logging.getLogger(__name__)

_DEFAULT_NONCE_SECRET = "ekusey-dev-nonce-secret-change-in-prod"


def validate_settings() -> list[str]:
    """Validate configuration. Returns list of warnings (empty = all good).

    Raises SystemExit for critical misconfigurations in production.
    """
    warnings: list[str] = []
    is_prod = settings.DATABASE_URL and "sqlite" not in settings.DATABASE_URL

    if is_prod and settings.NONCE_SECRET == _DEFAULT_NONCE_SECRET:
        logger.critical("NONCE_SECRET is still the default! Set a real secret for production.")
        sys.exit(1)

    rate = to_decimal(settings.AFFILIATE_COMMISSION_RATE)
    if rate is None or rate < 0 or rate > 1:
        logger.critical("AFFILIATE_COMMISSION_RATE must be a number between 0 and 1, got %r",
                        settings.AFFILIATE_COMMISSION_RATE)
        sys.exit(1)

    if is_prod and "*" in settings.CORS_ORIGINS:
        warnings.append("CORS_ORIGINS is set to *, restrict in production")

    if not settings.ADMIN_API_KEY:
        warnings.append("ADMIN_API_KEY not set, operator endpoints will reject every request")

    if not settings.AFFILIATE_CONVERSION_URL:
        warnings.append("AFFILIATE_CONVERSION_URL not set, commission claims will fail")
    elif not settings.AFFILIATE_CONVERSION_URL.startswith("https://"):
        warnings.append("AFFILIATE_CONVERSION_URL is not HTTPS")

    if not settings.AFFILIATE_CONVERSION_VERIFY_SSL:
        warnings.append("AFFILIATE_CONVERSION_VERIFY_SSL is off, conversion API certificate not checked")

    for w in warnings:
        logger.warning("⚠️  %s", w)

    if not warnings:
        logger.info("✅ All startup checks passed")

    return warnings
