"""App settings: loaded from environment."""
from __future__ import annotations

import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # API
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8000"))

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///ekusey.db")

    # Storefront base URL (for product permalinks)
    STORE_BASE_URL = os.getenv("STORE_BASE_URL", "")
    CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "$")

    # Operator API key (for admin endpoints: claims, bulk actions, pricing)
    ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "")

    # Secret used to sign action nonces (claim button)
    NONCE_SECRET = os.getenv("NONCE_SECRET", "ekusey-dev-nonce-secret-change-in-prod")

    # Affiliate commissions
    AFFILIATE_COMMISSION_RATE = os.getenv("AFFILIATE_COMMISSION_RATE", "0.30")
    AFFILIATE_COOKIE_DAYS = int(os.getenv("AFFILIATE_COOKIE_DAYS", "30"))

    # Affiliate conversion API (claim step)
    AFFILIATE_CONVERSION_URL = os.getenv(
        "AFFILIATE_CONVERSION_URL",
        "https://affiliate.example.com/wp-json/affiliate-bloom/v1/conversion",
    )
    AFFILIATE_CONVERSION_API_KEY = os.getenv("AFFILIATE_CONVERSION_API_KEY", "")
    AFFILIATE_CONVERSION_TIMEOUT = float(os.getenv("AFFILIATE_CONVERSION_TIMEOUT", "30"))
    AFFILIATE_CONVERSION_VERIFY_SSL = _env_bool("AFFILIATE_CONVERSION_VERIFY_SSL", "true")

    # CORS origins (comma-separated, or * for dev)
    CORS_ORIGINS = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")
    ]

    # Observability
    SENTRY_DSN = os.getenv("SENTRY_DSN", "")
    SENTRY_ENVIRONMENT = os.getenv("SENTRY_ENVIRONMENT", "development")
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))

    # Logging
    LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
