"""Ekusey Commerce API: FastAPI application."""
from __future__ import annotations

import logging

from ekusey.logging_config import setup_logging
setup_logging()
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from ekusey.db.engine import engine, get_session
from ekusey.db.tables import Base
from ekusey.errors import CommerceError

# ── Sentry Error Tracking ────────────────────────
if settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR),
        ],
        # Referral cookies identify visitors
        send_default_pii=False,
        before_send=lambda event, hint: (
            {**event, "request": {**event.get("request", {}), "cookies": None}}
            if "request" in event else event
        ),
    )

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate settings and create tables on startup."""
    from ekusey.startup_checks import validate_settings
    validate_settings()

    # Register every table with Base.metadata
    import ekusey.db.order_tables  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")

    yield

    logger.info("Shutting down, draining connections...")
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Ekusey Commerce API",
    version="0.3.0",
    description="Storefront catalog, homepage banner and affiliate commission tracking",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Affiliate ?ref= capture
from ekusey.middleware.referral import ReferralCookieMiddleware
app.add_middleware(ReferralCookieMiddleware)

# Request ID tracing, outermost so every log line carries it
from ekusey.middleware.request_id import RequestIDMiddleware
app.add_middleware(RequestIDMiddleware)


from ekusey.api.products import router as products_router
from ekusey.api.banner import router as banner_router
from ekusey.api.checkout import router as checkout_router
from ekusey.api.commissions import router as commissions_router

app.include_router(products_router)
app.include_router(banner_router)
app.include_router(checkout_router)
app.include_router(commissions_router)


@app.get("/")
async def storefront_home():
    """Storefront landing. Visiting with ?ref=CODE stores the affiliate cookie."""
    return {"name": "Ekusey", "products": "/api/v1/products", "banner": "/api/v1/homepage-banner"}


@app.get("/health")
async def health(session: AsyncSession = Depends(get_session)):
    """Deep health check: validates DB connectivity."""
    try:
        from sqlalchemy import text
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        logger.warning("Health check: database unreachable", exc_info=True)
        db_status = "error"
    status = "ok" if db_status == "connected" else "degraded"
    return {"status": status, "db": db_status, "version": "0.3.0"}


# --- Structured Error Responses ---

from fastapi import Request as FastAPIRequest
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException


@app.exception_handler(CommerceError)
async def commerce_error_handler(request: FastAPIRequest, exc: CommerceError):
    """Domain failures → {success: false, error, message, ...}."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: FastAPIRequest, exc: RequestValidationError):
    """Return clean, structured validation errors instead of raw Pydantic output."""
    errors = []
    for err in exc.errors():
        field = " → ".join(str(loc) for loc in err["loc"]) if err.get("loc") else "unknown"
        errors.append({"field": field, "message": err["msg"]})
    return JSONResponse(status_code=422, content={
        "success": False,
        "error": "validation_error",
        "message": "Invalid request data",
        "details": errors,
    })


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: FastAPIRequest, exc: StarletteHTTPException):
    """Consistent error envelope for all HTTP errors."""
    return JSONResponse(status_code=exc.status_code, content={
        "success": False,
        "error": exc.detail if isinstance(exc.detail, str) else "error",
        "message": exc.detail,
    }, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: FastAPIRequest, exc: Exception):
    """Catch-all for unhandled exceptions: never leak stack traces."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={
        "success": False,
        "error": "internal_error",
        "message": "Something went wrong. Please try again.",
    })
