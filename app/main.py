"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status
from sqlalchemy import text

from app.core.config import get_settings
from app.core.database import SessionLocal, close_engine
from app.core.metrics import build_metrics_response, instrument_http_request
from app.modules.advising.router import router as advising_router
from app.modules.availability.router import router as availability_router
from app.modules.identity.router import router as identity_router
from app.shared.exceptions import register_exception_handlers
from app.shared.utils import utc_now

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Application startup and shutdown hooks."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info(
        "Starting %s (env=%s, timezone=%s, session cache=%s)",
        settings.app_name,
        settings.app_env,
        settings.institution_timezone,
        settings.session_cache_backend,
    )

    yield

    logger.info("Shutting down %s", settings.app_name)
    await close_engine()


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)
app.middleware("http")(instrument_http_request)

register_exception_handlers(app)

app.include_router(identity_router, prefix=settings.api_prefix)
app.include_router(availability_router, prefix=settings.api_prefix)
app.include_router(advising_router, prefix=settings.api_prefix)


@app.get("/health")
async def healthcheck() -> dict[str, str]:
    """Liveness probe endpoint."""
    return {"status": "ok"}


async def _is_database_ready() -> bool:
    """Return True if DB accepts basic queries."""
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database readiness check failed")
        return False


@app.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Readiness probe endpoint with DB dependency check."""
    if not await _is_database_ready():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not ready",
        )
    return {
        "status": "ready",
        "database": "ok",
        "timestamp": utc_now().isoformat(),
    }


@app.get("/metrics", include_in_schema=False)
async def metrics_endpoint(_: Request) -> Response:
    """Prometheus metrics endpoint."""
    return build_metrics_response()
