"""FastAPI application entry point for AquaLab.

Experiment, user and infrastructure routes. Domain errors render as
{"error": message} with the status carried by the exception class.
"""

import logging

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from src.api.dependencies import get_llm_client
from src.api.experiments import router as experiments_router
from src.api.users import router as users_router
from src.config.settings import get_settings
from src.experiments.errors import ExperimentError

APP_VERSION = "0.1.0"

settings = get_settings()

_LOG_NAME_TO_LEVEL: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# --- Structured logging ---
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if settings.ENVIRONMENT == "dev"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value],
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

# Module loggers use the stdlib; route them through the same level.
logging.basicConfig(level=_LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value])

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

# --- FastAPI app ---
app = FastAPI(
    title="AquaLab API",
    description="Water-quality experiment tracking with AI assessment.",
    version=APP_VERSION,
)

# --- CORS middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ENVIRONMENT == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error rendering ---


@app.exception_handler(ExperimentError)
async def experiment_error_handler(request: Request, exc: ExperimentError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# --- Routers ---
app.include_router(experiments_router)
app.include_router(users_router)


# --- Infrastructure Endpoints ---


@app.get("/health")
async def health_check() -> dict:
    """Liveness probe with component health checks.

    Returns 200 always (degraded status if components are down).
    """
    checks: dict[str, bool] = {"api": True}

    # Database connectivity check
    try:
        from src.db.session import async_session_factory
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception:
        checks["database"] = False

    # Reasoning service is optional: without a key, analysis degrades to fallbacks.
    checks["reasoning_service"] = get_llm_client().is_available

    all_ok = checks["api"] and checks["database"]

    return {
        "status": "ok" if all_ok else "degraded",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
        "checks": checks,
    }


@app.get("/api/version")
async def get_version() -> dict[str, str]:
    """Return application name, version, and environment."""
    return {
        "name": "AquaLab",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
    }
