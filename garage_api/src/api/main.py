from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.logging import configure_logging, correlation_id_var, user_id_var
from src.core.settings import get_app_settings
from src.db.run_migrations import main as run_alembic
from src.db.seed import seed_all
from src.db.session import dispose_engine
from src.schemas.common import ErrorInfo, ErrorResponse, MessageResponse

from src.api.routes.auth import router as auth_router
from src.api.routes.energy_entries import router as energy_entries_router
from src.api.routes.reports import router as reports_router
from src.api.routes.service_records import router as service_records_router
from src.api.routes.stats import router as stats_router
from src.api.routes.users import router as users_router
from src.api.routes.vehicles import router as vehicles_router

settings = get_app_settings()

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness probe."},
    {"name": "Auth", "description": "Registration, login and token rotation."},
    {"name": "Users", "description": "Profile and login sessions of the current user."},
    {"name": "Vehicles", "description": "Vehicles and their allowed energy types."},
    {"name": "Energy Entries", "description": "Fuel fill-ups and charging sessions."},
    {"name": "Service Records", "description": "Maintenance history, line items and service types."},
    {"name": "Statistics", "description": "Vehicle and dashboard statistics."},
    {"name": "Reports", "description": "Exportable vehicle history (CSV/Excel/PDF)."},
]

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=openapi_tags,
)

# CORS - avoid wildcard with credentials
cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
    logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
    cors_allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=cors_allow_credentials,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Bind a correlation id to the request for logging and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    token_corr = correlation_id_var.set(corr)
    token_user = user_id_var.set(None)
    request.state.correlation_id = corr

    logger.info("Incoming request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = corr
        return response
    finally:
        correlation_id_var.reset(token_corr)
        user_id_var.reset(token_user)


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=getattr(request.state, "correlation_id", None),
        path=request.url.path,
        method=request.method,
        timestamp=datetime.now(tz=timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"), headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Wrap HTTP errors in the standard envelope.

    Business errors arrive with a ``{code, description}`` detail; the code
    becomes the envelope's error type.
    """
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        error_type = str(exc.detail["code"])
        message = str(exc.detail.get("description") or error_type)
    else:
        error_type = "http_error"
        message = str(exc.detail)
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type=error_type,
        message=message,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _build_error_response(
        request=request,
        status_code=400,
        error_type="validation_error",
        message="Request validation failed",
        details=jsonable_encoder(exc.errors()),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler to avoid leaking stack traces and to return a structured error.
    """
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
    )


@app.on_event("startup")
async def on_startup() -> None:
    """
    Run migrations and optional seeding on service startup.

    Migration failures are logged and do not stop the app; seeding is opt-in.
    """
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            logger.info("Running Alembic migrations: upgrade head")
            # env.py drives its own event loop.
            await asyncio.to_thread(run_alembic, ["upgrade", "head"])
            logger.info("Migrations completed.")
        except Exception as exc:
            logger.exception("Migration step failed: %s", exc)

    if settings.AUTO_SEED:
        try:
            logger.info("Running database seeding...")
            await seed_all()
            logger.info("Seeding completed.")
        except Exception as exc:
            logger.exception("Seeding step failed: %s", exc)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await dispose_engine()


api_v1 = APIRouter(prefix="/api/v1")


# PUBLIC_INTERFACE
@api_v1.get(
    "/health",
    response_model=MessageResponse,
    summary="Health Check",
    tags=["Health"],
)
def health_check() -> MessageResponse:
    """Basic liveness health check endpoint."""
    return MessageResponse(message="Healthy")


api_v1.include_router(auth_router)
api_v1.include_router(users_router)
api_v1.include_router(vehicles_router)
api_v1.include_router(energy_entries_router)
api_v1.include_router(service_records_router)
api_v1.include_router(stats_router)
api_v1.include_router(reports_router)

app.include_router(api_v1)
