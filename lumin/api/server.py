"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import psycopg
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from lumin import __version__
from lumin.api import (
    ai_routes,
    auth_routes,
    challenge_routes,
    entry_routes,
    export_routes,
    goal_routes,
    metrics_routes,
    profile_routes,
    stats_routes,
)
from lumin.api.middleware import setup_cors, setup_rate_limiting
from lumin.api.responses import error_response
from lumin.config import ENVIRONMENT
from lumin.db.connection import db
from lumin.exceptions import ConflictError, LuminError, wrap_external_exception
from lumin.observability.metrics import errors_total, exceptions_unhandled_total, init_metrics
from lumin.observability.metrics_middleware import setup_metrics_middleware
from lumin.services.container import ServiceContainer, init_container

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application"""
    # Startup
    logger.info("Starting API server...")
    await db.init_pool()
    logger.info("Database pool initialized")

    if app.state.container is None:
        app.state.container = init_container()

    yield

    # Shutdown
    logger.info("Shutting down API server...")
    await db.close_pool()
    logger.info("Database pool closed")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "body"
    return f"{field}: {first.get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    """Translate every failure into the {success, message, error} envelope"""

    @app.exception_handler(LuminError)
    async def lumin_error_handler(request: Request, exc: LuminError):
        errors_total.labels(error_type=exc.__class__.__name__, status=exc.status_code).inc()
        data = exc.context if isinstance(exc, ConflictError) and exc.context else None
        return error_response(
            exc.status_code,
            exc.user_message,
            error={"type": exc.__class__.__name__, "request_id": exc.request_id},
            data=data,
        )

    @app.exception_handler(psycopg.Error)
    async def database_error_handler(request: Request, exc: psycopg.Error):
        wrapped = wrap_external_exception(exc, operation=f"{request.method} {request.url.path}")
        return await lumin_error_handler(request, wrapped)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors_total.labels(error_type="RequestValidationError", status=422).inc()
        return error_response(
            422,
            _validation_message(exc),
            error={
                "type": "RequestValidationError",
                "details": [
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                    for e in exc.errors()
                ],
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        errors_total.labels(error_type="HTTPException", status=exc.status_code).inc()
        return error_response(exc.status_code, str(exc.detail), error={"type": "HTTPException"})

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        errors_total.labels(error_type="RateLimitExceeded", status=429).inc()
        logger.warning(f"Rate limit exceeded for {request.client.host if request.client else 'unknown'}")
        return error_response(
            429,
            "Too many requests, please try again later",
            error={"type": "RateLimitExceeded", "limit": str(exc.detail)},
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        exceptions_unhandled_total.labels(exception_type=type(exc).__name__).inc()
        return error_response(500, "Internal server error", error={"type": "InternalServerError"})


def create_api_application(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create and configure FastAPI application

    Args:
        container: Service container to use; built at startup when omitted
    """
    app = FastAPI(
        title="LUMIN API",
        description="Gamified journaling, goals and AI coaching",
        version=__version__,
        lifespan=lifespan
    )
    app.state.container = container

    # Setup middleware
    setup_cors(app)
    setup_rate_limiting(app)
    setup_metrics_middleware(app)

    # Include routes
    app.include_router(metrics_routes.router)
    app.include_router(auth_routes.router)
    app.include_router(profile_routes.router)
    app.include_router(entry_routes.router)
    app.include_router(goal_routes.router)
    app.include_router(challenge_routes.router)
    app.include_router(stats_routes.router)
    app.include_router(ai_routes.router)
    app.include_router(export_routes.router)

    register_exception_handlers(app)
    init_metrics(__version__, ENVIRONMENT)

    logger.info("FastAPI application created")

    return app
