"""
FastAPI Application Factory

Creates and configures the IQX API server with:
- CORS middleware
- Lifespan events (engine and session factory on app.state)
- Exception handlers mapping IQX errors to HTTP statuses
- API router mounting
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException

from iqx.api.v1.health import router as health_router
from iqx.api.v1.router import api_router
from iqx.api.v1.schemas import APIError
from iqx.core.config import Settings, settings as default_settings
from iqx.core.database import build_engine, check_database_connection, create_session_factory
from iqx.core.exceptions import (
    IQXException,
    InvalidParameterError,
    ProviderError,
    ResourceNotFoundError,
)
from iqx.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def status_for(exc: IQXException) -> int:
    if isinstance(exc, ResourceNotFoundError):
        return 404
    if isinstance(exc, InvalidParameterError):
        return 400
    if isinstance(exc, ProviderError):
        return 502
    return 500


def _error_response(status_code: int, error: APIError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(error.model_dump()))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Startup: build the engine unless one was injected, check the database
    Shutdown: dispose the engine if this lifespan created it
    """
    config: Settings = app.state.settings
    logger.info(
        f"Starting {config.app_name} v{config.app_version} (environment={config.environment})"
    )

    owns_engine = getattr(app.state, "engine", None) is None
    if owns_engine:
        app.state.engine = build_engine(config=config)
        app.state.session_factory = create_session_factory(app.state.engine)

    if await check_database_connection(app.state.session_factory):
        logger.info("Database connection verified")
    else:
        # Keep serving so /health can report the outage
        logger.critical("Database connection failed - running in degraded mode")

    yield

    logger.info("Shutting down...")
    if owns_engine:
        await app.state.engine.dispose()
        app.state.engine = None
    logger.info("Shutdown complete")


def create_app(
    config: Settings = default_settings,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """
    Application factory pattern.

    Args:
        config: Settings to run with
        engine: Pre-built engine (tests); built in the lifespan otherwise
    """
    app = FastAPI(
        title=config.app_name,
        description="Vietnamese stock-market company data synced from Simplize.",
        version=config.app_version,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine) if engine is not None else None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(IQXException)
    async def iqx_exception_handler(request: Request, exc: IQXException):
        """Handle custom IQX exceptions."""
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        error = APIError(error=exc.code.lower(), message=exc.message, details=exc.details)
        return _error_response(status_code, error)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Reject malformed query and path parameters with 400."""
        details = [
            {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
            for error in exc.errors()
        ]
        error = APIError(
            error="invalid_parameter",
            message="Request validation failed",
            details={"errors": details},
        )
        return _error_response(400, error)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        error = APIError(
            error="http_error", message=str(exc.detail), details={"status_code": exc.status_code}
        )
        return _error_response(exc.status_code, error)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.exception(f"Unhandled exception: {exc}")
        error = APIError(
            error="internal_error",
            message="An unexpected error occurred" if not config.debug else str(exc),
        )
        return _error_response(500, error)

    app.include_router(health_router, prefix="/health", tags=["Health"])
    app.include_router(api_router, prefix=config.api_prefix)

    return app


def run() -> None:
    """Entry point for ``iqx-api``."""
    import uvicorn

    setup_logging(default_settings.log_level, default_settings.log_format)
    uvicorn.run(
        "iqx.api.main:create_app",
        factory=True,
        host=default_settings.api_host,
        port=default_settings.api_port,
    )


if __name__ == "__main__":
    run()
