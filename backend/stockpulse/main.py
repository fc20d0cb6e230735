"""StockPulse Backend -- FastAPI Application Entry Point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from stockpulse.api.v1.router import api_v1_router
from stockpulse.config import settings
from stockpulse.core.exceptions import (
    InvalidRequestError,
    StockPulseException,
    StorageError,
    UnsupportedPlatformError,
    validation_message,
)
from stockpulse.core.logging import configure_logging
from stockpulse.crawlers.register_crawlers import register_all_crawlers
from stockpulse.db.session import engine
from stockpulse.db.utils import init_db
from stockpulse.schemas import ErrorDetail, ErrorResponse

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    configure_logging(settings.LOG_LEVEL)
    logger.info("starting_server", environment=settings.ENVIRONMENT, debug=settings.DEBUG)

    await init_db(engine)
    logger.info("database_ready")

    register_all_crawlers(settings=settings)

    yield

    logger.info("shutting_down")
    await engine.dispose()


def _error_response(status_code: int, exc: StockPulseException) -> JSONResponse:
    detail = ErrorDetail(code=exc.code, message=exc.message)
    if isinstance(exc, UnsupportedPlatformError):
        detail.supported = exc.supported
    body = ErrorResponse(error=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def create_app() -> FastAPI:
    app = FastAPI(
        title="StockPulse API",
        description="Stock forum post ingestion across Eastmoney and Xueqiu",
        version="0.1.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        return _error_response(400, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error_response(400, InvalidRequestError(validation_message(exc.errors())))

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("storage_error", path=request.url.path, error=exc.message)
        return _error_response(500, exc)

    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "StockPulse API",
            "version": "0.1.0",
            "docs": "/docs" if settings.DEBUG else None,
            "health": "/api/v1/health",
        }

    return app


app = create_app()
