"""xdocs Backend - Main FastAPI Application

Document repository with per-document access control and a download
release workflow.

This module creates and configures the FastAPI application, including:
- All API routers (auth, users, documents, download requests, observability)
- Middleware (request ID correlation, body size limit, CORS)
- Exception handlers translating domain errors to JSON responses
- Startup: schema creation, default admin bootstrap, blob store root
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings
from .database import get_db_session, init_db
from .errors import XDocsError
from .storage.blob_store import LocalBlobStore
from .users.service import ensure_default_admin

# Observability
from .observability.logging_config import configure_logging
from .observability.middleware import BodySizeLimitMiddleware, RequestIDMiddleware
from .observability.router import router as observability_router

# Routers
from .auth.router import router as auth_router
from .users.router import router as users_router, account_router
from .documents.router import router as documents_router
from .download_requests.router import (
    router as download_requests_router,
    document_router as document_requests_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: ensure schema, default admin and blob root exist."""
    settings = get_settings()
    logger.info("xdocs API starting up...")

    init_db()
    with get_db_session() as session:
        ensure_default_admin(session, settings)
    LocalBlobStore(settings.STORAGE_ROOT).ensure_root()

    yield

    logger.info("xdocs API shutting down...")


def _error_response(status_code: int, code: str, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": code, "message": message},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(XDocsError)
    async def xdocs_exception_handler(request: Request, exc: XDocsError) -> JSONResponse:
        """Domain errors carry their own status and code."""
        if exc.status_code >= 500:
            logger.error(
                f"{type(exc).__name__} on {request.method} {request.url.path}",
                exc_info=exc,
            )
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return _error_response(exc.status_code, exc.code, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning(
            f"Validation error on {request.method} {request.url.path}",
            extra={"reason": str(exc.errors())}
        )
        return _error_response(status.HTTP_400_BAD_REQUEST, "invalid_input", "invalid request body")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = "not_found" if exc.status_code == 404 else "http_error"
        return _error_response(exc.status_code, code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(
        request: Request,
        exc: SQLAlchemyError
    ) -> JSONResponse:
        """Log the full error, return a generic message."""
        logger.error(
            f"Database error on {request.method} {request.url.path}",
            exc_info=exc
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "database_error", "database error"
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}",
            exc_info=exc
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "internal error"
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or get_settings()

    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    app = FastAPI(
        title="xdocs API",
        description="Document repository with access control and download release workflow",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Last added runs first: CORS → request id → body size limit
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_UPLOAD_SIZE_BYTES)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
    )

    register_exception_handlers(app)

    app.include_router(observability_router)
    app.include_router(auth_router)
    app.include_router(account_router)
    app.include_router(users_router)
    app.include_router(documents_router)
    app.include_router(document_requests_router)
    app.include_router(download_requests_router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app on BIND_ADDR."""
    settings = get_settings()
    uvicorn.run(
        "xdocs.main:app",
        host=settings.bind_host,
        port=settings.bind_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
