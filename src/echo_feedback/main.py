"""Main entry point for the Echo feedback application."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from echo_feedback.api.endpoints import (
    admin_router,
    auth_router,
    feedbacks_router,
    reports_router,
    users_router,
)
from echo_feedback.core.errors import EchoError
from echo_feedback.core.logging import configure_logging
from echo_feedback.core.settings import settings
from echo_feedback.db.session import SessionLocal, create_tables
from echo_feedback.schemas import Envelope, ErrorResponse
from echo_feedback.services.auth_service import ensure_admin_account

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Feedback collection and moderation API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)


def _error_response(
    status_code: int,
    message: str,
    details: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=message, details=details or None)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


@app.exception_handler(EchoError)
async def handle_echo_error(request: Request, exc: EchoError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.status_code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(error.get("loc", ("",))[0] == "path" for error in errors):
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid resource identifier")

    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        field = ".".join(loc[1:]) or (loc[0] if loc else "")
        details.append({"field": field, "message": error.get("msg", "Invalid value")})
    return _error_response(status.HTTP_400_BAD_REQUEST, "Validation error", details)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(IntegrityError)
async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return _error_response(status.HTTP_400_BAD_REQUEST, "Duplicate value")


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if settings.debug else "Internal Server Error"
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


# Include API routers
app.include_router(auth_router, prefix="/api")
app.include_router(feedbacks_router, prefix="/api")
app.include_router(reports_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.on_event("startup")
async def on_startup() -> None:
    if settings.auto_create_tables:
        create_tables()
    if settings.admin_email and settings.admin_password:
        db = SessionLocal()
        try:
            ensure_admin_account(db, settings.admin_email, settings.admin_password)
        finally:
            db.close()
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.get("/api/health", response_model=Envelope[dict[str, str]])
async def health_check() -> Envelope[dict[str, str]]:
    """Health check endpoint to verify the service is running."""
    return Envelope(data={"status": "ok", "version": settings.app_version})


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("echo_feedback.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
