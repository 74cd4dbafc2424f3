"""
FastAPI application entry point for the portfolio backend.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio.config import get_settings
from portfolio.cors import install_cors, preflight_router
from portfolio.errors import ApiError, MethodNotAllowedError, NotFoundError, StoreError
from portfolio.records import format_timestamp
from portfolio.routes import admin_router, router

logger = logging.getLogger(__name__)


def error_body(code: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": message, "code": code}
    if details:
        body["details"] = details
    body["timestamp"] = format_timestamp(datetime.now(timezone.utc))
    return body


def _error_response(error: ApiError, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=error_body(error.code, error.message, error.details),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        if isinstance(exc, StoreError):
            logger.error(
                "Store failure during %s %s",
                request.method,
                request.url.path,
                exc_info=exc,
            )
            # Never leak driver detail to the caller.
            return _error_response(StoreError())
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = {}
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part != "body"]
            details[".".join(loc) or "body"] = err.get("msg", "Invalid value")
        return JSONResponse(
            status_code=400,
            content=error_body("VALIDATION_ERROR", "Validation failed", details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _error_response(NotFoundError())
        if exc.status_code == 405:
            return _error_response(MethodNotAllowedError(), headers=exc.headers)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body("HTTP_ERROR", str(exc.detail)),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error(
            "Unhandled error during %s %s", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL_ERROR", "Internal server error"),
        )


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    app = FastAPI(title="Portfolio Content API", version="0.1.0")
    register_exception_handlers(app)
    install_cors(app)
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(admin_router, prefix=settings.api_prefix)
    app.include_router(preflight_router(router, admin_router), prefix=settings.api_prefix)
    return app


app = create_app()
