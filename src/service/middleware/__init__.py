import logging as log
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .logging import RequestResponseLoggingMiddleware
from .error_handling import ErrorHandlingMiddleware
from .exception_handlers import custom_http_exception_handler, request_validation_exception_handler

logger = log.getLogger('rizzler.service.middleware')


def setup_middleware(
    app: FastAPI,
    cors_allowed_origins: list[str],
    cors_allowed_methods: list[str],
    cors_allowed_headers: list[str]
):
    """
    Setup all middleware and exception handlers for the FastAPI application.

    Middleware are added in reverse order (last added = first executed).
    Current order of execution:
    1. CORSMiddleware (handles CORS)
    2. ErrorHandlingMiddleware (maps store, upstream and unhandled errors)
    3. RequestResponseLoggingMiddleware (logs requests/responses)

    Args:
        app: FastAPI application instance
        cors_allowed_origins: List of allowed CORS origins
        cors_allowed_methods: List of allowed HTTP methods
        cors_allowed_headers: List of allowed headers
    """
    app.add_exception_handler(HTTPException, custom_http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

    app.add_middleware(RequestResponseLoggingMiddleware)

    app.add_middleware(ErrorHandlingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allowed_origins,
        allow_credentials=True,
        allow_methods=cors_allowed_methods,
        allow_headers=cors_allowed_headers,
    )

    logger.info(f"CORS configured with origins: {cors_allowed_origins}")


__all__ = [
    'setup_middleware',
    'RequestResponseLoggingMiddleware',
    'ErrorHandlingMiddleware',
    'custom_http_exception_handler',
    'request_validation_exception_handler',
]
