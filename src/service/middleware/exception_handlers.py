import logging
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.exception_handlers import http_exception_handler

logger = logging.getLogger('rizzler.service.middleware')


async def custom_http_exception_handler(request: Request, exc: HTTPException):
    """Return structured error details as the response body"""
    if isinstance(exc.detail, dict):
        logger.info(f"ACCESS_ERROR_RESPONSE: {exc.status_code} - {exc.detail.get('error_code')}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail,
            headers=exc.headers,
        )

    # For other HTTP exceptions, use default handler but log the details
    logger.info(f"OTHER_HTTP_EXCEPTION: {exc.status_code} - {exc.detail}")
    return await http_exception_handler(request, exc)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Invalid input is a 400 with the first problem spelled out, e.g. "Message is required" """
    errors = exc.errors()
    error = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    # pydantic prefixes messages raised from validators
    error = error.removeprefix("Value error, ")

    logger.info(f"INVALID_REQUEST: {request.url.path} - {error}")
    return JSONResponse(
        status_code=400,
        content={
            "error": error,
            "error_code": "invalid_request",
            "message": "Please check your input and try again.",
        },
    )
