import logging
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request, HTTPException

from ..config import SESSION_COOKIE_NAME, SESSION_HEADER_NAME

logger = logging.getLogger('rizzler.service.middleware')


class RequestResponseLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log requests and responses without leaking session tokens"""

    async def dispatch(self, request: Request, call_next):
        logger.debug(f"REQUEST_DEBUG: {request.method} {request.url.path}")

        has_cookie = SESSION_COOKIE_NAME in request.cookies
        has_header = SESSION_HEADER_NAME in request.headers
        logger.debug(f"REQUEST_DEBUG: Session cookie present: {has_cookie}, session header present: {has_header}")

        try:
            response = await call_next(request)

            logger.debug(f"RESPONSE_DEBUG: Status {response.status_code}")
            if response.status_code >= 400:
                logger.warning(f"ERROR_RESPONSE_DEBUG: Status {response.status_code} for {request.method} {request.url.path}")

            return response

        except HTTPException as exc:
            logger.error(f"HTTP_EXCEPTION_DEBUG: Status {exc.status_code}, Detail: {exc.detail}")
            raise
        except Exception as exc:
            logger.error(f"UNEXPECTED_EXCEPTION_DEBUG: {type(exc)}: {str(exc)}")
            raise
