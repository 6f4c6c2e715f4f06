import logging
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from access import InternalStoreFailure
from agent import ReplyGenerationError

logger = logging.getLogger('rizzler.service.middleware')


def error_response(status_code: int, error: str, error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "error_code": error_code,
            "message": message,
        },
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Turn errors that escape a route into JSON responses.

    - InternalStoreFailure: 503, no session could be allocated
    - ReplyGenerationError: 502, the model call failed and nothing was charged
    - anything else: 500
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except HTTPException:
            # Handled by the registered HTTPException handler
            raise
        except InternalStoreFailure as exc:
            logger.error(f"Session store failure for {request.url.path}: {exc}")
            return error_response(
                503,
                "Service temporarily unavailable",
                "session_store_unavailable",
                "We couldn't start your session. Please try again in a moment.",
            )
        except ReplyGenerationError as exc:
            logger.error(f"Reply generation failed for {request.url.path}: {exc}")
            return error_response(
                502,
                "The assistant is unavailable right now",
                "upstream_error",
                "Something went wrong generating a reply. Please try again.",
            )
        except Exception as exc:
            logger.error(f"Unexpected error for {request.url.path}: {str(exc)}", exc_info=True)
            return error_response(
                500,
                "Internal server error occurred",
                "internal_error",
                "An unexpected error occurred. Please try again later.",
            )
