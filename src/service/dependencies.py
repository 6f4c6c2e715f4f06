"""
FastAPI dependencies for the Rizzler service.

The access controller and reply generator are created once in the
application lifespan and stored on ``app.state``; these functions hand them
to route handlers.
"""
from fastapi import Request, Response

from access import AccessController, AccessRequest, client_address_from_headers
from agent import GenerateReply
from .config import SESSION_COOKIE_NAME, SESSION_HEADER_NAME, CookieConfig


def get_access_controller(request: Request) -> AccessController:
    return request.app.state.access_controller


def get_reply_generator(request: Request) -> GenerateReply:
    return request.app.state.reply_generator


def get_cookie_config(request: Request) -> CookieConfig:
    return request.app.state.cookie_config


def get_session_token(request: Request, body_token: str | None = None) -> str | None:
    """Session token from the cookie, then the X-Session-Id header, then the request body."""
    return (
        request.cookies.get(SESSION_COOKIE_NAME)
        or request.headers.get(SESSION_HEADER_NAME)
        or body_token
    )


def build_access_request(request: Request, body_token: str | None = None) -> AccessRequest:
    return AccessRequest(
        client_address=client_address_from_headers(request.headers),
        client_agent=request.headers.get("user-agent"),
        session_token=get_session_token(request, body_token),
    )


def attach_session_cookie(response: Response, session_id: str, cookie_config: CookieConfig) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        max_age=cookie_config.max_age,
        httponly=True,
        secure=cookie_config.secure,
        samesite=cookie_config.samesite,
        path="/",
    )
