import logging

from fastapi import APIRouter, Request, Response, HTTPException, Depends

from access import AccessController, DailyLimitReached
from schema import SessionResponse, UsageInfoResponse
from ..authorization import raise_for_denial
from ..config import CookieConfig
from ..dependencies import (
    attach_session_cookie,
    build_access_request,
    get_access_controller,
    get_cookie_config,
    get_session_token,
)

logger = logging.getLogger('rizzler.service.routers.session')

router = APIRouter(
    tags=["session"],
)

APPROACHING_LIMIT_RATIO = 0.8


@router.post("/session")
async def open_session(
    request: Request,
    response: Response,
    controller: AccessController = Depends(get_access_controller),
    cookie_config: CookieConfig = Depends(get_cookie_config),
) -> SessionResponse:
    """
    Resume the presented session, or start a new anonymous one.

    Does not consume any daily usage. A session that has used up today's
    quota is still resumed, with zero seconds remaining.
    """
    decision = await controller.authorize(build_access_request(request))

    if isinstance(decision, DailyLimitReached):
        session_id, is_new_session, remaining = decision.session_id, False, 0
    else:
        allowed = raise_for_denial(decision)
        session_id, is_new_session, remaining = allowed.session_id, allowed.is_new_session, allowed.remaining_seconds

    if is_new_session:
        logger.info("Anonymous session created")

    session = await controller.get_session(session_id)
    attach_session_cookie(response, session_id, cookie_config)

    return SessionResponse(
        session_id=session_id,
        is_new_session=is_new_session,
        expires_at=session.expires_at if session else None,
        daily_limit_seconds=controller.quota_ledger.daily_limit_seconds,
        remaining_seconds=remaining,
    )


@router.get("/usage")
async def get_usage(
    request: Request,
    controller: AccessController = Depends(get_access_controller),
) -> UsageInfoResponse:
    """Daily usage for the presented session."""
    usage = await controller.usage(get_session_token(request))
    if usage is None:
        raise HTTPException(
            status_code=404,
            detail={
                "error": "No active session",
                "error_code": "session_not_found",
                "message": "Start a chat to begin a new session.",
            },
        )

    return UsageInfoResponse(
        seconds_used_today=usage.seconds_used_today,
        daily_limit_seconds=usage.daily_limit_seconds,
        remaining_seconds=usage.remaining_seconds,
        resets_at=usage.resets_at,
        accounting=usage.accounting,
        approaching_limit=usage.seconds_used_today >= usage.daily_limit_seconds * APPROACHING_LIMIT_RATIO,
    )
