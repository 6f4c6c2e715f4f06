import math
import logging

from fastapi import HTTPException

from access import AuthDecision, Allowed, DailyLimitReached, RateLimited

logger = logging.getLogger('rizzler.service.authorization')


def raise_for_denial(decision: AuthDecision) -> Allowed:
    """
    Turn a denied access decision into the matching HTTP error.

    Returns:
        The decision itself when access is allowed

    Raises:
        HTTPException: 429 when rate limited, 403 when the daily limit is reached
    """
    if isinstance(decision, RateLimited):
        retry_after = max(1, math.ceil(decision.retry_after))
        raise HTTPException(
            status_code=429,
            detail={
                "error": "Too many requests. Please slow down.",
                "error_code": "rate_limit_exceeded",
                "message": f"Please try again in {retry_after} seconds.",
                "retry_after": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )

    if isinstance(decision, DailyLimitReached):
        raise HTTPException(
            status_code=403,
            detail={
                "error": "Daily limit reached. Please try again tomorrow.",
                "error_code": "daily_limit_reached",
                "message": "You've used all of today's free time. Come back tomorrow for more.",
                "resets_at": decision.resets_at.isoformat(),
            },
        )

    return decision
