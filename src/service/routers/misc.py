from fastapi import APIRouter, Request, Depends

from access import AccessController
from schema import StatusResponse
from ..dependencies import get_access_controller

router = APIRouter()


@router.get("/status")
async def get_status(
    request: Request,
    controller: AccessController = Depends(get_access_controller),
) -> StatusResponse:
    """Health check endpoint with configured limits."""
    return StatusResponse(
        status="ok",
        active_sessions=len(controller.session_store),
        daily_limit_seconds=controller.quota_ledger.daily_limit_seconds,
        rate_limit=str(controller.rate_limiter.limit),
    )
