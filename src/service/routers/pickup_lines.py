import logging

from fastapi import APIRouter, Request, Response, Depends

from access import AccessController
from agent import PICKUP_LINES_PROMPT, PICKUP_LINES_SAMPLING, GenerateReply, build_messages
from schema import PickupLinesRequest, PickupLinesResponse
from ..config import CookieConfig
from ..dependencies import get_access_controller, get_cookie_config, get_reply_generator
from ..exchange import run_exchange

logger = logging.getLogger('rizzler.service.routers.pickup_lines')

router = APIRouter(
    tags=["generators"],
)


@router.post("/pickup-lines")
async def pickup_lines(
    pickup_request: PickupLinesRequest,
    request: Request,
    response: Response,
    controller: AccessController = Depends(get_access_controller),
    reply_generator: GenerateReply = Depends(get_reply_generator),
    cookie_config: CookieConfig = Depends(get_cookie_config),
) -> PickupLinesResponse:
    """Generate a handful of pickup lines for a category, optionally for a given situation."""
    logger.debug(f"Pickup lines requested for category {pickup_request.category!r}")

    result = await run_exchange(
        request,
        response,
        controller,
        reply_generator,
        cookie_config,
        build_messages([], pickup_request.prompt(), system_prompt=PICKUP_LINES_PROMPT),
        body_token=pickup_request.session_id,
        **PICKUP_LINES_SAMPLING,
    )
    return PickupLinesResponse(
        pickup_lines=result.reply,
        category=pickup_request.category,
        session_id=result.session_id,
        remaining_seconds=result.remaining_seconds,
    )
