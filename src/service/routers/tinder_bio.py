import logging

from fastapi import APIRouter, Request, Response, Depends

from access import AccessController
from agent import TINDER_BIO_PROMPT, TINDER_BIO_SAMPLING, GenerateReply, build_messages
from schema import TinderBioRequest, TinderBioResponse
from ..config import CookieConfig
from ..dependencies import get_access_controller, get_cookie_config, get_reply_generator
from ..exchange import run_exchange

logger = logging.getLogger('rizzler.service.routers.tinder_bio')

router = APIRouter(
    tags=["generators"],
)


@router.post("/tinder-bio")
async def tinder_bio(
    bio_request: TinderBioRequest,
    request: Request,
    response: Response,
    controller: AccessController = Depends(get_access_controller),
    reply_generator: GenerateReply = Depends(get_reply_generator),
    cookie_config: CookieConfig = Depends(get_cookie_config),
) -> TinderBioResponse:
    """
    Write dating profile bios.

    Personality, interests, profession, age and style are all optional;
    details that are blank or too long are left out of the prompt.
    """
    logger.debug(f"Tinder bio requested with {len(bio_request.details())} details")

    result = await run_exchange(
        request,
        response,
        controller,
        reply_generator,
        cookie_config,
        build_messages([], bio_request.prompt(), system_prompt=TINDER_BIO_PROMPT),
        body_token=bio_request.session_id,
        **TINDER_BIO_SAMPLING,
    )
    return TinderBioResponse(
        bios=result.reply,
        session_id=result.session_id,
        remaining_seconds=result.remaining_seconds,
    )
