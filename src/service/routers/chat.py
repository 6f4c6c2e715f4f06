import logging

from fastapi import APIRouter, Request, Response, Depends

from access import AccessController
from agent import GenerateReply, build_messages
from schema import ChatRequest, ChatResponse
from ..config import CookieConfig
from ..dependencies import get_access_controller, get_cookie_config, get_reply_generator
from ..exchange import run_exchange

logger = logging.getLogger('rizzler.service.routers.chat')

router = APIRouter(
    tags=["chat"],
)


@router.post("/chat")
async def chat(
    chat_request: ChatRequest,
    request: Request,
    response: Response,
    controller: AccessController = Depends(get_access_controller),
    reply_generator: GenerateReply = Depends(get_reply_generator),
    cookie_config: CookieConfig = Depends(get_cookie_config),
) -> ChatResponse:
    """
    Send a message to Rizzler and get a reply.

    A session is created automatically when the request carries no valid
    session token; the token is returned in the body and as a cookie.
    """
    history = chat_request.sanitized_history()
    logger.debug(f"Chat request with {len(history)} history messages")

    result = await run_exchange(
        request,
        response,
        controller,
        reply_generator,
        cookie_config,
        build_messages(history, chat_request.message),
        body_token=chat_request.session_id,
    )
    return ChatResponse(
        response=result.reply,
        session_id=result.session_id,
        remaining_seconds=result.remaining_seconds,
    )
