"""
One guarded model call: authorize, generate, charge.

Every endpoint that spends the user's daily quota goes through
``run_exchange`` so rate limiting, session handling and usage accounting
behave the same for chat, pickup lines and bios.
"""
import time
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from fastapi import Request, Response
from langchain_core.messages import BaseMessage

from access import AccessController
from agent import GenerateReply
from .authorization import raise_for_denial
from .config import CookieConfig
from .dependencies import attach_session_cookie, build_access_request

logger = logging.getLogger('rizzler.service.exchange')


@dataclass
class ExchangeResult:
    reply: str
    session_id: str
    remaining_seconds: int


async def run_exchange(
    request: Request,
    response: Response,
    controller: AccessController,
    reply_generator: GenerateReply,
    cookie_config: CookieConfig,
    messages: Sequence[BaseMessage],
    body_token: Optional[str] = None,
    **sampling: Any,
) -> ExchangeResult:
    """
    Run one model call on behalf of the requesting session.

    Raises:
        HTTPException: 429 or 403 when access is denied
        ReplyGenerationError: If the model call fails; nothing is charged
        InternalStoreFailure: If a new session could not be allocated
    """
    decision = await controller.authorize(build_access_request(request, body_token))
    allowed = raise_for_denial(decision)

    started = time.monotonic()
    reply = await reply_generator.generate_reply(messages, **sampling)
    elapsed = time.monotonic() - started

    remaining = await controller.record_completion(allowed.session_id, elapsed)
    if remaining is None:
        # the session ended during the call; the client starts over on its next request
        logger.info(f"Reply delivered for a session that expired after {elapsed:.1f}s")
        return ExchangeResult(reply=reply, session_id=allowed.session_id, remaining_seconds=0)

    attach_session_cookie(response, allowed.session_id, cookie_config)
    return ExchangeResult(reply=reply, session_id=allowed.session_id, remaining_seconds=remaining)
