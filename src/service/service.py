import logging
from typing import Optional

from fastapi import FastAPI

from access import AccessController, AccessSettings
from agent import GenerateReply, ModelConfig, ReplyGenerator

from .config import CookieConfig, get_cors_config
from .lifecycle import lifespan
from .middleware import setup_middleware
from .routers import chat_router, misc_router, pickup_lines_router, session_router, tinder_bio_router

logger = logging.getLogger('rizzler.service')


def create_app(
    settings: Optional[AccessSettings] = None,
    reply_generator: Optional[GenerateReply] = None,
    access_controller: Optional[AccessController] = None,
) -> FastAPI:
    """
    Build the Rizzler FastAPI application.

    Args:
        settings: Access control limits; read from the environment when omitted
        reply_generator: Upstream reply generation; an OpenAI-backed ReplyGenerator when omitted
        access_controller: Pre-built controller, otherwise one is created from settings at startup
    """
    settings = settings or AccessSettings.from_env()

    app = FastAPI(title="Rizzler", lifespan=lifespan)
    app.state.access_settings = settings
    app.state.access_controller = access_controller
    app.state.reply_generator = reply_generator or ReplyGenerator(ModelConfig.from_env())
    app.state.cookie_config = CookieConfig.from_env(max_age=settings.session_ttl_seconds)

    cors_allowed_origins, cors_allowed_methods, cors_allowed_headers = get_cors_config()
    setup_middleware(app, cors_allowed_origins, cors_allowed_methods, cors_allowed_headers)

    app.include_router(session_router)
    app.include_router(chat_router)
    app.include_router(pickup_lines_router)
    app.include_router(tinder_bio_router)
    app.include_router(misc_router)

    return app


app = create_app()
