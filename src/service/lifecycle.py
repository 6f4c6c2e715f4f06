import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from access import AccessController

logger = logging.getLogger('rizzler.service.lifecycle')


async def periodic_session_sweep(controller: AccessController, interval_seconds: int = 300):
    """Periodically evict expired sessions and their usage records"""
    while True:
        try:
            logger.debug("Running scheduled sweep of expired sessions")
            removed = await controller.sweep_expired()
            if removed > 0:
                logger.info(f"Session sweep completed: removed {removed} expired sessions")
        except Exception as e:
            logger.error(f"Error during session sweep: {e}", exc_info=True)

        await asyncio.sleep(interval_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = app.state.access_settings

    # One controller, and one set of stores, for the life of the process
    if getattr(app.state, "access_controller", None) is None:
        app.state.access_controller = await AccessController.from_settings(settings)
    controller: AccessController = app.state.access_controller

    sweep_task = asyncio.create_task(
        periodic_session_sweep(controller, interval_seconds=settings.sweep_interval_seconds)
    )
    logger.info(f"Session sweep scheduled every {settings.sweep_interval_seconds}s")

    yield

    sweep_task.cancel()
    try:
        await sweep_task
    except asyncio.CancelledError:
        logger.info("Session sweep task cancelled during shutdown")
