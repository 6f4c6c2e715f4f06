from .chat import router as chat_router
from .session import router as session_router
from .pickup_lines import router as pickup_lines_router
from .tinder_bio import router as tinder_bio_router
from .misc import router as misc_router

__all__ = ["chat_router", "session_router", "pickup_lines_router", "tinder_bio_router", "misc_router"]
