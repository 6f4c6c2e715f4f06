from .prompts import PICKUP_LINES_PROMPT, RIZZLER_SYSTEM_PROMPT, TINDER_BIO_PROMPT
from .reply import (
    PICKUP_LINES_SAMPLING,
    TINDER_BIO_SAMPLING,
    GenerateReply,
    ModelConfig,
    ReplyGenerationError,
    ReplyGenerator,
    build_messages,
    clean_reply,
)

__all__ = [
    "PICKUP_LINES_PROMPT",
    "PICKUP_LINES_SAMPLING",
    "RIZZLER_SYSTEM_PROMPT",
    "TINDER_BIO_PROMPT",
    "TINDER_BIO_SAMPLING",
    "GenerateReply",
    "ModelConfig",
    "ReplyGenerationError",
    "ReplyGenerator",
    "build_messages",
    "clean_reply",
]
