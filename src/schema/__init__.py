from .schema import (
    PickupLinesRequest,
    PickupLinesResponse,
    TinderBioRequest,
    TinderBioResponse,
    ChatRequest,
    ChatResponse,
    ChatTurn,
    SessionResponse,
    StatusResponse,
    UsageInfoResponse,
    sanitize_text,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ChatTurn",
    "SessionResponse",
    "StatusResponse",
    "UsageInfoResponse",
    "PickupLinesRequest",
    "PickupLinesResponse",
    "TinderBioRequest",
    "TinderBioResponse",
    "sanitize_text",
]
