from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class Session(BaseModel):
    """An anonymous browsing identity. The id is the only credential."""
    id: str
    created_at: datetime
    last_activity_at: datetime
    expires_at: datetime
    client_address: str = "unknown"
    client_agent: str = "unknown"


class InvalidReason(str, Enum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"


class InvalidSession(BaseModel):
    reason: InvalidReason


class UsageRecord(BaseModel):
    """Daily usage for one session."""
    seconds_used_today: int = Field(default=0, ge=0)
    last_reset_date: date


class UsageSnapshot(BaseModel):
    session_id: str
    seconds_used_today: int
    daily_limit_seconds: int
    remaining_seconds: int
    resets_at: datetime
    accounting: str


class RateLimitResult(BaseModel):
    allowed: bool
    retry_after: Optional[float] = None


class AccessRequest(BaseModel):
    client_address: str = "unknown"
    client_agent: Optional[str] = None
    session_token: Optional[str] = None


# Authorization decisions returned to the routing layer

class Allowed(BaseModel):
    session_id: str
    is_new_session: bool = False
    remaining_seconds: int


class RateLimited(BaseModel):
    retry_after: float


class DailyLimitReached(BaseModel):
    session_id: str
    resets_at: datetime


AuthDecision = Union[Allowed, RateLimited, DailyLimitReached]
