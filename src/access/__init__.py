"""Anonymous session issuance, daily quota accounting and request rate limiting."""

from .config import AccessSettings, RateLimitStrategy, UsageAccounting
from .controller import AccessController
from .errors import AccessControlError, InternalStoreFailure
from .models import (
    AccessRequest,
    Allowed,
    AuthDecision,
    DailyLimitReached,
    InvalidReason,
    InvalidSession,
    RateLimited,
    RateLimitResult,
    Session,
    UsageRecord,
    UsageSnapshot,
)
from .quota_ledger import QuotaLedger
from .rate_limiter import RateLimiter, client_address_from_headers, create_storage
from .session_store import SessionStore

__all__ = [
    "AccessSettings",
    "RateLimitStrategy",
    "UsageAccounting",
    "AccessController",
    "AccessControlError",
    "InternalStoreFailure",
    "AccessRequest",
    "Allowed",
    "AuthDecision",
    "DailyLimitReached",
    "InvalidReason",
    "InvalidSession",
    "RateLimited",
    "RateLimitResult",
    "Session",
    "UsageRecord",
    "UsageSnapshot",
    "QuotaLedger",
    "RateLimiter",
    "client_address_from_headers",
    "create_storage",
    "SessionStore",
]
