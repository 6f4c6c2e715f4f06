"""
Configuration for session and access control.

All values are read once from the environment at process start and are
fixed for the lifetime of the process.
"""
import os
import logging
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger('rizzler.access.config')


class UsageAccounting(StrEnum):
    FLAT = "flat"
    ELAPSED = "elapsed"


class RateLimitStrategy(StrEnum):
    FIXED_WINDOW = "fixed-window"
    MOVING_WINDOW = "moving-window"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class AccessSettings:
    """Process-wide limits for sessions, daily quota and request rate."""
    session_ttl_seconds: int = 24 * 60 * 60
    sliding_expiry: bool = False
    sweep_interval_seconds: int = 5 * 60
    daily_limit_seconds: int = 5 * 60
    usage_accounting: UsageAccounting = UsageAccounting.FLAT
    flat_usage_cost_seconds: int = 30
    rate_limit: str = "20/minute"
    rate_limit_strategy: RateLimitStrategy = RateLimitStrategy.FIXED_WINDOW
    unknown_bucket_capacity_multiplier: int = 5
    storage_uri: str | None = None

    @classmethod
    def from_env(cls) -> "AccessSettings":
        settings = cls(
            session_ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", 24 * 60 * 60)),
            sliding_expiry=_env_bool("SESSION_SLIDING_EXPIRY", "false"),
            sweep_interval_seconds=int(os.getenv("SESSION_SWEEP_INTERVAL_SECONDS", 5 * 60)),
            daily_limit_seconds=int(os.getenv("DAILY_LIMIT_SECONDS", 5 * 60)),
            usage_accounting=UsageAccounting(os.getenv("USAGE_ACCOUNTING", "flat").lower()),
            flat_usage_cost_seconds=int(os.getenv("FLAT_USAGE_COST_SECONDS", 30)),
            rate_limit=os.getenv("RATE_LIMIT", "20/minute"),
            rate_limit_strategy=RateLimitStrategy(os.getenv("RATE_LIMIT_STRATEGY", "fixed-window").lower()),
            unknown_bucket_capacity_multiplier=int(os.getenv("UNKNOWN_BUCKET_CAPACITY_MULTIPLIER", 5)),
            storage_uri=os.getenv("REDIS_URL"),
        )
        logger.info(
            f"Access settings: session_ttl={settings.session_ttl_seconds}s, "
            f"daily_limit={settings.daily_limit_seconds}s, rate_limit={settings.rate_limit} "
            f"({settings.rate_limit_strategy}), accounting={settings.usage_accounting}"
        )
        return settings
