import logging
import time
from typing import Mapping, Optional

from limits import RateLimitItem, parse
from limits.aio import strategies
from limits.aio.storage import MemoryStorage, Storage
from limits.storage import storage_from_string

from .config import RateLimitStrategy
from .models import RateLimitResult

logger = logging.getLogger('rizzler.access.rate_limiter')

UNKNOWN_ADDRESS = "unknown"
FORWARDED_ADDRESS_HEADERS = ("x-forwarded-for", "x-real-ip")

_STRATEGIES = {
    RateLimitStrategy.FIXED_WINDOW: strategies.FixedWindowRateLimiter,
    RateLimitStrategy.MOVING_WINDOW: strategies.MovingWindowRateLimiter,
}


def client_address_from_headers(headers: Mapping[str, str]) -> str:
    """
    Derive the rate limiting key for a request.

    Uses the first address of the first forwarded-address header present.
    Requests without any such header all share the "unknown" bucket.
    """
    for header in FORWARDED_ADDRESS_HEADERS:
        value = headers.get(header)
        if value:
            address = value.split(",")[0].strip()
            if address:
                return address
    return UNKNOWN_ADDRESS


def async_storage_uri(storage_uri: str) -> str:
    """redis://host:6379 -> async+redis://host:6379"""
    return storage_uri if storage_uri.startswith("async+") else f"async+{storage_uri}"


async def create_storage(storage_uri: Optional[str] = None) -> Storage:
    """
    Create the async counter storage for the rate limiter.

    Redis is reached through redis-py's asyncio client so a rate limit check
    never blocks the event loop.

    Args:
        storage_uri: A limits storage URI such as redis://host:6379. Memory storage when None.
    """
    if not storage_uri:
        logger.warning("REDIS_URL not set - rate limiter using in-memory storage (not shared between processes)")
        return MemoryStorage()

    try:
        uri = async_storage_uri(storage_uri)
        options = {"implementation": "redispy"} if "redis" in uri.split("://", 1)[0] else {}
        storage = storage_from_string(uri, **options)
        if not await storage.check():
            raise ConnectionError("storage health check failed")
        logger.info("Rate limiter using shared storage")
        return storage
    except Exception as e:
        logger.error(f"Error initializing rate limiter storage: {type(e).__name__}: {str(e)}")
        logger.warning("Falling back to in-memory rate limiting")
        return MemoryStorage()


class RateLimiter:
    """
    Per-address request counter guarding raw request volume.

    Windows live in the limits storage and expire with their window, so idle
    addresses do not accumulate. The shared "unknown" bucket gets its own,
    larger capacity (``limit * unknown_capacity_multiplier``) over the same
    window length.
    """

    def __init__(
        self,
        limit: RateLimitItem | str = "20/minute",
        strategy: RateLimitStrategy = RateLimitStrategy.FIXED_WINDOW,
        storage: Optional[Storage] = None,
        unknown_capacity_multiplier: int = 5,
    ):
        if unknown_capacity_multiplier < 1:
            raise ValueError("unknown_capacity_multiplier must be at least 1")

        self.limit = parse(limit) if isinstance(limit, str) else limit
        self.unknown_limit = type(self.limit)(
            self.limit.amount * unknown_capacity_multiplier,
            self.limit.multiples,
            namespace=self.limit.namespace,
        )
        self.storage = storage if storage is not None else MemoryStorage()
        self._strategy = _STRATEGIES[RateLimitStrategy(strategy)](self.storage)

    @property
    def window_seconds(self) -> int:
        return self.limit.get_expiry()

    def _limit_for(self, client_address: str) -> RateLimitItem:
        return self.unknown_limit if client_address == UNKNOWN_ADDRESS else self.limit

    async def check_rate_limit(self, client_address: Optional[str]) -> RateLimitResult:
        """
        Count one request from an address against its current window.

        Returns:
            RateLimitResult with allowed=False and a retry_after hint (seconds)
            once the window's capacity is used up.
        """
        address = client_address or UNKNOWN_ADDRESS
        item = self._limit_for(address)

        if await self._strategy.hit(item, "address", address):
            return RateLimitResult(allowed=True)

        stats = await self._strategy.get_window_stats(item, "address", address)
        retry_after = max(0.0, stats.reset_time - time.time())
        logger.warning(f"Rate limit exceeded for {'unknown bucket' if address == UNKNOWN_ADDRESS else 'client address'}, "
                       f"retry after {retry_after:.1f}s")
        return RateLimitResult(allowed=False, retry_after=retry_after)

    async def reset(self) -> None:
        """Drop every window."""
        await self.storage.reset()
