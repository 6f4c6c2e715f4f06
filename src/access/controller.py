"""
Access control for the chat endpoints.

The controller is the only entry point the routing layer uses. For each
request it checks, in order:

1. the per-address rate limit,
2. the session (an unknown or expired token silently gets a new session),
3. the session's remaining daily quota.

After the reply has been generated the caller reports completion and the
controller charges the session according to the configured accounting policy.
"""
import logging
import math
from datetime import timedelta
from typing import Optional

from .config import AccessSettings, UsageAccounting
from .models import (
    AccessRequest,
    Allowed,
    AuthDecision,
    DailyLimitReached,
    InvalidSession,
    RateLimited,
    Session,
    UsageSnapshot,
)
from .quota_ledger import QuotaLedger
from .rate_limiter import RateLimiter, create_storage
from .session_store import SessionStore, mask_token

logger = logging.getLogger('rizzler.access.controller')


class AccessController:

    def __init__(
        self,
        session_store: SessionStore,
        quota_ledger: QuotaLedger,
        rate_limiter: RateLimiter,
        usage_accounting: UsageAccounting = UsageAccounting.FLAT,
        flat_usage_cost_seconds: int = 30,
    ):
        self.session_store = session_store
        self.quota_ledger = quota_ledger
        self.rate_limiter = rate_limiter
        self.usage_accounting = UsageAccounting(usage_accounting)
        self.flat_usage_cost_seconds = flat_usage_cost_seconds

        # usage records live exactly as long as their session
        self.session_store.add_eviction_listener(self.quota_ledger.forget)

    @classmethod
    async def from_settings(cls, settings: AccessSettings) -> "AccessController":
        """Build the controller and its three stores from process settings."""
        session_store = SessionStore(
            ttl=timedelta(seconds=settings.session_ttl_seconds),
            sliding_expiry=settings.sliding_expiry,
        )
        quota_ledger = QuotaLedger(daily_limit_seconds=settings.daily_limit_seconds)
        rate_limiter = RateLimiter(
            limit=settings.rate_limit,
            strategy=settings.rate_limit_strategy,
            storage=await create_storage(settings.storage_uri),
            unknown_capacity_multiplier=settings.unknown_bucket_capacity_multiplier,
        )
        return cls(
            session_store,
            quota_ledger,
            rate_limiter,
            usage_accounting=settings.usage_accounting,
            flat_usage_cost_seconds=settings.flat_usage_cost_seconds,
        )

    async def authorize(self, request: AccessRequest) -> AuthDecision:
        """
        Decide whether the request may proceed to reply generation.

        Returns:
            Allowed with the (possibly new) session id, RateLimited, or DailyLimitReached.

        Raises:
            InternalStoreFailure: If a new session had to be created and no unique token could be allocated
        """
        rate = await self.rate_limiter.check_rate_limit(request.client_address)
        if not rate.allowed:
            return RateLimited(retry_after=rate.retry_after or 0.0)

        is_new_session = False
        session = await self.session_store.validate(request.session_token)
        if isinstance(session, InvalidSession):
            if request.session_token:
                logger.info(f"Session {mask_token(request.session_token)} is {session.reason.value}, issuing a new one")
            session = await self.session_store.create_session(request.client_address, request.client_agent)
            is_new_session = True

        remaining = await self.quota_ledger.peek_remaining(session.id)
        if remaining <= 0:
            logger.info(f"Session {mask_token(session.id)} has reached its daily limit")
            return DailyLimitReached(session_id=session.id, resets_at=self.quota_ledger.resets_at())

        return Allowed(session_id=session.id, is_new_session=is_new_session, remaining_seconds=remaining)

    def charge_for(self, elapsed_seconds: float) -> int:
        """Seconds to charge for one completed exchange under the accounting policy."""
        if self.usage_accounting == UsageAccounting.FLAT:
            return self.flat_usage_cost_seconds
        return max(0, math.ceil(elapsed_seconds))

    async def record_completion(self, session_id: str, elapsed_seconds: float) -> Optional[int]:
        """
        Charge a session for one completed exchange.

        Must be called at most once per successful reply.

        Returns:
            Seconds left today, or None when the session expired while the reply was generated
        """
        if await self.session_store.get(session_id) is None:
            # its usage record is already gone with it
            logger.info(f"Session {mask_token(session_id)} expired before completion was recorded")
            return None

        charged = self.charge_for(elapsed_seconds)
        logger.debug(f"Charging session {mask_token(session_id)} {charged}s "
                     f"({self.usage_accounting} accounting, {elapsed_seconds:.2f}s elapsed)")
        remaining = await self.quota_ledger.record_usage(session_id, charged)

        if await self.session_store.get(session_id) is None:
            # swept between the check and the charge
            await self.quota_ledger.forget(session_id)
            return None
        return remaining

    async def remaining_seconds(self, session_id: str) -> int:
        """Seconds left today. Never creates a usage record."""
        return await self.quota_ledger.peek_remaining(session_id)

    async def get_session(self, session_token: Optional[str]) -> Optional[Session]:
        """Read-only session lookup. Does not count as activity."""
        return await self.session_store.get(session_token)

    async def usage(self, session_token: Optional[str]) -> Optional[UsageSnapshot]:
        """Quota view for an existing session. Never creates a session or a usage record."""
        session = await self.session_store.get(session_token)
        if session is None:
            return None

        record = await self.quota_ledger.peek(session.id)
        limit = self.quota_ledger.daily_limit_seconds
        return UsageSnapshot(
            session_id=session.id,
            seconds_used_today=record.seconds_used_today,
            daily_limit_seconds=limit,
            remaining_seconds=max(0, limit - record.seconds_used_today),
            resets_at=self.quota_ledger.resets_at(),
            accounting=self.usage_accounting.value,
        )

    async def sweep_expired(self) -> int:
        return await self.session_store.sweep_expired()
