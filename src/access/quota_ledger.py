import asyncio
import logging
from datetime import date, datetime, time, timedelta
from typing import Callable

from .models import UsageRecord

logger = logging.getLogger('rizzler.access.quota_ledger')


class QuotaLedger:
    """
    Tracks seconds of service consumed per session per calendar day.

    The counter for a session is zeroed lazily the first time it is touched
    after the server-local date changes; there is no background reset.
    """

    def __init__(self, daily_limit_seconds: int = 300, clock: Callable[[], datetime] = datetime.now):
        if daily_limit_seconds <= 0:
            raise ValueError("daily_limit_seconds must be positive")
        self.daily_limit_seconds = daily_limit_seconds
        self._clock = clock
        self._records: dict[str, UsageRecord] = {}
        self._lock = asyncio.Lock()

    def _today(self) -> date:
        return self._clock().date()

    def _current_record(self, session_id: str) -> UsageRecord:
        # caller must hold the lock
        today = self._today()
        record = self._records.get(session_id)
        if record is None:
            record = UsageRecord(seconds_used_today=0, last_reset_date=today)
            self._records[session_id] = record
        elif record.last_reset_date != today:
            logger.debug(f"New day for session {session_id[:8]}..., resetting {record.seconds_used_today}s of usage")
            record.seconds_used_today = 0
            record.last_reset_date = today
        return record

    async def check_and_reset(self, session_id: str) -> UsageRecord:
        """Return a copy of the session's usage, rolling it over to today first if needed."""
        async with self._lock:
            return self._current_record(session_id).model_copy()

    async def peek(self, session_id: str) -> UsageRecord:
        """
        Today's usage for a session without storing anything.

        A session with no record, or with a record from an earlier day, reads
        as zero usage. Safe to call for ids whose session may already be gone.
        """
        today = self._today()
        async with self._lock:
            record = self._records.get(session_id)
            if record is None or record.last_reset_date != today:
                return UsageRecord(seconds_used_today=0, last_reset_date=today)
            return record.model_copy()

    async def peek_remaining(self, session_id: str) -> int:
        record = await self.peek(session_id)
        return max(0, self.daily_limit_seconds - record.seconds_used_today)

    async def remaining_seconds(self, session_id: str) -> int:
        async with self._lock:
            record = self._current_record(session_id)
            return max(0, self.daily_limit_seconds - record.seconds_used_today)

    async def record_usage(self, session_id: str, seconds_elapsed: int) -> int:
        """
        Add usage to today's counter, clamped at the daily limit.

        Not idempotent: call once per completed unit of work.

        Args:
            session_id: The session to charge
            seconds_elapsed: Seconds of service to add (non-negative)

        Returns:
            Seconds left today after the charge
        """
        if seconds_elapsed < 0:
            raise ValueError("seconds_elapsed must not be negative")

        async with self._lock:
            record = self._current_record(session_id)
            record.seconds_used_today = min(self.daily_limit_seconds, record.seconds_used_today + seconds_elapsed)
            used = record.seconds_used_today

        if used >= self.daily_limit_seconds:
            logger.info(f"Session {session_id[:8]}... exhausted its daily limit of {self.daily_limit_seconds}s")
        else:
            logger.debug(f"Session {session_id[:8]}... usage: {used}/{self.daily_limit_seconds}s")

        return self.daily_limit_seconds - used

    async def forget(self, session_id: str) -> None:
        async with self._lock:
            self._records.pop(session_id, None)

    def resets_at(self) -> datetime:
        """Start of the next server-local calendar day."""
        return datetime.combine(self._today() + timedelta(days=1), time.min)

    def __len__(self) -> int:
        return len(self._records)
