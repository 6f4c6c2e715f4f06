"""
Tests for per-session daily usage accounting.
"""

import asyncio
from datetime import date, datetime, timedelta

import pytest

from access import QuotaLedger


@pytest.fixture
def ledger(clock):
    return QuotaLedger(daily_limit_seconds=300, clock=clock)


class TestQuotaLedger:

    @pytest.mark.asyncio
    async def test_fresh_session_has_full_quota(self, ledger, clock):
        assert await ledger.remaining_seconds("session-1") == 300

        record = await ledger.check_and_reset("session-1")
        assert record.seconds_used_today == 0
        assert record.last_reset_date == clock.now.date()

    @pytest.mark.asyncio
    async def test_usage_accumulates(self, ledger):
        await ledger.record_usage("session-1", 30)
        await ledger.record_usage("session-1", 10)

        record = await ledger.check_and_reset("session-1")
        assert record.seconds_used_today == 40
        assert await ledger.remaining_seconds("session-1") == 260

    @pytest.mark.asyncio
    async def test_usage_clamps_at_daily_limit(self, ledger):
        """Three 30s exchanges leave 210s; a 250s one exhausts the quota without overshooting"""
        for _ in range(3):
            await ledger.record_usage("session-1", 30)
        assert await ledger.remaining_seconds("session-1") == 210

        await ledger.record_usage("session-1", 250)

        record = await ledger.check_and_reset("session-1")
        assert record.seconds_used_today == 300
        assert await ledger.remaining_seconds("session-1") == 0

        await ledger.record_usage("session-1", 30)
        assert (await ledger.check_and_reset("session-1")).seconds_used_today == 300

    @pytest.mark.asyncio
    async def test_zero_usage_is_a_no_op(self, ledger):
        await ledger.record_usage("session-1", 0)
        assert await ledger.remaining_seconds("session-1") == 300

    @pytest.mark.asyncio
    async def test_negative_usage_rejected(self, ledger):
        await ledger.record_usage("session-1", 50)
        with pytest.raises(ValueError):
            await ledger.record_usage("session-1", -10)
        assert await ledger.remaining_seconds("session-1") == 250

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self, ledger):
        await ledger.record_usage("session-1", 300)
        assert await ledger.remaining_seconds("session-1") == 0
        assert await ledger.remaining_seconds("session-2") == 300

    @pytest.mark.asyncio
    async def test_quota_resets_when_date_changes(self, ledger, clock):
        await ledger.record_usage("session-1", 300)
        assert await ledger.remaining_seconds("session-1") == 0

        clock.now = datetime(2026, 3, 15, 0, 0, 1)

        assert await ledger.remaining_seconds("session-1") == 300
        record = await ledger.check_and_reset("session-1")
        assert record.seconds_used_today == 0
        assert record.last_reset_date == date(2026, 3, 15)

    @pytest.mark.asyncio
    async def test_yesterdays_usage_never_counts_today(self, ledger, clock):
        await ledger.record_usage("session-1", 280)
        clock.advance(days=1)

        # the write after midnight lands on a fresh counter
        await ledger.record_usage("session-1", 30)
        assert (await ledger.check_and_reset("session-1")).seconds_used_today == 30

    @pytest.mark.asyncio
    async def test_same_day_does_not_reset(self, ledger, clock):
        await ledger.record_usage("session-1", 100)
        clock.advance(hours=11)
        assert await ledger.remaining_seconds("session-1") == 200

    def test_resets_at_next_midnight(self, ledger, clock):
        assert ledger.resets_at() == datetime(2026, 3, 15, 0, 0, 0)

    @pytest.mark.asyncio
    async def test_forget_drops_record(self, ledger):
        await ledger.record_usage("session-1", 100)
        assert len(ledger) == 1

        await ledger.forget("session-1")
        await ledger.forget("never-existed")

        assert len(ledger) == 0
        assert await ledger.remaining_seconds("session-1") == 300

    @pytest.mark.asyncio
    async def test_check_and_reset_returns_copy(self, ledger):
        record = await ledger.check_and_reset("session-1")
        record.seconds_used_today = 999
        assert await ledger.remaining_seconds("session-1") == 300

    @pytest.mark.asyncio
    async def test_record_usage_returns_remaining(self, ledger):
        assert await ledger.record_usage("session-1", 30) == 270
        assert await ledger.record_usage("session-1", 500) == 0

    @pytest.mark.asyncio
    async def test_peek_never_creates_records(self, ledger):
        record = await ledger.peek("session-1")

        assert record.seconds_used_today == 0
        assert await ledger.peek_remaining("session-1") == 300
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_peek_reads_todays_usage(self, ledger, clock):
        await ledger.record_usage("session-1", 120)
        assert (await ledger.peek("session-1")).seconds_used_today == 120
        assert await ledger.peek_remaining("session-1") == 180

        clock.advance(days=1)

        # yesterday's counter reads as zero but is left for the next write to roll over
        assert await ledger.peek_remaining("session-1") == 300
        assert len(ledger) == 1

    @pytest.mark.asyncio
    async def test_concurrent_usage_is_not_lost(self, ledger):
        await asyncio.gather(*[ledger.record_usage("session-1", 1) for _ in range(200)])
        assert (await ledger.check_and_reset("session-1")).seconds_used_today == 200

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            QuotaLedger(daily_limit_seconds=0)
