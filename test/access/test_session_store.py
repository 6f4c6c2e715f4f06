"""
Tests for the anonymous session store.
"""

import asyncio
from datetime import timedelta
from unittest.mock import patch

import pytest

from access import InternalStoreFailure, InvalidReason, InvalidSession, Session, SessionStore
from access.session_store import MAX_TOKEN_ATTEMPTS, SWEEP_BATCH_SIZE, mask_token


@pytest.fixture
def store(clock):
    return SessionStore(ttl=timedelta(seconds=86400), clock=clock)


class TestCreateSession:

    @pytest.mark.asyncio
    async def test_new_session_has_high_entropy_token(self, store):
        session = await store.create_session("203.0.113.7", "Mozilla/5.0")

        assert len(session.id) == 64
        int(session.id, 16)  # hex encoded 32 bytes
        assert session.client_address == "203.0.113.7"
        assert session.client_agent == "Mozilla/5.0"
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_expiry_is_creation_plus_ttl(self, store, clock):
        session = await store.create_session()

        assert session.created_at == clock.now
        assert session.last_activity_at == clock.now
        assert session.expires_at == clock.now + timedelta(seconds=86400)
        assert session.client_address == "unknown"

    @pytest.mark.asyncio
    async def test_tokens_are_unique(self, store):
        sessions = [await store.create_session() for _ in range(50)]
        assert len({s.id for s in sessions}) == 50

    @pytest.mark.asyncio
    async def test_collision_is_rerolled(self, store):
        first_token = "a" * 64
        second_token = "b" * 64

        with patch("access.session_store.secrets.token_hex", side_effect=[first_token, first_token, second_token]):
            first = await store.create_session()
            second = await store.create_session()

        assert first.id == first_token
        assert second.id == second_token
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_persistent_collision_raises(self, store):
        with patch("access.session_store.secrets.token_hex", return_value="c" * 64) as token_hex:
            await store.create_session()
            token_hex.reset_mock()

            with pytest.raises(InternalStoreFailure):
                await store.create_session()

        assert token_hex.call_count == MAX_TOKEN_ATTEMPTS
        assert len(store) == 1


class TestValidate:

    @pytest.mark.asyncio
    async def test_valid_token_returns_same_session(self, store, clock):
        created = await store.create_session()
        clock.advance(minutes=10)

        session = await store.validate(created.id)

        assert isinstance(session, Session)
        assert session.id == created.id
        assert session.created_at == created.created_at
        assert session.last_activity_at == clock.now

    @pytest.mark.asyncio
    async def test_unknown_and_missing_tokens(self, store):
        assert await store.validate("not-a-real-token") == InvalidSession(reason=InvalidReason.NOT_FOUND)
        assert await store.validate(None) == InvalidSession(reason=InvalidReason.NOT_FOUND)
        assert await store.validate("") == InvalidSession(reason=InvalidReason.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_ttl_boundary(self, store, clock):
        """A session created at T is valid at T+86399s and invalid at T+86401s"""
        created = await store.create_session()

        clock.advance(seconds=86399)
        assert isinstance(await store.validate(created.id), Session)

        clock.advance(seconds=2)
        result = await store.validate(created.id)
        assert result == InvalidSession(reason=InvalidReason.EXPIRED)

        # evicted as a side effect
        assert len(store) == 0
        assert await store.validate(created.id) == InvalidSession(reason=InvalidReason.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_activity_does_not_extend_fixed_expiry(self, store, clock):
        created = await store.create_session()
        for _ in range(3):
            clock.advance(hours=8)
            await store.validate(created.id)

        clock.advance(seconds=1)
        assert isinstance(await store.validate(created.id), InvalidSession)

    @pytest.mark.asyncio
    async def test_sliding_expiry(self, clock):
        store = SessionStore(ttl=timedelta(seconds=86400), sliding_expiry=True, clock=clock)
        created = await store.create_session()

        clock.advance(seconds=86399)
        await store.validate(created.id)
        clock.advance(seconds=2)

        session = await store.validate(created.id)
        assert isinstance(session, Session)
        assert session.expires_at == clock.now + timedelta(seconds=86400)

    @pytest.mark.asyncio
    async def test_returned_session_is_a_copy(self, store):
        created = await store.create_session()
        session = await store.validate(created.id)
        session.client_address = "tampered"

        again = await store.validate(created.id)
        assert again.client_address == "unknown"

    @pytest.mark.asyncio
    async def test_concurrent_validation_of_one_session(self, store):
        """1000 concurrent validations never duplicate the record"""
        created = await store.create_session()

        results = await asyncio.gather(*[store.validate(created.id) for _ in range(1000)])

        assert len(store) == 1
        assert all(isinstance(r, Session) for r in results)
        assert {r.id for r in results} == {created.id}
        assert {r.created_at for r in results} == {created.created_at}

    @pytest.mark.asyncio
    async def test_expired_eviction_notifies_listeners(self, store, clock):
        evicted = []

        async def listener(session_id):
            evicted.append(session_id)

        store.add_eviction_listener(listener)
        created = await store.create_session()
        clock.advance(days=2)

        await store.validate(created.id)
        assert evicted == [created.id]


class TestGet:

    @pytest.mark.asyncio
    async def test_get_does_not_touch_activity(self, store, clock):
        created = await store.create_session()
        clock.advance(minutes=5)

        session = await store.get(created.id)
        assert session.last_activity_at == created.last_activity_at

    @pytest.mark.asyncio
    async def test_get_ignores_expired(self, store, clock):
        created = await store.create_session()
        clock.advance(days=1, seconds=1)
        assert await store.get(created.id) is None
        assert await store.get(None) is None


class TestSweep:

    @pytest.mark.asyncio
    async def test_sweep_removes_only_expired(self, store, clock):
        old = [await store.create_session() for _ in range(3)]
        clock.advance(hours=20)
        fresh = await store.create_session()
        clock.advance(hours=5)

        removed = await store.sweep_expired()

        assert removed == 3
        assert len(store) == 1
        assert isinstance(await store.validate(fresh.id), Session)
        for session in old:
            assert await store.validate(session.id) == InvalidSession(reason=InvalidReason.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_sweep_with_nothing_expired(self, store):
        await store.create_session()
        assert await store.sweep_expired() == 0
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_sweep_spans_several_batches(self, store, clock):
        for _ in range(SWEEP_BATCH_SIZE * 2 + 10):
            await store.create_session()
        clock.advance(days=2)

        assert await store.sweep_expired() == SWEEP_BATCH_SIZE * 2 + 10
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_sweep_notifies_listeners(self, store, clock):
        evicted = []

        async def listener(session_id):
            evicted.append(session_id)

        store.add_eviction_listener(listener)
        sessions = [await store.create_session() for _ in range(2)]
        clock.advance(days=2)

        await store.sweep_expired()
        assert sorted(evicted) == sorted(s.id for s in sessions)

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stop_sweep(self, store, clock):
        async def broken_listener(session_id):
            raise RuntimeError("boom")

        store.add_eviction_listener(broken_listener)
        await store.create_session()
        await store.create_session()
        clock.advance(days=2)

        assert await store.sweep_expired() == 2

    @pytest.mark.asyncio
    async def test_sweep_concurrent_with_validation(self, store, clock):
        live = await store.create_session()
        for _ in range(50):
            await store.create_session()
        clock.advance(hours=23)
        live_late = await store.create_session()
        clock.advance(hours=2)

        removed, *results = await asyncio.gather(
            store.sweep_expired(),
            *[store.validate(live_late.id) for _ in range(20)],
        )

        assert removed == 51
        assert all(isinstance(r, Session) for r in results)
        assert await store.get(live.id) is None


def test_mask_token():
    assert mask_token("0123456789abcdef") == "01234567..."
    assert mask_token(None) == "<none>"
