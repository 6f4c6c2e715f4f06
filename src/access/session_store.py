"""
In-memory registry of anonymous sessions.

Sessions are keyed by an opaque 256-bit token. The store owns every Session
record; callers only ever receive copies.
"""

import asyncio
import logging
import secrets
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

from .errors import InternalStoreFailure
from .models import InvalidReason, InvalidSession, Session

logger = logging.getLogger('rizzler.access.session_store')

TOKEN_BYTES = 32
MAX_TOKEN_ATTEMPTS = 5
SWEEP_BATCH_SIZE = 500

EvictionListener = Callable[[str], Awaitable[None]]


def mask_token(token: Optional[str]) -> str:
    """Shorten a token for log output."""
    if not token:
        return "<none>"
    return f"{token[:8]}..."


class SessionStore:
    """
    Issues, validates and expires anonymous sessions.

    Expiry is fixed at creation (``expires_at = created_at + ttl``) unless
    ``sliding_expiry`` is enabled, in which case every validated access pushes
    ``expires_at`` forward by ``ttl``.

    Safe for concurrent use from many request handlers on one event loop.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(hours=24),
        sliding_expiry: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.ttl = ttl
        self.sliding_expiry = sliding_expiry
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()
        self._eviction_listeners: list[EvictionListener] = []

    def __len__(self) -> int:
        return len(self._sessions)

    def add_eviction_listener(self, listener: EvictionListener) -> None:
        """
        Register a coroutine called with the session id whenever a session is evicted.

        Used by components that keep per-session state of their own.
        """
        self._eviction_listeners.append(listener)

    async def _notify_evicted(self, session_ids: list[str]) -> None:
        for session_id in session_ids:
            for listener in self._eviction_listeners:
                try:
                    await listener(session_id)
                except Exception as e:
                    logger.error(f"Eviction listener failed for session {mask_token(session_id)}: {e}", exc_info=True)

    async def validate(self, token: Optional[str]) -> Session | InvalidSession:
        """
        Look up a session and mark it active.

        Args:
            token: The session token presented by the client

        Returns:
            A copy of the session, or InvalidSession if the token is unknown or expired.
            Expired sessions are evicted.
        """
        if not token:
            return InvalidSession(reason=InvalidReason.NOT_FOUND)

        async with self._lock:
            session = self._sessions.get(token)
            if session is None:
                logger.debug(f"Session {mask_token(token)} not found")
                return InvalidSession(reason=InvalidReason.NOT_FOUND)

            now = self._clock()
            if now > session.expires_at:
                del self._sessions[token]
            else:
                session.last_activity_at = now
                if self.sliding_expiry:
                    session.expires_at = now + self.ttl
                return session.model_copy()

        logger.info(f"Session {mask_token(token)} expired, evicting")
        await self._notify_evicted([token])
        return InvalidSession(reason=InvalidReason.EXPIRED)

    async def get(self, token: Optional[str]) -> Optional[Session]:
        """Read-only lookup. Does not touch last activity and ignores expired sessions."""
        if not token:
            return None
        async with self._lock:
            session = self._sessions.get(token)
            if session is None or self._clock() > session.expires_at:
                return None
            return session.model_copy()

    async def create_session(self, client_address: Optional[str] = None, client_agent: Optional[str] = None) -> Session:
        """
        Mint a new session with a unique token.

        Raises:
            InternalStoreFailure: If no unique token could be generated after MAX_TOKEN_ATTEMPTS tries
        """
        async with self._lock:
            for attempt in range(1, MAX_TOKEN_ATTEMPTS + 1):
                token = secrets.token_hex(TOKEN_BYTES)
                if token not in self._sessions:
                    break
                logger.warning(f"Session token collision on attempt {attempt}, re-rolling")
            else:
                logger.error(f"Could not allocate a unique session token after {MAX_TOKEN_ATTEMPTS} attempts")
                raise InternalStoreFailure("Could not allocate a unique session token")

            now = self._clock()
            session = Session(
                id=token,
                created_at=now,
                last_activity_at=now,
                expires_at=now + self.ttl,
                client_address=client_address or "unknown",
                client_agent=client_agent or "unknown",
            )
            self._sessions[token] = session

        logger.info(f"Created session {mask_token(token)} expiring at {session.expires_at.isoformat()}")
        return session.model_copy()

    async def sweep_expired(self) -> int:
        """
        Remove every expired session.

        The scan runs over a snapshot taken under the lock; removals happen in
        small locked batches so foreground validation is never blocked for a
        whole pass.

        Returns:
            Number of sessions removed
        """
        async with self._lock:
            snapshot = list(self._sessions.items())

        now = self._clock()
        candidates = [token for token, session in snapshot if now > session.expires_at]

        removed: list[str] = []
        for start in range(0, len(candidates), SWEEP_BATCH_SIZE):
            batch = candidates[start:start + SWEEP_BATCH_SIZE]
            async with self._lock:
                now = self._clock()
                for token in batch:
                    session = self._sessions.get(token)
                    # may have been evicted by validate, or extended by sliding expiry
                    if session is not None and now > session.expires_at:
                        del self._sessions[token]
                        removed.append(token)
            await asyncio.sleep(0)

        await self._notify_evicted(removed)

        if removed:
            logger.info(f"Swept {len(removed)} expired sessions, {len(self._sessions)} remaining")
        return len(removed)
