"""
Call-session memory for the voice assistant.

A session holds the entities remembered across turns of one phone call
(client, project name, project number, ...) plus a bounded transcript.
Sessions expire after SESSION_TTL_MINUTES of inactivity; a background
SessionSweeper evicts them every SESSION_SWEEP_INTERVAL_MINUTES.

Two stores share one interface: an in-process dict (default) and Redis
(when REDIS_URL is set) so memory survives restarts and is shared across
workers.
"""
from __future__ import annotations

import asyncio
import contextlib
import json
import time
from dataclasses import dataclass, field, asdict
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

import redis.asyncio as redis

from joinery.core.config import settings
from joinery.core.errors import ErrorSeverity, log_error
from joinery.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SESSION_ID = "default"
HISTORY_LIMIT = settings.HISTORY_LIMIT
TTL_SECONDS = settings.SESSION_TTL_MINUTES * 60

Clock = Callable[[], float]


@dataclass
class CallSession:
    session_id: str
    context: Dict[str, Any] = field(default_factory=dict)
    history: List[Dict[str, str]] = field(default_factory=list)
    last_activity: float = 0.0

    def add_turn(self, role: str, content: str, limit: int = HISTORY_LIMIT) -> None:
        """Append a turn, dropping the oldest ones beyond limit."""
        self.history.append({"role": role, "content": content})
        if len(self.history) > limit:
            del self.history[:-limit]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CallSession":
        return cls(
            session_id=data["session_id"],
            context=dict(data.get("context") or {}),
            history=list(data.get("history") or []),
            last_activity=float(data.get("last_activity") or 0.0),
        )


class SessionStore:
    """Interface every session backend implements."""

    async def get_or_create(self, session_id: str) -> CallSession:
        """Return the session (creating it if needed) and mark it active now."""
        raise NotImplementedError

    async def get(self, session_id: str) -> Optional[CallSession]:
        """Peek at a session without refreshing its activity."""
        raise NotImplementedError

    async def save(self, session: CallSession) -> None:
        raise NotImplementedError

    async def delete(self, session_id: str) -> None:
        raise NotImplementedError

    async def evict_stale(self, now: Optional[float] = None, ttl_seconds: Optional[float] = None) -> None:
        raise NotImplementedError

    def lock(self, session_id: str) -> contextlib.AbstractAsyncContextManager:
        """Serialise turns of one session. Sessions never share a lock."""
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    """Process-local sessions keyed by call id, one asyncio.Lock per session."""

    def __init__(self, ttl_seconds: float = TTL_SECONDS, clock: Clock = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, CallSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    async def get_or_create(self, session_id: str) -> CallSession:
        sess = self._sessions.get(session_id)
        if sess is None:
            sess = CallSession(session_id=session_id)
            self._sessions[session_id] = sess
            logger.info("session_created", session_id=session_id[:12])
        sess.last_activity = self._clock()
        return sess

    async def get(self, session_id: str) -> Optional[CallSession]:
        return self._sessions.get(session_id)

    async def save(self, session: CallSession) -> None:
        session.last_activity = self._clock()
        self._sessions[session.session_id] = session

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        # a turn in flight keeps its lock so the next turn still queues behind it
        lock = self._locks.get(session_id)
        if lock is not None and not lock.locked():
            self._locks.pop(session_id, None)

    @contextlib.asynccontextmanager
    async def lock(self, session_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        async with lock:
            yield

    async def evict_stale(self, now: Optional[float] = None, ttl_seconds: Optional[float] = None) -> None:
        now = self._clock() if now is None else now
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds

        # snapshot first, then delete only what is still idle and unchanged
        snapshot = [(key, sess.last_activity) for key, sess in list(self._sessions.items())]
        evicted = 0
        for key, seen_activity in snapshot:
            if now - seen_activity <= ttl:
                continue
            lock = self._locks.get(key)
            if lock is not None and lock.locked():
                continue
            current = self._sessions.get(key)
            if current is None or current.last_activity != seen_activity:
                continue
            self._sessions.pop(key, None)
            self._locks.pop(key, None)
            evicted += 1

        if evicted:
            logger.info("sessions_evicted", count=evicted, remaining=len(self._sessions))


class RedisSessionStore(SessionStore):
    """
    Sessions as JSON under call_session:<id> with a SETEX TTL.
    Redis expiry does the eviction, so evict_stale has nothing to do.
    """

    KEY_PREFIX = "call_session:"
    LOCK_PREFIX = "call_session_lock:"

    def __init__(self, client: redis.Redis, ttl_seconds: float = TTL_SECONDS,
                 clock: Clock = time.time, lock_timeout: float = 60.0):
        self._redis = client
        self.ttl_seconds = int(ttl_seconds)
        self._clock = clock
        self._lock_timeout = lock_timeout

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisSessionStore":
        # Upstash and other hosted Redis need TLS
        if "upstash.io" in url and url.startswith("redis://"):
            url = url.replace("redis://", "rediss://", 1)
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=3,
            socket_timeout=2,
            health_check_interval=30,
        )
        return cls(client, **kwargs)

    def _key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}{session_id}"

    async def get(self, session_id: str) -> Optional[CallSession]:
        raw = await self._redis.get(self._key(session_id))
        if not raw:
            return None
        return CallSession.from_dict(json.loads(raw))

    async def get_or_create(self, session_id: str) -> CallSession:
        sess = await self.get(session_id)
        if sess is None:
            sess = CallSession(session_id=session_id)
            logger.info("session_created", session_id=session_id[:12], backend="redis")
        await self.save(sess)
        return sess

    async def save(self, session: CallSession) -> None:
        session.last_activity = self._clock()
        await self._redis.setex(self._key(session.session_id), self.ttl_seconds, json.dumps(session.to_dict()))

    async def delete(self, session_id: str) -> None:
        await self._redis.delete(self._key(session_id))

    def lock(self, session_id: str) -> contextlib.AbstractAsyncContextManager:
        return self._redis.lock(
            f"{self.LOCK_PREFIX}{session_id}",
            timeout=self._lock_timeout,
            blocking_timeout=self._lock_timeout,
        )

    async def evict_stale(self, now: Optional[float] = None, ttl_seconds: Optional[float] = None) -> None:
        logger.debug("session_eviction_skipped", backend="redis", reason="ttl_managed_by_redis")


def build_session_store() -> SessionStore:
    """Pick the backend from settings: Redis when REDIS_URL is set, else in-memory."""
    if settings.REDIS_URL:
        logger.info("session_store_selected", backend="redis")
        return RedisSessionStore.from_url(settings.REDIS_URL)
    logger.info("session_store_selected", backend="memory")
    return InMemorySessionStore()


class SessionSweeper:
    """Background task that calls store.evict_stale on a fixed cadence."""

    def __init__(self, store: SessionStore,
                 interval_seconds: float = settings.SESSION_SWEEP_INTERVAL_MINUTES * 60):
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self.running:
            self._task = asyncio.create_task(self._run(), name="session-sweeper")
            logger.info("session_sweeper_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("session_sweeper_stopped")

    async def sweep_once(self) -> None:
        try:
            await self.store.evict_stale()
        except Exception as e:
            log_error(e, {"component": "session_sweeper"}, ErrorSeverity.MEDIUM)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.sweep_once()
