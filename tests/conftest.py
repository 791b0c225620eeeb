#!/usr/bin/env python3
"""
Shared pytest configuration and fixtures.
Everything external is faked: an in-memory SQLite database stands in for
Postgres, a scripted NLU provider stands in for OpenAI, and a manual
clock drives session expiry.
"""

import asyncio
import contextlib
import json
import os
import sys
from datetime import datetime, timedelta, timezone

# Settings are read once at import, so the test environment goes in first
os.environ.update({
    'APP_ENV': 'testing',
    'DATABASE_URL': 'sqlite+aiosqlite:///:memory:',
    'OPENAI_API_KEY': 'test_key',
    'JOINERY_API_KEY': 'test_api_key',
    'TWILIO_AUTH_TOKEN': 'test_token',
    'REDIS_URL': '',
})

# Add the project root to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine, AsyncSession
from sqlalchemy.pool import StaticPool

from joinery.db.base import init_db
from joinery.db.models.project import Project
from joinery.services.dispatcher import IntentDispatcher
from joinery.services.session_store import InMemorySessionStore

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0) -> None:
        self.now += minutes * 60 + seconds


class FakeNLU:
    """Scripted language model: returns queued replies and records every request."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def queue(self, reply) -> None:
        self.replies.append(reply)

    def queue_intent(self, action, parameters=None, response="", update_context=None) -> None:
        body = {"action": action, "parameters": parameters or {}, "response": response}
        if update_context is not None:
            body["updateContext"] = update_context
        self.replies.append(json.dumps(body))

    async def __call__(self, messages):
        self.calls.append([dict(m) for m in messages])
        await asyncio.sleep(0)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeRedis:
    """The slice of redis.asyncio.Redis that RedisSessionStore uses."""

    def __init__(self):
        self.data = {}
        self.ttls = {}
        self._locks = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, key):
        self.ttls.pop(key, None)
        return 1 if self.data.pop(key, None) is not None else 0

    def lock(self, name, timeout=None, blocking_timeout=None):
        lock = self._locks.setdefault(name, asyncio.Lock())

        @contextlib.asynccontextmanager
        async def _cm():
            async with lock:
                yield

        return _cm()


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test, shared across connections."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def fake_nlu():
    return FakeNLU()


@pytest.fixture
def dispatcher(session_factory):
    return IntentDispatcher(
        session_factory=session_factory,
        now=lambda: datetime(2025, 10, 16, 9, 30, 0, 417000, tzinfo=timezone.utc),
    )


@pytest.fixture
def make_project(session_factory):
    """Insert a project row; later calls get later created_at stamps."""
    counter = {"n": 0}

    async def _make(**overrides) -> Project:
        counter["n"] += 1
        values = {
            "project_number": f"MJ25{counter['n']:02d}",
            "client": "Holly Parry",
            "project_name": "9 wood st, Randwick",
            "project_address": "9 wood st, Randwick",
            "project_status": "planning",
            "overall_project_budget": 19500,
            "priority_level": "medium",
            "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(days=counter["n"]),
        }
        values.update(overrides)
        async with session_factory() as session:
            project = Project(**values)
            session.add(project)
            await session.commit()
            await session.refresh(project)
            return project

    return _make


@pytest.fixture
def sample_twilio_call():
    """Sample Twilio voice webhook form data"""
    return {
        'CallSid': 'CA_TEST_CALL_SID_123',
        'From': '+61412345678',
        'To': '+61298765432',
        'AccountSid': 'AC_TEST_ACCOUNT',
        'Direction': 'inbound',
    }


# Pytest configuration hooks
def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Pure unit tests with no external dependencies")
    config.addinivalue_line("markers", "essential: Core functionality tests")
    config.addinivalue_line("markers", "integration: Tests that exercise several layers together")
