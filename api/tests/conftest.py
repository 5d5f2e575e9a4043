"""Test configuration for API tests."""

import os
import pathlib
import sys

import fakeredis.aioredis
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

# Provide default settings so tests can run without a full environment.
os.environ.setdefault("SECRET_KEY", "x" * 32)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_123")

import api.app.db as app_db  # noqa: E402
from api.app.realtime import Notifier  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def engine():
    """In-memory database shared by every session of one test."""

    engine = app_db.create_test_engine()
    app_db.use_engine(engine)
    await app_db.init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def file_engine(tmp_path):
    """File backed database giving each session its own connection."""

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}")
    app_db.use_engine(engine)
    await app_db.init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async with app_db.get_session() as session:
        yield session


@pytest.fixture
def redis():
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture
def notifier(redis):
    return Notifier(redis)


@pytest.fixture
async def client(engine, redis):
    from api.app.main import app

    app.state.redis = redis
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
