"""Tests for session manager wiring and lifecycle."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI

from neo_sessions.config import SessionSettings
from neo_sessions.core.exceptions import CacheConnectionError
from neo_sessions.sessions.adapters import PostgresSessionStore, PostgresUserLookup, RedisFastStore
from neo_sessions.sessions.entities import UserIdentity
from neo_sessions.sessions.factories import SessionManagerFactory, session_lifespan
from neo_sessions.sessions.factories import session_manager_factory as factory_module


@pytest.fixture
def settings():
    return SessionSettings(
        _env_file=None,
        session_ttl=900,
        db_schema="auth",
        jwt_secret="factory-test-secret",
        session_cleanup_interval_seconds=60,
    )


@pytest.fixture
def fake_fast_store(monkeypatch):
    store = MagicMock(spec=RedisFastStore)
    store.ping = AsyncMock(return_value=True)
    store.close = AsyncMock()
    monkeypatch.setattr(RedisFastStore, "from_url", MagicMock(return_value=store))
    return store


@pytest.fixture
def fake_pool(monkeypatch):
    pool = MagicMock()
    pool.close = AsyncMock()
    create_pool = AsyncMock(return_value=pool)
    monkeypatch.setattr(factory_module.asyncpg, "create_pool", create_pool)
    pool.create_pool = create_pool
    return pool


class TestSessionManagerFactory:
    async def test_create_wires_manager_from_settings(self, settings, fake_fast_store, fake_pool):
        components = await SessionManagerFactory(settings).create()
        manager = components.manager

        assert manager.fast_store is fake_fast_store
        assert manager.session_ttl == 900
        assert isinstance(manager.durable_store, PostgresSessionStore)
        assert manager.durable_store.schema == "auth"
        assert isinstance(manager.user_lookup, PostgresUserLookup)
        assert components.scheduler.interval_seconds == 60
        token = components.token_issuer.issue(UserIdentity("u1", "u1@example.com", "USER"))
        assert components.token_issuer.verify(token).subject_id == "u1"

        pool_kwargs = fake_pool.create_pool.await_args.kwargs
        assert pool_kwargs["min_size"] == settings.db_pool_min_size
        assert pool_kwargs["max_size"] == settings.db_pool_max_size

    async def test_unreachable_redis_fails_fast(self, settings, fake_fast_store, fake_pool):
        fake_fast_store.ping.return_value = False

        with pytest.raises(CacheConnectionError):
            await SessionManagerFactory(settings).create()

        fake_fast_store.close.assert_awaited_once()
        fake_pool.create_pool.assert_not_awaited()

    async def test_pool_failure_closes_fast_store(self, settings, fake_fast_store, fake_pool):
        fake_pool.create_pool.side_effect = OSError("connection refused")

        with pytest.raises(OSError):
            await SessionManagerFactory(settings).create()

        fake_fast_store.close.assert_awaited_once()

    async def test_close_releases_resources(self, settings, fake_fast_store, fake_pool):
        components = await SessionManagerFactory(settings).create()

        await components.close()

        fake_fast_store.close.assert_awaited_once()
        fake_pool.close.assert_awaited_once()


async def test_session_lifespan_exposes_manager(settings, fake_fast_store, fake_pool):
    app = FastAPI()

    async with session_lifespan(app, settings) as components:
        assert app.state.session_manager is components.manager
        assert components.scheduler.is_running

    assert not components.scheduler.is_running
    fake_pool.close.assert_awaited_once()
