"""Session manager factory."""

import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import asyncpg

from ...config.settings import SessionSettings, get_settings
from ...core.exceptions import CacheConnectionError
from ..adapters import (
    JWTTokenIssuer,
    PostgresSessionStore,
    PostgresUserLookup,
    RedisFastStore,
)
from ..services import SessionCleanupScheduler, SessionManager

logger = logging.getLogger(__name__)


@dataclass
class SessionComponents:
    """Wired session manager with the resources it owns."""

    manager: SessionManager
    fast_store: RedisFastStore
    db_pool: asyncpg.Pool
    token_issuer: JWTTokenIssuer
    scheduler: SessionCleanupScheduler

    async def close(self) -> None:
        """Stop the scheduler and release store connections."""
        await self.scheduler.stop()
        await self.fast_store.close()
        await self.db_pool.close()
        logger.info("Session components closed")


class SessionManagerFactory:
    """Builds session managers from settings.

    Handles ONLY instantiation and wiring. Connections are owned by the
    returned ``SessionComponents``.
    """

    def __init__(self, settings: Optional[SessionSettings] = None):
        self.settings = settings or get_settings()

    async def create_database_pool(self) -> asyncpg.Pool:
        """Create the asyncpg pool for the durable store."""
        logger.info(f"Creating database pool with size {self.settings.db_pool_max_size}")
        return await asyncpg.create_pool(
            self.settings.database_dsn,
            min_size=self.settings.db_pool_min_size,
            max_size=self.settings.db_pool_max_size,
            command_timeout=self.settings.db_timeout_seconds,
            server_settings={"application_name": os.getenv("APP_NAME", "neo-sessions")},
        )

    def create_fast_store(self) -> RedisFastStore:
        return RedisFastStore.from_url(
            self.settings.get_redis_url(),
            timeout_seconds=self.settings.redis_timeout_seconds,
            max_connections=self.settings.redis_pool_size,
        )

    def create_token_issuer(self) -> JWTTokenIssuer:
        return JWTTokenIssuer(
            secret=self.settings.jwt_secret.get_secret_value(),
            algorithm=self.settings.jwt_algorithm,
            expires_in_seconds=self.settings.jwt_expires_in,
        )

    def build_manager(
        self,
        fast_store: RedisFastStore,
        db_pool: asyncpg.Pool,
        token_issuer: JWTTokenIssuer,
    ) -> SessionManager:
        """Wire a session manager around existing connections."""
        return SessionManager(
            fast_store=fast_store,
            durable_store=PostgresSessionStore(db_pool, schema=self.settings.db_schema),
            token_issuer=token_issuer,
            user_lookup=PostgresUserLookup(db_pool, schema=self.settings.db_schema),
            session_ttl=self.settings.session_ttl,
            session_key_prefix=self.settings.session_key_prefix,
            user_sessions_key_prefix=self.settings.user_sessions_key_prefix,
            durable_timeout_seconds=self.settings.db_timeout_seconds,
        )

    async def create(self) -> SessionComponents:
        """Connect to both stores and build the session manager."""
        logger.debug(f"Creating session manager with settings {self.settings.to_log_dict()}")

        fast_store = self.create_fast_store()
        if not await fast_store.ping():
            await fast_store.close()
            raise CacheConnectionError(
                "Redis is not reachable",
                details={"redis_url": self.settings.get_redis_url()},
            )

        try:
            db_pool = await self.create_database_pool()
        except Exception:
            await fast_store.close()
            raise

        token_issuer = self.create_token_issuer()
        manager = self.build_manager(fast_store, db_pool, token_issuer)
        scheduler = SessionCleanupScheduler(
            manager, interval_seconds=self.settings.session_cleanup_interval_seconds
        )

        logger.info("Session manager created")
        return SessionComponents(
            manager=manager,
            fast_store=fast_store,
            db_pool=db_pool,
            token_issuer=token_issuer,
            scheduler=scheduler,
        )


@asynccontextmanager
async def session_lifespan(
    app,
    settings: Optional[SessionSettings] = None,
    start_cleanup: bool = True,
) -> AsyncIterator[SessionComponents]:
    """FastAPI lifespan helper exposing the manager on ``app.state``."""
    components = await SessionManagerFactory(settings).create()
    app.state.session_manager = components.manager
    if start_cleanup:
        components.scheduler.start()
    try:
        yield components
    finally:
        await components.close()
