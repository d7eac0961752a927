# military_assets/core/db.py

import ssl
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from military_assets.core import config
from military_assets.utils.logger import get_logger

logger = get_logger(__name__)

# =====================================================
# BASE
# =====================================================
Base = declarative_base()


# =====================================================
# CONNECTION CONFIG
# =====================================================
def _engine_options(url: str) -> dict:
    if url.startswith("postgresql"):
        ssl_ctx = ssl.create_default_context()

        if not config.DB_SSL_VERIFY:
            ssl_ctx.check_hostname = False
            ssl_ctx.verify_mode = ssl.CERT_NONE

        return {
            "connect_args": {
                "ssl": ssl_ctx,
                # Disable prepared statements (asyncpg + pgbouncer stability)
                "statement_cache_size": 0,
                "prepared_statement_cache_size": 0,
                "server_settings": {
                    "statement_timeout": str(config.DB_STATEMENT_TIMEOUT_MS),
                    "application_name": "military-asset-api",
                },
            },
            "pool_size": config.DB_POOL_SIZE,
            "max_overflow": config.DB_MAX_OVERFLOW,
            "pool_timeout": config.DB_POOL_TIMEOUT,
            "pool_pre_ping": True,
        }

    return {"connect_args": {"check_same_thread": False}}


# =====================================================
# DATABASE HANDLE
# =====================================================
class Database:
    """Engine + session factory, constructed once and injected per request."""

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,                      # NEVER enable in prod
            echo_pool=config.DB_ECHO_POOL,  # debugging only
            **_engine_options(url),
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

        if self.engine.dialect.name == "sqlite":
            @event.listens_for(self.engine.sync_engine, "connect")
            def enable_sqlite_foreign_keys(dbapi_connection, _):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

    @classmethod
    def from_settings(cls) -> "Database":
        return cls(config.DATABASE_URL)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_factory() as session:
            yield session

    async def create_all(self):
        import military_assets.models  # noqa

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self):
        await self.engine.dispose()


# =====================================================
# DEPENDENCY
# =====================================================
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session


# =====================================================
# UNIT OF WORK
# =====================================================
@asynccontextmanager
async def transaction(db: AsyncSession):
    """Commit on success, roll back on any error and re-raise."""
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        raise


# =====================================================
# DEV ONLY: AUTO CREATE TABLES
# =====================================================
async def init_models(database: Database):
    if config.APP_ENV != "development":
        raise RuntimeError("init_models() is forbidden outside development")

    await database.create_all()
    logger.info("Database models initialized", extra={"url": database.engine.url.render_as_string(hide_password=True)})
