"""Async engine and sessions for the hosted Postgres database."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from breaddie.core.config import Settings, settings

logger = logging.getLogger("breaddie.db")


def engine_options(config: Settings) -> dict[str, Any]:
    """
    Keyword arguments for ``create_async_engine``.

    Pool sizing and the asyncpg statement cache only apply to Postgres; the
    SQLite URLs used in tests keep SQLAlchemy's defaults.
    """
    options: dict[str, Any] = {"echo": config.sql_echo, "pool_pre_ping": True}
    if make_url(config.database_url).get_backend_name() == "postgresql":
        options["pool_size"] = config.db_pool_size
        options["max_overflow"] = config.db_max_overflow
        options["connect_args"] = {"statement_cache_size": config.db_statement_cache_size}
    return options


engine: AsyncEngine = create_async_engine(settings.database_url, **engine_options(settings))
AsyncSessionFactory = async_sessionmaker(engine, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; routes and server actions commit explicitly."""
    async with AsyncSessionFactory() as session:
        yield session


async def dispose_engine() -> None:
    await engine.dispose()
    logger.info("Database engine disposed")


__all__ = ["AsyncSessionFactory", "dispose_engine", "engine", "engine_options", "get_session"]
