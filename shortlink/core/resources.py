"""
Application Resources

Owns the long-lived clients the services depend on:
- Database engine and session factory
- Optional Redis client
- Short code generator

Design:
- Built once per application instance inside the FastAPI lifespan
- Stored on app.state.resources and handed to services through dependencies
- Released on shutdown (engine disposed, Redis connection closed)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel import SQLModel

from shortlink.core.setting import DEV_JWT_SECRET, Settings
from shortlink.db import models  # noqa: F401  registers tables on SQLModel.metadata
from shortlink.db.interface import DatabaseAdapter
from shortlink.db.session import create_session_maker
from shortlink.db.sqlite_adapter import get_database_adapter
from shortlink.services.short_code import ShortCodeGenerator

logger = logging.getLogger(__name__)


@dataclass
class AppResources:
    settings: Settings
    adapter: DatabaseAdapter
    engine: AsyncEngine
    session_maker: async_sessionmaker
    generator: ShortCodeGenerator
    redis: Optional[Redis] = None


async def open_resources(settings: Settings) -> AppResources:
    """
    Create the engine, session factory, cache client and code generator.

    Raises:
        RuntimeError: If production is started with the development JWT secret
    """
    if settings.is_production and settings.JWT_SECRET == DEV_JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set in production")

    adapter = get_database_adapter(settings.database_url)
    engine = adapter.create_engine(settings.database_url)
    logger.info(f"Database engine created ({adapter.get_dialect_name()})")

    if settings.DATABASE_AUTO_CREATE:
        async with engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.create_all)

    redis_client = None
    if settings.REDIS_URL:
        # Connections are lazy: an unreachable Redis only costs cache misses
        redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
        logger.info("Redis cache enabled")
    else:
        logger.info("Redis cache disabled (REDIS_URL not set)")

    return AppResources(
        settings=settings,
        adapter=adapter,
        engine=engine,
        session_maker=create_session_maker(engine),
        generator=ShortCodeGenerator(settings.HASH_ID_SALT),
        redis=redis_client,
    )


async def close_resources(resources: AppResources) -> None:
    """Release the cache connection and dispose the engine."""
    if resources.redis is not None:
        try:
            await resources.redis.aclose()
        except Exception as e:
            logger.warning(f"Failed to close Redis connection: {e}")

    await resources.engine.dispose()
    logger.info("Database engine disposed")
