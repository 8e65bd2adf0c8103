"""Database connection utilities for cursor-pager."""

import json
import logging
from typing import Optional

import asyncpg
from asyncpg import Connection, Pool

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


async def init_connection(conn: Connection) -> None:
    """Decode json and jsonb columns into Python objects on every pooled connection."""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog"
        )


class DatabaseManager:
    """Manages the asyncpg connection pool."""

    def __init__(self, settings: Optional[Settings] = None):
        self.pool: Optional[Pool] = None
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    async def initialize(self) -> None:
        """Initialize the database connection pool."""
        if self.pool is None:
            settings = self.settings
            self.pool = await asyncpg.create_pool(
                settings.database_url,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
                command_timeout=settings.db_command_timeout,
                server_settings={"application_name": settings.app_name},
                init=init_connection
            )
            logger.info("Database connection pool initialized")

    async def close(self) -> None:
        """Close the database connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database connection pool closed")


# Global database manager instance
db_manager = DatabaseManager()


async def get_db_pool() -> Pool:
    """Get the database connection pool."""
    if not db_manager.pool:
        await db_manager.initialize()
    return db_manager.pool
