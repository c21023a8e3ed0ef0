"""Database connection management with SQLAlchemy."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from mysql_snapshot.models.config import DatabaseConfig

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Manages the SQLAlchemy async engine used for one snapshot run."""

    def __init__(self, config: DatabaseConfig):
        """
        Initialize database connection.

        Args:
            config: Database configuration with connection URL and pool settings
        """
        self.config = config
        self.engine: Optional[AsyncEngine] = None

    async def initialize(self) -> None:
        """Create the async engine."""
        if self.engine is not None:
            return  # Already initialized

        self.engine = create_async_engine(
            self.config.url,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_timeout=self.config.pool_timeout,
            pool_pre_ping=True,  # Verify connections before using
            echo=self.config.echo_sql,
        )
        logger.debug(f"Engine created for {self.config.sanitized_url}")

    async def dispose(self) -> None:
        """Dispose of the connection pool and cleanup resources."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None

    @asynccontextmanager
    async def get_connection(self) -> AsyncGenerator[AsyncConnection, None]:
        """
        Get a connection from the pool as an async context manager.

        Yields:
            AsyncConnection for executing queries

        Raises:
            RuntimeError: If engine not initialized
        """
        if self.engine is None:
            raise RuntimeError(
                "DatabaseConnection not initialized. Call initialize() first."
            )

        async with self.engine.connect() as conn:
            if self.config.read_only:
                await self._set_readonly(conn)

            if self.config.statement_timeout:
                await self._set_timeout(conn, self.config.statement_timeout)

            yield conn

    async def _set_readonly(self, conn: AsyncConnection) -> None:
        """Put the session in read-only mode."""
        await conn.execute(text("SET SESSION TRANSACTION READ ONLY"))

    async def _set_timeout(self, conn: AsyncConnection, timeout: int) -> None:
        """Set the per-statement timeout (MySQL 5.7.8+; ignored elsewhere)."""
        timeout_ms = timeout * 1000
        try:
            await conn.execute(text(f"SET SESSION max_execution_time = {timeout_ms}"))
        except SQLAlchemyError as e:
            # MariaDB and MySQL < 5.7.8 have no max_execution_time
            logger.debug(f"Statement timeout not applied: {e}")

    async def test_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            async with self.get_connection() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError):
            return False

    async def get_version(self) -> str:
        """
        Get database version string.

        Returns:
            Database version string
        """
        async with self.get_connection() as conn:
            result = await conn.execute(text("SELECT VERSION()"))
            row = result.fetchone()
            return str(row[0]) if row else "Unknown"

    async def __aenter__(self) -> "DatabaseConnection":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.dispose()
