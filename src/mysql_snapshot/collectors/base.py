"""Base collector class shared by every snapshot category."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from mysql_snapshot.models.capabilities import ServerCapabilities
from mysql_snapshot.models.config import CollectionConfig
from mysql_snapshot.models.stage import StageResult
from mysql_snapshot.models.version import ServerVersion

logger = logging.getLogger(__name__)

# Anything with an awaitable execute() returning a SQLAlchemy-style result
ConnectionType = AsyncConnection


def quote_identifier(name: str) -> str:
    """Backtick-quote an identifier for use inside a text() statement."""
    # Colons are escaped so text() does not read them as bind parameters
    escaped = name.replace("`", "``").replace(":", "\\:")
    return f"`{escaped}`"


def account_name(user: str, host: str) -> str:
    """Quoted user@host account reference."""
    return f"{quote_identifier(user)}@{quote_identifier(host)}"


def is_on(value: Any) -> bool:
    """Interpret a MySQL boolean-ish variable value."""
    return str(value).strip().upper() in ("1", "ON", "YES", "TRUE")


class BaseCollector(ABC):
    """Collects one category of the snapshot."""

    #: Stage name used in logs and errors
    name: str = ""

    def __init__(
        self,
        version: ServerVersion,
        capabilities: ServerCapabilities,
        config: CollectionConfig,
    ):
        """
        Initialize collector.

        Args:
            version: Detected server version
            capabilities: Capability matrix derived from the version
            config: Collection configuration
        """
        self.version = version
        self.capabilities = capabilities
        self.config = config

    @abstractmethod
    async def collect(self, conn: ConnectionType) -> StageResult:
        """
        Collect this category's fragment.

        Query failures with no fallback may propagate as SQLAlchemyError;
        run() turns them into a fatal result.

        Args:
            conn: Database connection

        Returns:
            Tagged stage result carrying the fragment
        """
        ...

    async def run(self, conn: ConnectionType) -> StageResult:
        """Run collect() and tag unhandled query failures as fatal."""
        try:
            return await self.collect(conn)
        except SQLAlchemyError as e:
            logger.error(f"{self.name}: query failed with no fallback: {e}")
            return StageResult.fatal(self.name, e)

    def ok(self, fragment: Any) -> StageResult:
        return StageResult.ok(self.name, fragment)

    def degraded(self, fragment: Any, reason: str) -> StageResult:
        logger.warning(f"{self.name}: {reason}")
        return StageResult.degraded(self.name, fragment, reason)

    async def _fetch_all(
        self,
        conn: ConnectionType,
        query: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Sequence[Any]:
        result = await conn.execute(text(query), params or {})
        return result.fetchall()

    async def _fetch_one(
        self,
        conn: ConnectionType,
        query: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Optional[Any]:
        result = await conn.execute(text(query), params or {})
        return result.fetchone()

    async def _fetch_scalar(
        self,
        conn: ConnectionType,
        query: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Optional[Any]:
        row = await self._fetch_one(conn, query, params)
        return row[0] if row else None

    async def _try_scalar(
        self,
        conn: ConnectionType,
        query: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Optional[Any]:
        """Like _fetch_scalar, but a failing query yields None."""
        try:
            return await self._fetch_scalar(conn, query, params)
        except SQLAlchemyError as e:
            logger.debug(f"{self.name}: {query!r} unavailable: {e}")
            return None

    async def _fetch_grants(
        self, conn: ConnectionType, user: str, host: str
    ) -> tuple[str, ...]:
        """SHOW GRANTS for one account; a refused account yields no grants."""
        try:
            rows = await self._fetch_all(
                conn, f"SHOW GRANTS FOR {account_name(user, host)}"
            )
        except SQLAlchemyError as e:
            logger.debug(f"{self.name}: grants unavailable for {user}@{host}: {e}")
            return ()
        return tuple(str(row[0]) for row in rows)
