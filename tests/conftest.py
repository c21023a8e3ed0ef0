"""Pytest configuration and shared fixtures for snapshot tests"""

import os
import re
import sys
from typing import Any, AsyncGenerator, Callable, Optional, Union

import pytest
from dotenv import load_dotenv
from sqlalchemy.exc import ProgrammingError

from mysql_snapshot.core import DatabaseConnection
from mysql_snapshot.models.capabilities import ServerCapabilities
from mysql_snapshot.models.config import CollectionConfig, DatabaseConfig
from mysql_snapshot.models.version import ServerVersion

# Load environment variables
load_dotenv()

# Fix for Windows: aiomysql requires SelectorEventLoop on Windows
if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())  # type: ignore[attr-defined]


# ==================== Fake connection ====================

Rows = list[Union[tuple, dict]]
Response = Union[Rows, BaseException, Callable[[dict], Any]]


def make_db_error(message: str = "access denied") -> ProgrammingError:
    """A driver-level failure as SQLAlchemy would raise it."""
    return ProgrammingError("statement", {}, Exception(message))


class FakeMappings:
    def __init__(self, rows: Rows):
        self._rows = rows

    def fetchall(self) -> list[dict]:
        return [dict(row) for row in self._rows]


class FakeResult:
    """Just enough of sqlalchemy's Result for the collectors."""

    def __init__(self, rows: Rows):
        self._rows = rows

    def _as_tuples(self) -> list[tuple]:
        return [
            tuple(row.values()) if isinstance(row, dict) else tuple(row)
            for row in self._rows
        ]

    def fetchall(self) -> list[tuple]:
        return self._as_tuples()

    def fetchone(self) -> Optional[tuple]:
        rows = self._as_tuples()
        return rows[0] if rows else None

    def mappings(self) -> FakeMappings:
        return FakeMappings(self._rows)


class FakeConnection:
    """
    Scripted stand-in for AsyncConnection.

    Rules map a SQL fragment to a response; the first rule whose fragment
    occurs in the (whitespace-collapsed) statement wins. A response is a
    list of rows, an exception to raise, or a callable taking the bound
    parameters and returning either. Unmatched statements raise a
    ProgrammingError, like a server lacking the table or privilege.
    """

    def __init__(self, rules: Optional[dict[str, Response]] = None):
        self.rules: dict[str, Response] = dict(rules or {})
        self.executed: list[tuple[str, dict]] = []

    async def execute(self, clause: Any, params: Optional[dict] = None) -> FakeResult:
        sql = re.sub(r"\s+", " ", getattr(clause, "text", str(clause))).strip()
        params = dict(params or {})
        self.executed.append((sql, params))

        for fragment, response in self.rules.items():
            if fragment in sql:
                if callable(response) and not isinstance(response, BaseException):
                    response = response(params)
                if isinstance(response, BaseException):
                    raise response
                return FakeResult(list(response))

        raise make_db_error(f"no scripted response for: {sql}")

    def ran(self, fragment: str) -> bool:
        """Whether any executed statement contained the fragment."""
        return any(fragment in sql for sql, _ in self.executed)


@pytest.fixture
def db_error() -> Callable[..., ProgrammingError]:
    """Factory for SQLAlchemy query errors"""
    return make_db_error


@pytest.fixture
def fake_connection() -> Callable[..., FakeConnection]:
    """Factory for scripted fake connections"""
    return FakeConnection


# ==================== Version / collector fixtures ====================


@pytest.fixture
def mysql8() -> ServerVersion:
    return ServerVersion.parse("8.0.42")


@pytest.fixture
def mysql57() -> ServerVersion:
    return ServerVersion.parse("5.7.44-log")


@pytest.fixture
def mariadb() -> ServerVersion:
    return ServerVersion.parse("10.11.6-MariaDB-1:10.11.6+maria~ubu2204")


@pytest.fixture
def make_collector() -> Callable[..., Any]:
    """Build a collector for a given version string and collection settings"""

    def _make(collector_class, version: str = "8.0.42", **config: Any):
        server_version = ServerVersion.parse(version)
        return collector_class(
            server_version,
            ServerCapabilities.from_version(server_version),
            CollectionConfig(**config),
        )

    return _make


# ==================== Live MySQL fixtures ====================


@pytest.fixture(scope="session")
def mysql_database_url() -> Optional[str]:
    """MySQL test database URL from environment"""
    return os.getenv("MYSQL_TEST_DATABASE_URL")


@pytest.fixture
async def mysql_config(mysql_database_url: Optional[str]) -> DatabaseConfig:
    """MySQL database configuration"""
    if not mysql_database_url:
        pytest.skip("MYSQL_TEST_DATABASE_URL not set in environment")
    return DatabaseConfig(url=mysql_database_url)


@pytest.fixture
async def mysql_connection(
    mysql_config: DatabaseConfig,
) -> AsyncGenerator[DatabaseConnection, None]:
    """MySQL database connection with proper cleanup"""
    connection = DatabaseConnection(mysql_config)
    await connection.initialize()
    try:
        yield connection
    finally:
        await connection.dispose()
