"""Table and view collector."""

import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from mysql_snapshot.collectors.base import (
    BaseCollector,
    ConnectionType,
    quote_identifier,
)
from mysql_snapshot.collectors.catalog import SYSTEM_SCHEMAS
from mysql_snapshot.models.snapshot import TableEntry
from mysql_snapshot.models.stage import StageResult

logger = logging.getLogger(__name__)

TABLES_QUERY = """
    SELECT
        TABLE_NAME,
        TABLE_TYPE,
        ENGINE,
        AUTO_INCREMENT,
        CREATE_TIME,
        UPDATE_TIME,
        TABLE_COLLATION,
        ROW_FORMAT,
        TABLE_COMMENT,
        CREATE_OPTIONS
    FROM information_schema.TABLES
    WHERE TABLE_SCHEMA = :schema_name
    ORDER BY TABLE_NAME
"""


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return value if value != "" else None


class TableCollector(BaseCollector):
    """Collects tables and views with their verbatim DDL."""

    name = "tables"

    async def collect(self, conn: ConnectionType) -> StageResult:
        databases = await self.resolve_databases(conn)

        tables: list[TableEntry] = []
        skipped: list[str] = []
        for database in databases:
            try:
                tables.extend(await self._collect_database(conn, database))
            except SQLAlchemyError as e:
                logger.warning(f"Skipping database {database}: {e}")
                skipped.append(database)

        logger.info(
            f"Collected {len(tables)} tables/views from "
            f"{len(databases) - len(skipped)} of {len(databases)} databases"
        )
        return self.ok(tuple(tables))

    async def resolve_databases(self, conn: ConnectionType) -> list[str]:
        """
        Resolve which databases to scan.

        Args:
            conn: Database connection

        Returns:
            The configured database, or every visible non-system database
        """
        if self.config.database:
            return [self.config.database]

        rows = await self._fetch_all(conn, "SHOW DATABASES")
        return [
            str(row[0]) for row in rows if str(row[0]) not in SYSTEM_SCHEMAS
        ]

    async def _collect_database(
        self, conn: ConnectionType, database: str
    ) -> list[TableEntry]:
        rows = await self._fetch_all(conn, TABLES_QUERY, {"schema_name": database})

        entries = []
        for row in rows:
            name = str(row[0])
            is_view = str(row[1]).upper() == "VIEW"
            collation = _text_or_none(row[6])

            entries.append(
                TableEntry(
                    database=database,
                    schema=database,
                    name=name,
                    kind="view" if is_view else "table",
                    engine=None if is_view else _text_or_none(row[2]),
                    auto_increment=(
                        int(row[3]) if row[3] is not None and not is_view else None
                    ),
                    created_at=row[4],
                    updated_at=row[5],
                    collation=collation,
                    charset=collation.split("_", 1)[0] if collation else None,
                    row_format=_text_or_none(row[7]),
                    comment=_text_or_none(row[8]),
                    create_options=_text_or_none(row[9]),
                    ddl=await self.fetch_ddl(conn, database, name, is_view),
                )
            )
        return entries

    async def fetch_ddl(
        self, conn: ConnectionType, database: str, name: str, is_view: bool
    ) -> Optional[str]:
        """
        Fetch the server's own CREATE statement for a table or view.

        Args:
            conn: Database connection
            database: Database name
            name: Table or view name
            is_view: Use SHOW CREATE VIEW instead of SHOW CREATE TABLE

        Returns:
            Verbatim DDL, or None if the server refused
        """
        statement = "SHOW CREATE VIEW" if is_view else "SHOW CREATE TABLE"
        query = f"{statement} {quote_identifier(database)}.{quote_identifier(name)}"
        try:
            row = await self._fetch_one(conn, query)
        except SQLAlchemyError as e:
            logger.debug(f"No DDL for {database}.{name}: {e}")
            return None
        if row is None:
            return None
        # Views return (View, Create View, character_set_client,
        # collation_connection); only the DDL column is kept
        return str(row[1])
