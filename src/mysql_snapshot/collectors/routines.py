"""Stored function and procedure collector."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from mysql_snapshot.collectors.base import BaseCollector, ConnectionType
from mysql_snapshot.collectors.catalog import SYSTEM_SCHEMAS
from mysql_snapshot.models.snapshot import RoutineEntry
from mysql_snapshot.models.stage import StageResult

logger = logging.getLogger(__name__)

ROUTINE_COLUMNS = """
    SELECT
        ROUTINE_NAME,
        ROUTINE_TYPE,
        ROUTINE_SCHEMA,
        DEFINER,
        CREATED,
        LAST_ALTERED,
        SQL_DATA_ACCESS,
        SECURITY_TYPE,
        ROUTINE_DEFINITION,
        DTD_IDENTIFIER
    FROM information_schema.ROUTINES
"""

PARAMETERS_QUERY = """
    SELECT PARAMETER_MODE, PARAMETER_NAME, DTD_IDENTIFIER
    FROM information_schema.PARAMETERS
    WHERE SPECIFIC_SCHEMA = :schema_name
      AND SPECIFIC_NAME = :routine_name
      AND ROUTINE_TYPE = :routine_type
      AND ORDINAL_POSITION > 0
    ORDER BY ORDINAL_POSITION
"""


def format_parameters(rows: list[Any]) -> str:
    """Flatten PARAMETERS rows into 'IN a int, OUT b varchar(10)'."""
    parts = []
    for mode, name, dtd in rows:
        words = [str(w) for w in (mode, name, dtd) if w]
        parts.append(" ".join(words))
    return ", ".join(parts)


class RoutineCollector(BaseCollector):
    """Collects stored functions and procedures outside the system schemas."""

    name = "routines"

    def build_query(self) -> tuple[str, dict[str, Any]]:
        if self.config.database:
            return (
                ROUTINE_COLUMNS
                + " WHERE ROUTINE_SCHEMA = :schema_name"
                + " ORDER BY ROUTINE_SCHEMA, ROUTINE_TYPE, ROUTINE_NAME",
                {"schema_name": self.config.database},
            )
        excluded = ", ".join(f"'{s}'" for s in sorted(SYSTEM_SCHEMAS))
        return (
            ROUTINE_COLUMNS
            + f" WHERE ROUTINE_SCHEMA NOT IN ({excluded})"
            + " ORDER BY ROUTINE_SCHEMA, ROUTINE_TYPE, ROUTINE_NAME",
            {},
        )

    async def collect(self, conn: ConnectionType) -> StageResult:
        query, params = self.build_query()
        rows = await self._fetch_all(conn, query, params)

        routines = []
        for row in rows:
            kind = str(row[1]).lower()
            schema, name = str(row[2]), str(row[0])
            routines.append(
                RoutineEntry(
                    schema=schema,
                    name=name,
                    kind=kind,
                    definer=row[3],
                    created=row[4],
                    last_altered=row[5],
                    data_access=row[6],
                    security_type=row[7],
                    definition=row[8],
                    returns=row[9] if kind == "function" else None,
                    parameters=await self.fetch_parameters(
                        conn, schema, name, str(row[1]).upper()
                    ),
                )
            )

        logger.info(f"Collected {len(routines)} routines")
        return self.ok(tuple(routines))

    async def fetch_parameters(
        self, conn: ConnectionType, schema: str, name: str, routine_type: str
    ) -> str:
        try:
            rows = await self._fetch_all(
                conn,
                PARAMETERS_QUERY,
                {
                    "schema_name": schema,
                    "routine_name": name,
                    "routine_type": routine_type,
                },
            )
        except SQLAlchemyError as e:
            logger.debug(f"Parameters unavailable for {schema}.{name}: {e}")
            return ""
        return format_parameters(list(rows))
