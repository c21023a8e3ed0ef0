"""Global variable collector with a fallback chain for older servers."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from mysql_snapshot.collectors.base import BaseCollector, ConnectionType
from mysql_snapshot.collectors.catalog import COMMON_VARIABLE_DEFAULTS
from mysql_snapshot.models.snapshot import VariableEntry
from mysql_snapshot.models.stage import StageResult

logger = logging.getLogger(__name__)

MODIFIED_WITH_SOURCE_QUERY = """
    SELECT vi.VARIABLE_NAME, gv.VARIABLE_VALUE, vi.VARIABLE_SOURCE, vi.DEFAULT_VALUE
    FROM performance_schema.variables_info vi
    JOIN performance_schema.global_variables gv
      ON vi.VARIABLE_NAME = gv.VARIABLE_NAME
    WHERE vi.VARIABLE_SOURCE != 'COMPILED'
    ORDER BY vi.VARIABLE_NAME
"""

ALL_WITH_SOURCE_QUERY = """
    SELECT gv.VARIABLE_NAME, gv.VARIABLE_VALUE,
           COALESCE(vi.VARIABLE_SOURCE, 'COMPILED') AS VARIABLE_SOURCE,
           COALESCE(vi.DEFAULT_VALUE, '') AS DEFAULT_VALUE
    FROM performance_schema.global_variables gv
    LEFT JOIN performance_schema.variables_info vi
      ON vi.VARIABLE_NAME = gv.VARIABLE_NAME
    ORDER BY gv.VARIABLE_NAME
"""

GLOBAL_VARIABLES_QUERY = """
    SELECT VARIABLE_NAME, VARIABLE_VALUE
    FROM performance_schema.global_variables
    ORDER BY VARIABLE_NAME
"""

SHOW_VARIABLES_QUERY = "SHOW GLOBAL VARIABLES"

# Probed in order for each common variable
PROBE_QUERIES = (
    "SELECT VARIABLE_VALUE FROM performance_schema.global_variables "
    "WHERE VARIABLE_NAME = :name",
    "SELECT VARIABLE_VALUE FROM information_schema.GLOBAL_VARIABLES "
    "WHERE VARIABLE_NAME = :name",
)

COMPILED = "COMPILED"
DYNAMIC = "DYNAMIC"
UNKNOWN = "UNKNOWN"


def _as_text(value) -> str:
    return "" if value is None else str(value)


class VariableCollector(BaseCollector):
    """
    Collects global variables, degrading detail rather than failing.

    Strategies, each tried only when the previous one's query fails:

    1. performance_schema.variables_info joined with global_variables
       (MySQL 5.7+), giving source and default for each variable.
    2. Only-modified on servers without provenance: probe a fixed set of
       commonly overridden variables against their known defaults.
    3. All variables from performance_schema.global_variables, source
       UNKNOWN.
    4. SHOW GLOBAL VARIABLES, source UNKNOWN.
    """

    name = "variables"

    async def collect(self, conn: ConnectionType) -> StageResult:
        only_modified = self.config.only_modified_variables

        if self.capabilities.variables_info:
            try:
                return self.ok(await self.collect_with_source(conn, only_modified))
            except SQLAlchemyError as e:
                logger.info(f"variables_info unavailable, falling back: {e}")

        if only_modified:
            variables = await self.collect_common_modified(conn)
            return self.degraded(
                variables,
                "variable provenance unavailable; compared common variables "
                "against known defaults",
            )

        try:
            variables = await self.collect_global_variables(conn)
            return self.degraded(variables, "variable provenance unavailable")
        except SQLAlchemyError as e:
            logger.info(f"performance_schema.global_variables unavailable: {e}")

        # Last resort; a failure here is fatal
        variables = await self.collect_show_variables(conn)
        return self.degraded(
            variables, "variable provenance unavailable; used SHOW GLOBAL VARIABLES"
        )

    async def collect_with_source(
        self, conn: ConnectionType, only_modified: bool
    ) -> tuple[VariableEntry, ...]:
        query = MODIFIED_WITH_SOURCE_QUERY if only_modified else ALL_WITH_SOURCE_QUERY
        rows = await self._fetch_all(conn, query)

        variables = []
        for row in rows:
            source = _as_text(row[2]) or COMPILED
            variables.append(
                VariableEntry(
                    name=str(row[0]),
                    value=_as_text(row[1]),
                    source=source,
                    default_value=_as_text(row[3]),
                    is_modified=source != COMPILED,
                )
            )
        return tuple(variables)

    async def collect_common_modified(
        self, conn: ConnectionType
    ) -> tuple[VariableEntry, ...]:
        """Common variables whose live value differs from the factory default."""
        variables = []
        for name in sorted(COMMON_VARIABLE_DEFAULTS):
            default = COMMON_VARIABLE_DEFAULTS[name]
            value = await self.probe(conn, name)
            if value is None or value == default:
                continue
            variables.append(
                VariableEntry(
                    name=name,
                    value=value,
                    default_value=default,
                    source=DYNAMIC,
                    is_modified=True,
                )
            )
        return tuple(variables)

    async def probe(self, conn: ConnectionType, name: str) -> Optional[str]:
        """Live value of one variable, or None if it cannot be read."""
        for query in PROBE_QUERIES:
            try:
                row = await self._fetch_one(conn, query, {"name": name})
            except SQLAlchemyError as e:
                logger.debug(f"Probe for {name} failed: {e}")
                continue
            if row is None:
                return None
            return _as_text(row[0])
        return None

    async def collect_global_variables(
        self, conn: ConnectionType
    ) -> tuple[VariableEntry, ...]:
        rows = await self._fetch_all(conn, GLOBAL_VARIABLES_QUERY)
        return self._unknown_provenance(rows)

    async def collect_show_variables(
        self, conn: ConnectionType
    ) -> tuple[VariableEntry, ...]:
        rows = await self._fetch_all(conn, SHOW_VARIABLES_QUERY)
        return self._unknown_provenance(rows)

    @staticmethod
    def _unknown_provenance(rows) -> tuple[VariableEntry, ...]:
        return tuple(
            VariableEntry(
                name=str(row[0]),
                value=_as_text(row[1]),
                source=UNKNOWN,
                is_modified=False,
            )
            for row in rows
        )
