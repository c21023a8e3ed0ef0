"""Plugin and component collectors."""

import logging

from mysql_snapshot.collectors.base import BaseCollector, ConnectionType
from mysql_snapshot.collectors.catalog import BUILTIN_PLUGINS
from mysql_snapshot.models.snapshot import ComponentEntry, PluginEntry
from mysql_snapshot.models.stage import StageResult

logger = logging.getLogger(__name__)

PLUGINS_QUERY = """
    SELECT PLUGIN_NAME, PLUGIN_VERSION, PLUGIN_STATUS, PLUGIN_TYPE,
           PLUGIN_LIBRARY, PLUGIN_DESCRIPTION
    FROM information_schema.PLUGINS
    ORDER BY PLUGIN_TYPE, PLUGIN_NAME
"""

COMPONENTS_QUERY = """
    SELECT component_id, component_group_id, component_urn
    FROM mysql.component
    ORDER BY component_id
"""


def is_builtin_plugin(name: str) -> bool:
    """Exact, case-sensitive match against the built-in plugin set."""
    return name in BUILTIN_PLUGINS


class PluginCollector(BaseCollector):
    """Collects operator-installed plugins, hiding the built-in surface."""

    name = "plugins"

    async def collect(self, conn: ConnectionType) -> StageResult:
        rows = await self._fetch_all(conn, PLUGINS_QUERY)

        plugins = []
        hidden = 0
        for row in rows:
            name = str(row[0])
            if is_builtin_plugin(name):
                hidden += 1
                continue
            plugins.append(
                PluginEntry(
                    name=name,
                    version=row[1],
                    status=row[2],
                    type=row[3],
                    library=row[4],
                    description=row[5],
                )
            )

        logger.info(f"Collected {len(plugins)} plugins ({hidden} built-in hidden)")
        return self.ok(tuple(plugins))


class ComponentCollector(BaseCollector):
    """Collects installed components (MySQL 8.0+). An empty list is normal."""

    name = "components"

    async def collect(self, conn: ConnectionType) -> StageResult:
        rows = await self._fetch_all(conn, COMPONENTS_QUERY)
        components = tuple(
            ComponentEntry(
                component_id=int(row[0]), group_id=int(row[1]), urn=str(row[2])
            )
            for row in rows
        )
        logger.info(f"Collected {len(components)} components")
        return self.ok(components)
