"""Collection orchestration: one sequential pass producing a Snapshot."""

import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from mysql_snapshot.collectors import (
    BaseCollector,
    ComponentCollector,
    ConnectionCollector,
    ConnectionType,
    PluginCollector,
    ReplicationCollector,
    RoleCollector,
    RoutineCollector,
    TableCollector,
    UserCollector,
    VariableCollector,
)
from mysql_snapshot.core.connection import DatabaseConnection
from mysql_snapshot.core.version import detect_server_version
from mysql_snapshot.errors import SnapshotCollectionError
from mysql_snapshot.models.capabilities import ServerCapabilities
from mysql_snapshot.models.config import CollectionConfig
from mysql_snapshot.models.snapshot import Snapshot
from mysql_snapshot.models.stage import StageResult, StageStatus
from mysql_snapshot.models.version import ServerVersion

logger = logging.getLogger(__name__)

# Snapshot field each collector writes
Stage = tuple[str, type[BaseCollector]]


class SnapshotCollector:
    """
    Runs the category collectors in order and merges their fragments.

    Order: connection, tables, users, roles, routines, variables, plugins,
    components, replication. Excluded categories and categories the server
    version does not support are not run. A fatal stage result aborts the
    pass with SnapshotCollectionError; degraded results are kept.
    """

    def __init__(self, config: CollectionConfig):
        """
        Initialize the orchestrator.

        Args:
            config: Collection toggles and connection labels
        """
        self.config = config
        self.version: Optional[ServerVersion] = None
        self.capabilities: Optional[ServerCapabilities] = None
        self.results: list[StageResult] = []

    def plan(self, capabilities: ServerCapabilities) -> list[Stage]:
        """
        Decide which stages run, in order.

        Args:
            capabilities: Capability matrix of the detected server

        Returns:
            (snapshot field, collector class) pairs
        """
        config = self.config
        stages: list[Stage] = [("connection", ConnectionCollector)]

        if not config.except_tables:
            stages.append(("tables", TableCollector))
        if not config.except_users:
            stages.append(("users", UserCollector))
        if not config.except_roles and capabilities.roles:
            stages.append(("roles", RoleCollector))
        if not config.except_routines:
            stages.append(("routines", RoutineCollector))
        if not config.except_variables:
            stages.append(("variables", VariableCollector))
        if not config.except_plugins:
            stages.append(("plugins", PluginCollector))
            if capabilities.components:
                stages.append(("components", ComponentCollector))
        if config.replication:
            stages.append(("replication", ReplicationCollector))

        return stages

    async def collect(self, conn: ConnectionType) -> Snapshot:
        """
        Run one collection pass.

        Args:
            conn: Open database connection

        Returns:
            The assembled snapshot

        Raises:
            VersionParseError: If the server version cannot be parsed
            SnapshotCollectionError: If a stage fails with no fallback
        """
        try:
            self.version = await detect_server_version(conn)
        except SQLAlchemyError as e:
            raise SnapshotCollectionError("server version", e) from e

        self.capabilities = ServerCapabilities.from_version(self.version)
        logger.debug(
            f"Capabilities: {', '.join(self.capabilities.get_supported_features()) or 'none'}"
        )

        self.results = []
        fragments: dict[str, Any] = {}
        for field_name, collector_class in self.plan(self.capabilities):
            collector = collector_class(self.version, self.capabilities, self.config)
            result = await collector.run(conn)
            self.results.append(result)

            if result.is_fatal:
                raise SnapshotCollectionError(result.stage, result.error)

            logger.info(f"Stage {result.stage}: {result.status.value}")
            if result.fragment is not None:
                fragments[field_name] = result.fragment

        return Snapshot(server_version=self.version, **fragments)

    @property
    def degraded_stages(self) -> list[StageResult]:
        return [r for r in self.results if r.status is StageStatus.DEGRADED]


async def take_snapshot(
    connection: DatabaseConnection, config: CollectionConfig
) -> Snapshot:
    """
    Collect a snapshot over a managed connection.

    Args:
        connection: Initialized database connection manager
        config: Collection configuration

    Returns:
        The assembled snapshot
    """
    async with connection.get_connection() as conn:
        return await SnapshotCollector(config).collect(conn)
