"""Module Tests for the collection orchestrator

Runs full collection passes against a scripted connection:
- Stage planning from toggles and version gates
- Fatal vs degraded stage handling
- Snapshot assembly
"""

import pytest

from mysql_snapshot.collectors import (
    ComponentCollector,
    ConnectionCollector,
    ReplicationCollector,
    RoleCollector,
)
from mysql_snapshot.core import SnapshotCollector
from mysql_snapshot.errors import SnapshotCollectionError, VersionParseError
from mysql_snapshot.models.capabilities import ServerCapabilities
from mysql_snapshot.models.config import CollectionConfig
from mysql_snapshot.models.stage import StageStatus
from mysql_snapshot.models.version import ServerVersion


def _full_server(version: str = "8.0.42") -> dict:
    """Scripted responses for a small but complete server."""
    return {
        "SELECT VERSION()": [(version,)],
        "SHOW DATABASES": [("mysql",), ("shop",)],
        "information_schema.TABLES": [
            (
                "orders",
                "BASE TABLE",
                "InnoDB",
                10,
                None,
                None,
                "utf8mb4_general_ci",
                "Dynamic",
                "",
                "",
            )
        ],
        "SHOW CREATE TABLE": [("orders", "CREATE TABLE `orders` (id int)")],
        "account_locked = 'Y'": [("reporting", "%")],
        "FROM mysql.user": [("app", "%", "caching_sha2_password", "N", "N")],
        "SHOW GRANTS": [("GRANT USAGE ON *.* TO `app`@`%`",)],
        "mysql.role_edges": [("app", "%")],
        "information_schema.ROUTINES": [],
        "performance_schema.variables_info": [
            ("max_connections", "500", "GLOBAL", "151")
        ],
        "information_schema.PLUGINS": [
            ("InnoDB", "8.0", "ACTIVE", "STORAGE ENGINE", None, "engine"),
            ("audit_log", "1.0", "ACTIVE", "AUDIT", "audit_log.so", "audit"),
        ],
        "mysql.component": [],
    }


class TestStagePlanning:
    """Test which stages run."""

    def _plan(self, version: str, **config) -> list:
        server_version = ServerVersion.parse(version)
        collector = SnapshotCollector(CollectionConfig(**config))
        return collector.plan(ServerCapabilities.from_version(server_version))

    def test_full_plan_on_mysql8(self):
        fields = [field for field, _ in self._plan("8.0.42", replication=True)]
        assert fields == [
            "connection",
            "tables",
            "users",
            "roles",
            "routines",
            "variables",
            "plugins",
            "components",
            "replication",
        ]

    def test_roles_and_components_gated_by_version(self):
        classes = [cls for _, cls in self._plan("5.7.44")]
        assert RoleCollector not in classes
        assert ComponentCollector not in classes

    def test_mariadb_has_no_roles_stage(self):
        classes = [cls for _, cls in self._plan("10.11.6-MariaDB")]
        assert RoleCollector not in classes

    def test_excluding_plugins_skips_components(self):
        classes = [cls for _, cls in self._plan("8.0.42", except_plugins=True)]
        assert ComponentCollector not in classes

    def test_everything_excluded(self):
        toggles = CollectionConfig.excluding_everything().model_dump()
        plan = self._plan("8.0.42", **toggles)
        assert plan == [("connection", ConnectionCollector)]

    def test_replication_only_when_requested(self):
        classes = [cls for _, cls in self._plan("8.0.42")]
        assert ReplicationCollector not in classes


class TestCollectionPass:
    """Test complete collection passes."""

    async def test_full_pass(self, fake_connection):
        config = CollectionConfig(host="db.internal", port=3307, user="auditor")
        collector = SnapshotCollector(config)
        snapshot = await collector.collect(fake_connection(_full_server()))

        assert snapshot.server_version.numeric == "8.0.42"
        assert snapshot.connection.host == "db.internal"
        assert snapshot.connection.port == 3307
        assert snapshot.connection.version == "8.0.42"
        assert [t.name for t in snapshot.tables] == ["orders"]
        assert [u.account for u in snapshot.users] == ["app@%"]
        assert [r.name for r in snapshot.roles] == ["reporting"]
        assert snapshot.roles[0].members == ("app@%",)
        assert [p.name for p in snapshot.plugins] == ["audit_log"]
        assert snapshot.components == ()
        assert snapshot.replication is None
        assert collector.degraded_stages == []
        assert all(r.status is StageStatus.OK for r in collector.results)

    async def test_only_connection_info_when_everything_excluded(
        self, fake_connection
    ):
        conn = fake_connection({"SELECT VERSION()": [("8.0.42",)]})
        snapshot = await SnapshotCollector(
            CollectionConfig.excluding_everything()
        ).collect(conn)

        assert snapshot.connection is not None
        assert snapshot.tables == ()
        assert snapshot.users == ()
        assert snapshot.roles == ()
        assert snapshot.routines == ()
        assert snapshot.variables == ()
        assert snapshot.plugins == ()
        assert snapshot.components is None
        assert snapshot.replication is None

    async def test_mariadb_pass_degrades_variables(self, fake_connection):
        rules = _full_server("10.11.6-MariaDB")
        rules["FROM performance_schema.global_variables ORDER BY"] = [
            ("max_connections", "151")
        ]
        collector = SnapshotCollector(CollectionConfig(database="shop"))
        snapshot = await collector.collect(fake_connection(rules))

        assert snapshot.server_version.variant == "mariadb"
        assert snapshot.roles == ()
        assert snapshot.components is None
        assert [r.stage for r in collector.degraded_stages] == ["variables"]
        assert snapshot.variables[0].source == "UNKNOWN"

    async def test_fatal_stage_aborts(self, fake_connection, db_error):
        rules = _full_server()
        rules["FROM mysql.user"] = db_error("SELECT command denied")
        collector = SnapshotCollector(CollectionConfig())

        with pytest.raises(SnapshotCollectionError) as exc_info:
            await collector.collect(fake_connection(rules))

        assert exc_info.value.stage == "users"
        assert "denied" in str(exc_info.value)
        # Nothing after the failing stage ran
        assert [r.stage for r in collector.results] == [
            "connection info",
            "tables",
            "users",
        ]

    async def test_unparseable_version_aborts(self, fake_connection):
        conn = fake_connection({"SELECT VERSION()": [("unknown",)]})
        with pytest.raises(VersionParseError):
            await SnapshotCollector(CollectionConfig()).collect(conn)
        assert len(conn.executed) == 1

    async def test_version_query_failure_aborts(self, fake_connection, db_error):
        conn = fake_connection({"SELECT VERSION()": db_error("gone away")})
        with pytest.raises(SnapshotCollectionError) as exc_info:
            await SnapshotCollector(CollectionConfig()).collect(conn)
        assert exc_info.value.stage == "server version"

    async def test_replication_requested(self, fake_connection):
        rules = {"SELECT VERSION()": [("8.0.42",)], "SELECT @@server_id": [(7,)]}
        config = CollectionConfig.excluding_everything(replication=True)
        snapshot = await SnapshotCollector(config).collect(fake_connection(rules))
        assert snapshot.replication is not None
        assert snapshot.replication.status.server_id == 7
        assert snapshot.replication.is_replica is False
