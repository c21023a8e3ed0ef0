"""Unit Tests for the table/view collector"""

from datetime import datetime

from mysql_snapshot.collectors import TableCollector
from mysql_snapshot.collectors.base import quote_identifier
from mysql_snapshot.collectors.catalog import SYSTEM_SCHEMAS
from mysql_snapshot.models.stage import StageStatus

CREATED = datetime(2024, 1, 15, 10, 30)

ORDERS_ROW = (
    "orders",
    "BASE TABLE",
    "InnoDB",
    1001,
    CREATED,
    None,
    "utf8mb4_0900_ai_ci",
    "Dynamic",
    "customer orders",
    "",
)
VIEW_ROW = (
    "recent_orders",
    "VIEW",
    None,
    None,
    None,
    None,
    None,
    None,
    "VIEW",
    "",
)


class TestDatabaseResolution:
    """Test which databases get scanned."""

    async def test_configured_database_only(self, make_collector, fake_connection):
        collector = make_collector(TableCollector, database="shop")
        conn = fake_connection()
        assert await collector.resolve_databases(conn) == ["shop"]
        assert not conn.ran("SHOW DATABASES")

    async def test_system_schemas_filtered(self, make_collector, fake_connection):
        collector = make_collector(TableCollector)
        conn = fake_connection(
            {
                "SHOW DATABASES": [
                    ("information_schema",),
                    ("mysql",),
                    ("performance_schema",),
                    ("shop",),
                    ("sys",),
                    ("analytics",),
                ]
            }
        )
        databases = await collector.resolve_databases(conn)
        assert databases == ["shop", "analytics"]
        assert not SYSTEM_SCHEMAS.intersection(databases)

    async def test_show_databases_failure_is_fatal(
        self, make_collector, fake_connection, db_error
    ):
        collector = make_collector(TableCollector)
        conn = fake_connection({"SHOW DATABASES": db_error()})
        result = await collector.run(conn)
        assert result.status is StageStatus.FATAL
        assert result.stage == "tables"


class TestTableCollection:
    """Test table and view metadata collection."""

    async def test_tables_and_views(self, make_collector, fake_connection):
        collector = make_collector(TableCollector, database="shop")
        conn = fake_connection(
            {
                "information_schema.TABLES": [ORDERS_ROW, VIEW_ROW],
                "SHOW CREATE TABLE": [("orders", "CREATE TABLE `orders` (...)")],
                "SHOW CREATE VIEW": [
                    (
                        "recent_orders",
                        "CREATE VIEW `recent_orders` AS select 1",
                        "utf8mb4",
                        "utf8mb4_0900_ai_ci",
                    )
                ],
            }
        )

        result = await collector.run(conn)
        assert result.status is StageStatus.OK
        orders, recent = result.fragment

        assert orders.kind == "table"
        assert orders.engine == "InnoDB"
        assert orders.auto_increment == 1001
        assert orders.charset == "utf8mb4"
        assert orders.created_at == CREATED
        assert orders.create_options is None
        assert orders.ddl == "CREATE TABLE `orders` (...)"

        assert recent.kind == "view"
        assert recent.engine is None
        assert recent.auto_increment is None
        assert recent.ddl == "CREATE VIEW `recent_orders` AS select 1"

        assert conn.ran("SHOW CREATE VIEW `shop`.`recent_orders`")
        assert conn.ran("SHOW CREATE TABLE `shop`.`orders`")

    async def test_view_never_carries_engine(self, make_collector, fake_connection):
        # Some servers report an engine for views; it must not leak through
        odd_view = ("v", "VIEW", "InnoDB", 7) + VIEW_ROW[4:]
        collector = make_collector(TableCollector, database="shop")
        conn = fake_connection(
            {
                "information_schema.TABLES": [odd_view],
                "SHOW CREATE VIEW": [("v", "CREATE VIEW v", "utf8mb4", "x")],
            }
        )
        result = await collector.run(conn)
        (view,) = result.fragment
        assert view.engine is None
        assert view.auto_increment is None

    async def test_refused_ddl_leaves_none(
        self, make_collector, fake_connection, db_error
    ):
        collector = make_collector(TableCollector, database="shop")
        conn = fake_connection(
            {
                "information_schema.TABLES": [ORDERS_ROW],
                "SHOW CREATE TABLE": db_error("SHOW command denied"),
            }
        )
        result = await collector.run(conn)
        assert result.status is StageStatus.OK
        (orders,) = result.fragment
        assert orders.ddl is None

    async def test_failing_database_is_skipped(
        self, make_collector, fake_connection, db_error
    ):
        def tables_for(params):
            if params["schema_name"] == "locked":
                return db_error("denied")
            return [ORDERS_ROW]

        collector = make_collector(TableCollector)
        conn = fake_connection(
            {
                "SHOW DATABASES": [("locked",), ("shop",)],
                "information_schema.TABLES": tables_for,
                "SHOW CREATE TABLE": [("orders", "CREATE TABLE `orders` (...)")],
            }
        )
        result = await collector.run(conn)
        assert result.status is StageStatus.OK
        assert [t.database for t in result.fragment] == ["shop"]


class TestIdentifierQuoting:
    """Test identifier quoting for text() statements."""

    def test_backticks_doubled(self):
        assert quote_identifier("we`ird") == "`we``ird`"

    def test_colons_escaped(self):
        assert quote_identifier("a:b") == "`a\\:b`"
