"""Unit Tests for the stored routine collector"""

from datetime import datetime

from mysql_snapshot.collectors import RoutineCollector
from mysql_snapshot.collectors.routines import format_parameters
from mysql_snapshot.models.stage import StageStatus

STAMP = datetime(2024, 3, 1, 9, 0)

FUNCTION_ROW = (
    "order_total",
    "FUNCTION",
    "shop",
    "root@localhost",
    STAMP,
    STAMP,
    "READS SQL DATA",
    "DEFINER",
    "BEGIN RETURN 1; END",
    "decimal(10,2)",
)
PROCEDURE_ROW = (
    "archive_orders",
    "PROCEDURE",
    "shop",
    "root@localhost",
    STAMP,
    STAMP,
    "MODIFIES SQL DATA",
    "INVOKER",
    "BEGIN DELETE FROM orders; END",
    None,
)


class TestRoutineCollector:
    """Test function and procedure collection."""

    async def test_functions_and_procedures(self, make_collector, fake_connection):
        def parameters(params):
            if params["routine_type"] == "FUNCTION":
                return [("IN", "order_id", "int")]
            return [("IN", "cutoff", "date"), ("OUT", "moved", "int")]

        collector = make_collector(RoutineCollector)
        conn = fake_connection(
            {
                "information_schema.ROUTINES": [FUNCTION_ROW, PROCEDURE_ROW],
                "information_schema.PARAMETERS": parameters,
            }
        )

        result = await collector.run(conn)
        assert result.status is StageStatus.OK
        function, procedure = result.fragment

        assert function.kind == "function"
        assert function.returns == "decimal(10,2)"
        assert function.parameters == "IN order_id int"
        assert function.definition == "BEGIN RETURN 1; END"

        assert procedure.kind == "procedure"
        assert procedure.returns is None
        assert procedure.parameters == "IN cutoff date, OUT moved int"
        assert procedure.security_type == "INVOKER"

    async def test_system_schemas_excluded(self, make_collector, fake_connection):
        collector = make_collector(RoutineCollector)
        conn = fake_connection({"information_schema.ROUTINES": []})
        await collector.run(conn)
        sql, params = conn.executed[0]
        excluded = "'information_schema', 'mysql', 'performance_schema', 'sys'"
        assert f"NOT IN ({excluded})" in sql
        assert params == {}

    async def test_configured_database_restricts_routines(
        self, make_collector, fake_connection
    ):
        collector = make_collector(RoutineCollector, database="shop")
        conn = fake_connection({"information_schema.ROUTINES": []})
        await collector.run(conn)
        sql, params = conn.executed[0]
        assert "ROUTINE_SCHEMA = :schema_name" in sql
        assert params == {"schema_name": "shop"}

    async def test_parameter_failure_leaves_empty_list(
        self, make_collector, fake_connection, db_error
    ):
        collector = make_collector(RoutineCollector)
        conn = fake_connection(
            {
                "information_schema.ROUTINES": [FUNCTION_ROW],
                "information_schema.PARAMETERS": db_error(),
            }
        )
        result = await collector.run(conn)
        (function,) = result.fragment
        assert function.parameters == ""

    async def test_routine_query_failure_is_fatal(
        self, make_collector, fake_connection, db_error
    ):
        collector = make_collector(RoutineCollector)
        conn = fake_connection({"information_schema.ROUTINES": db_error()})
        result = await collector.run(conn)
        assert result.is_fatal


class TestFormatParameters:
    """Test parameter list flattening."""

    def test_function_parameters_have_no_mode(self):
        assert format_parameters([(None, "a", "int"), (None, "b", "text")]) == (
            "a int, b text"
        )

    def test_empty(self):
        assert format_parameters([]) == ""
