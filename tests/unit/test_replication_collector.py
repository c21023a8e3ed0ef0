"""Unit Tests for the replication collector"""

from mysql_snapshot.collectors import ReplicationCollector
from mysql_snapshot.collectors.replication import parse_replica_row
from mysql_snapshot.models.stage import StageStatus

SERVER_UUID = "3e11fa47-71ca-11e1-9e33-c80aa9429562"

BASIC_STATUS = {
    "SELECT @@server_id": [(1,)],
    "SELECT @@server_uuid": [(SERVER_UUID,)],
    "SELECT @@log_bin": [(1,)],
    "SELECT @@binlog_format": [("ROW",)],
    "SELECT @@gtid_mode": [("ON",)],
}


class TestStandaloneServer:
    """A server with no replication configured."""

    async def test_standalone_is_ok_and_mostly_empty(
        self, make_collector, fake_connection
    ):
        collector = make_collector(
            ReplicationCollector, version="8.4.0", replication=True
        )
        conn = fake_connection(
            {
                **BASIC_STATUS,
                "SHOW REPLICA STATUS": [],
                "SHOW BINARY LOG STATUS": [("binlog.000003", 157, "", "", "")],
            }
        )

        result = await collector.run(conn)
        assert result.status is StageStatus.OK
        info = result.fragment
        assert info.is_replica is False
        assert info.semi_sync is None
        assert info.group_replication is None

        status = info.status
        assert status.server_id == 1
        assert status.server_uuid == SERVER_UUID
        assert status.log_bin_enabled is True
        assert status.binlog_format == "ROW"
        assert status.current_log_file == "binlog.000003"
        assert status.current_log_position == 157
        assert status.is_source

    async def test_every_probe_failing_is_still_ok(
        self, make_collector, fake_connection
    ):
        collector = make_collector(ReplicationCollector, replication=True)
        result = await collector.run(fake_connection())
        assert result.status is StageStatus.OK
        assert result.fragment.status.server_id is None
        assert result.fragment.replica_channels == ()

    async def test_old_servers_use_master_status(
        self, make_collector, fake_connection
    ):
        collector = make_collector(ReplicationCollector, version="5.7.44")
        conn = fake_connection(
            {
                "SHOW MASTER STATUS": [("mysql-bin.000001", 4, "", "", "")],
                "SHOW SLAVE STATUS": [],
            }
        )
        result = await collector.run(conn)
        assert result.fragment.status.current_log_file == "mysql-bin.000001"
        assert not conn.ran("SHOW BINARY LOG STATUS")
        assert not conn.ran("SHOW REPLICA STATUS")


class TestReplicaServer:
    """A server replicating from a source."""

    async def test_replica_channels_new_names(self, make_collector, fake_connection):
        collector = make_collector(ReplicationCollector)
        conn = fake_connection(
            {
                "SHOW REPLICA STATUS": [
                    {
                        "Source_Host": "db-primary",
                        "Source_Port": 3306,
                        "Replica_IO_Running": "Yes",
                        "Replica_SQL_Running": "Yes",
                        "Source_Log_File": "binlog.000010",
                        "Read_Source_Log_Pos": 4711,
                        "Seconds_Behind_Source": 0,
                        "Channel_Name": "",
                    }
                ],
            }
        )
        result = await collector.run(conn)
        info = result.fragment
        assert info.is_replica
        (channel,) = info.replica_channels
        assert channel.source_host == "db-primary"
        assert channel.source_port == 3306
        assert channel.io_running == "Yes"
        assert channel.read_source_log_pos == 4711
        assert channel.seconds_behind_source == 0

    async def test_replica_keyword_falls_back_to_slave(
        self, make_collector, fake_connection, db_error
    ):
        collector = make_collector(ReplicationCollector)
        conn = fake_connection(
            {
                "SHOW REPLICA STATUS": db_error("syntax error"),
                "SHOW SLAVE STATUS": [
                    {"Master_Host": "db-old", "Seconds_Behind_Master": None}
                ],
            }
        )
        result = await collector.run(conn)
        (channel,) = result.fragment.replica_channels
        assert channel.source_host == "db-old"
        assert channel.seconds_behind_source is None

    def test_parse_row_with_old_column_names(self):
        channel = parse_replica_row(
            {
                "Master_Host": "db1",
                "Master_Port": "3307",
                "Slave_IO_Running": "Connecting",
                "Slave_SQL_Running": "Yes",
                "Read_Master_Log_Pos": "",
            }
        )
        assert channel.source_port == 3307
        assert channel.io_running == "Connecting"
        assert channel.read_source_log_pos is None


class TestSemiSyncAndGroupReplication:
    """Optional replication plugins."""

    async def test_semi_sync_master_names(self, make_collector, fake_connection):
        collector = make_collector(ReplicationCollector)
        conn = fake_connection(
            {
                "SELECT @@rpl_semi_sync_master_enabled": [("ON",)],
                "SELECT @@rpl_semi_sync_slave_enabled": [("OFF",)],
            }
        )
        result = await collector.run(conn)
        semi_sync = result.fragment.semi_sync
        assert semi_sync.source_enabled is True
        assert semi_sync.replica_enabled is False

    async def test_group_replication(self, make_collector, fake_connection):
        collector = make_collector(ReplicationCollector)
        conn = fake_connection(
            {
                "replication_group_members": [("ONLINE",)],
                "SELECT @@group_replication_group_name": [
                    ("aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee",)
                ],
                "SELECT @@group_replication_single_primary_mode": [(1,)],
            }
        )
        result = await collector.run(conn)
        group = result.fragment.group_replication
        assert group.member_state == "ONLINE"
        assert group.group_name == "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"
        assert group.single_primary_mode is True
