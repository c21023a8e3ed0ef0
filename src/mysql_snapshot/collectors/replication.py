"""Replication topology collector."""

import logging
from typing import Any, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from mysql_snapshot.collectors.base import BaseCollector, ConnectionType, is_on
from mysql_snapshot.models.snapshot import (
    GroupReplicationInfo,
    ReplicaChannel,
    ReplicationInfo,
    ReplicationStatus,
    SemiSyncStatus,
)
from mysql_snapshot.models.stage import StageResult

logger = logging.getLogger(__name__)

GROUP_MEMBER_STATE_QUERY = """
    SELECT MEMBER_STATE
    FROM performance_schema.replication_group_members
    WHERE MEMBER_ID = @@server_uuid
"""

# (new column name, pre-8.0.22 column name)
REPLICA_COLUMNS = {
    "channel_name": ("Channel_Name", "Channel_Name"),
    "source_host": ("Source_Host", "Master_Host"),
    "source_port": ("Source_Port", "Master_Port"),
    "io_running": ("Replica_IO_Running", "Slave_IO_Running"),
    "sql_running": ("Replica_SQL_Running", "Slave_SQL_Running"),
    "source_log_file": ("Source_Log_File", "Master_Log_File"),
    "read_source_log_pos": ("Read_Source_Log_Pos", "Read_Master_Log_Pos"),
    "seconds_behind_source": ("Seconds_Behind_Source", "Seconds_Behind_Master"),
}

INTEGER_COLUMNS = {"source_port", "read_source_log_pos", "seconds_behind_source"}


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_bool(value: Any) -> Optional[bool]:
    return None if value is None else is_on(value)


def parse_replica_row(row: Mapping[str, Any]) -> ReplicaChannel:
    """Build a ReplicaChannel from one SHOW REPLICA/SLAVE STATUS row."""
    fields: dict[str, Any] = {}
    for field_name, (new_name, old_name) in REPLICA_COLUMNS.items():
        value = row.get(new_name, row.get(old_name))
        if field_name in INTEGER_COLUMNS:
            value = _to_int(value)
        elif value is not None:
            value = str(value)
        fields[field_name] = value
    return ReplicaChannel(**fields)


class ReplicationCollector(BaseCollector):
    """
    Collects replication state through four independent best-effort probes.

    A standalone server yields a mostly empty ReplicationInfo, never an error.
    """

    name = "replication"

    async def collect(self, conn: ConnectionType) -> StageResult:
        info = ReplicationInfo(
            status=await self.probe_status(conn),
            replica_channels=await self.probe_replica_channels(conn),
            semi_sync=await self.probe_semi_sync(conn),
            group_replication=await self.probe_group_replication(conn),
        )
        logger.info(
            f"Replication: replica={info.is_replica}, "
            f"group_replication={info.group_replication is not None}"
        )
        return self.ok(info)

    async def probe_status(self, conn: ConnectionType) -> ReplicationStatus:
        server_id = await self._try_scalar(conn, "SELECT @@server_id")
        server_uuid = await self._try_scalar(conn, "SELECT @@server_uuid")
        log_bin = await self._try_scalar(conn, "SELECT @@log_bin")
        binlog_format = await self._try_scalar(conn, "SELECT @@binlog_format")
        gtid_mode = await self._try_scalar(conn, "SELECT @@gtid_mode")

        log_file: Optional[str] = None
        log_position: Optional[int] = None
        row = await self._first_row(conn, self._binary_log_statements())
        if row is not None:
            log_file = str(row[0]) if row[0] is not None else None
            log_position = _to_int(row[1])

        return ReplicationStatus(
            server_id=_to_int(server_id),
            server_uuid=str(server_uuid) if server_uuid is not None else None,
            log_bin_enabled=_to_bool(log_bin),
            binlog_format=str(binlog_format) if binlog_format is not None else None,
            gtid_mode=str(gtid_mode) if gtid_mode is not None else None,
            current_log_file=log_file,
            current_log_position=log_position,
        )

    async def probe_replica_channels(
        self, conn: ConnectionType
    ) -> tuple[ReplicaChannel, ...]:
        for statement in self._replica_statements():
            try:
                result = await conn.execute(text(statement))
                rows = result.mappings().fetchall()
            except SQLAlchemyError as e:
                logger.debug(f"{statement} failed: {e}")
                continue
            return tuple(parse_replica_row(row) for row in rows)
        return ()

    async def probe_semi_sync(self, conn: ConnectionType) -> Optional[SemiSyncStatus]:
        source = await self._first_scalar(
            conn,
            "SELECT @@rpl_semi_sync_source_enabled",
            "SELECT @@rpl_semi_sync_master_enabled",
        )
        replica = await self._first_scalar(
            conn,
            "SELECT @@rpl_semi_sync_replica_enabled",
            "SELECT @@rpl_semi_sync_slave_enabled",
        )
        if source is None and replica is None:
            return None
        return SemiSyncStatus(
            source_enabled=_to_bool(source), replica_enabled=_to_bool(replica)
        )

    async def probe_group_replication(
        self, conn: ConnectionType
    ) -> Optional[GroupReplicationInfo]:
        member_state = await self._try_scalar(conn, GROUP_MEMBER_STATE_QUERY)
        group_name = await self._try_scalar(
            conn, "SELECT @@group_replication_group_name"
        )
        single_primary = await self._try_scalar(
            conn, "SELECT @@group_replication_single_primary_mode"
        )
        if member_state is None and group_name is None and single_primary is None:
            return None
        return GroupReplicationInfo(
            group_name=str(group_name) if group_name is not None else None,
            member_state=str(member_state) if member_state is not None else None,
            single_primary_mode=_to_bool(single_primary),
        )

    def _binary_log_statements(self) -> tuple[str, ...]:
        if self.capabilities.binary_log_status:
            return ("SHOW BINARY LOG STATUS", "SHOW MASTER STATUS")
        return ("SHOW MASTER STATUS", "SHOW BINARY LOG STATUS")

    def _replica_statements(self) -> tuple[str, ...]:
        if self.capabilities.replica_keyword:
            return ("SHOW REPLICA STATUS", "SHOW SLAVE STATUS")
        return ("SHOW SLAVE STATUS", "SHOW REPLICA STATUS")

    async def _first_row(
        self, conn: ConnectionType, statements: tuple[str, ...]
    ) -> Optional[Any]:
        for statement in statements:
            try:
                return await self._fetch_one(conn, statement)
            except SQLAlchemyError as e:
                logger.debug(f"{statement} failed: {e}")
        return None

    async def _first_scalar(self, conn: ConnectionType, *queries: str) -> Optional[Any]:
        for query in queries:
            value = await self._try_scalar(conn, query)
            if value is not None:
                return value
        return None
