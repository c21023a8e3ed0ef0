"""Connection information collector."""

from mysql_snapshot.collectors.base import BaseCollector, ConnectionType
from mysql_snapshot.models.snapshot import ConnectionInfo
from mysql_snapshot.models.stage import StageResult


class ConnectionCollector(BaseCollector):
    """Records where the snapshot was taken and the raw server version."""

    name = "connection info"

    async def collect(self, conn: ConnectionType) -> StageResult:
        version = await self._fetch_scalar(conn, "SELECT VERSION()")
        info = ConnectionInfo(
            host=self.config.host,
            port=self.config.port,
            user=self.config.user,
            database=self.config.database,
            version=str(version) if version is not None else self.version.full_version,
        )
        return self.ok(info)
