"""Server version detection."""

import logging

from sqlalchemy import text

from mysql_snapshot.collectors.base import ConnectionType
from mysql_snapshot.errors import VersionParseError
from mysql_snapshot.models.version import ServerVersion

logger = logging.getLogger(__name__)

VERSION_QUERY = "SELECT VERSION()"


async def detect_server_version(conn: ConnectionType) -> ServerVersion:
    """
    Query the server version and parse it.

    Args:
        conn: Open database connection

    Returns:
        Parsed server version

    Raises:
        VersionParseError: If the version string cannot be parsed
        SQLAlchemyError: If the version query itself fails
    """
    result = await conn.execute(text(VERSION_QUERY))
    row = result.fetchone()
    if row is None or row[0] is None:
        raise VersionParseError("")

    version = ServerVersion.parse(str(row[0]))
    logger.info(f"Detected {version}")
    return version
