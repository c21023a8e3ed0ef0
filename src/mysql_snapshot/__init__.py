"""mysql-snapshot: one-file metadata snapshots of MySQL-family servers.

Collects schema, accounts, routines, configuration, extensions and
replication state from MySQL, MariaDB or Percona Server and renders them as
Markdown, XML, plain text or JSON.
"""

__version__ = "0.1.0"

from mysql_snapshot.core import (
    DatabaseConnection,
    SnapshotCollector,
    detect_server_version,
    take_snapshot,
)
from mysql_snapshot.errors import (
    SnapshotCollectionError,
    SnapshotError,
    UnsupportedFormatError,
    VersionParseError,
)
from mysql_snapshot.models import (
    CollectionConfig,
    DatabaseConfig,
    OutputConfig,
    ServerCapabilities,
    ServerVersion,
    Snapshot,
)
from mysql_snapshot.renderers import create_renderer

__all__ = [
    "__version__",
    "DatabaseConnection",
    "SnapshotCollector",
    "detect_server_version",
    "take_snapshot",
    "SnapshotError",
    "SnapshotCollectionError",
    "UnsupportedFormatError",
    "VersionParseError",
    "CollectionConfig",
    "DatabaseConfig",
    "OutputConfig",
    "ServerCapabilities",
    "ServerVersion",
    "Snapshot",
    "create_renderer",
]
