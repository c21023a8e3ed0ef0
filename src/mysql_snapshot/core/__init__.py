"""Core components: connection, version detection and collection."""

from .collector import SnapshotCollector, take_snapshot
from .connection import DatabaseConnection
from .version import detect_server_version

__all__ = [
    "DatabaseConnection",
    "SnapshotCollector",
    "detect_server_version",
    "take_snapshot",
]
