"""Pydantic models for server metadata, configuration and snapshots."""

from .capabilities import ServerCapabilities
from .config import CollectionConfig, DatabaseConfig, OutputConfig
from .snapshot import (
    ComponentEntry,
    ConnectionInfo,
    GroupReplicationInfo,
    PluginEntry,
    ReplicaChannel,
    ReplicationInfo,
    ReplicationStatus,
    RoleEntry,
    RoutineEntry,
    SemiSyncStatus,
    Snapshot,
    TableEntry,
    UserEntry,
    VariableEntry,
)
from .stage import StageResult, StageStatus
from .version import ServerVersion

__all__ = [
    "ServerVersion",
    "ServerCapabilities",
    "DatabaseConfig",
    "CollectionConfig",
    "OutputConfig",
    "Snapshot",
    "ConnectionInfo",
    "TableEntry",
    "UserEntry",
    "RoleEntry",
    "RoutineEntry",
    "VariableEntry",
    "PluginEntry",
    "ComponentEntry",
    "ReplicationInfo",
    "ReplicationStatus",
    "ReplicaChannel",
    "SemiSyncStatus",
    "GroupReplicationInfo",
    "StageResult",
    "StageStatus",
]
