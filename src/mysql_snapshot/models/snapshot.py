"""Canonical snapshot models consumed by every renderer."""

from datetime import datetime, timezone
from typing import Callable, Hashable, Iterable, Literal, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator

from mysql_snapshot.models.version import ServerVersion

FROZEN = {"frozen": True}

T = TypeVar("T")


class ConnectionInfo(BaseModel):
    """Where the snapshot was taken from."""

    host: str = Field(..., description="Configured server host")
    port: int = Field(..., description="Configured server port")
    user: str = Field(..., description="Configured login user")
    database: str = Field(
        default="", description="Configured target database (empty = all)"
    )
    version: str = Field(..., description="Raw server version string")

    model_config = FROZEN


class TableEntry(BaseModel):
    """A table or view with its verbatim DDL."""

    database: str = Field(..., description="Database the object lives in")
    schema: str = Field(..., description="Schema name (same as database in MySQL)")
    name: str = Field(..., description="Table or view name")
    kind: Literal["table", "view"] = Field(..., description="Object kind")
    engine: Optional[str] = Field(None, description="Storage engine (tables only)")
    auto_increment: Optional[int] = Field(
        None, description="Next AUTO_INCREMENT value (tables only)"
    )
    created_at: Optional[datetime] = Field(None, description="Creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")
    collation: Optional[str] = Field(None, description="Table collation")
    charset: Optional[str] = Field(None, description="Character set")
    row_format: Optional[str] = Field(None, description="Row format")
    comment: Optional[str] = Field(None, description="Table comment")
    create_options: Optional[str] = Field(None, description="Extra create options")
    ddl: Optional[str] = Field(
        None, description="Verbatim SHOW CREATE output, None if refused"
    )

    model_config = FROZEN

    @model_validator(mode="after")
    def _views_have_no_storage(self) -> "TableEntry":
        if self.kind == "view" and (
            self.engine is not None or self.auto_increment is not None
        ):
            raise ValueError("views cannot carry engine or auto_increment")
        return self

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.database, self.schema, self.name)

    @property
    def is_view(self) -> bool:
        return self.kind == "view"


class UserEntry(BaseModel):
    """A login account and its grants."""

    user: str = Field(..., description="Account user name")
    host: str = Field(..., description="Account host pattern")
    plugin: Optional[str] = Field(None, description="Authentication plugin")
    account_locked: Optional[str] = Field(None, description="Y/N lock flag")
    password_expired: Optional[str] = Field(None, description="Y/N expiry flag")
    grants: tuple[str, ...] = Field(
        default=(), description="Verbatim SHOW GRANTS lines"
    )

    model_config = FROZEN

    @property
    def key(self) -> tuple[str, str]:
        return (self.user, self.host)

    @property
    def account(self) -> str:
        return f"{self.user}@{self.host}"


class RoleEntry(BaseModel):
    """A role (8.0+) with its grants and members."""

    name: str = Field(..., description="Role name")
    host: str = Field(..., description="Role host")
    grants: tuple[str, ...] = Field(default=(), description="Role grants")
    members: tuple[str, ...] = Field(
        default=(), description="Accounts granted this role, as user@host"
    )

    model_config = FROZEN

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.host)


class RoutineEntry(BaseModel):
    """A stored function or procedure."""

    schema: str = Field(..., description="Routine schema")
    name: str = Field(..., description="Routine name")
    kind: Literal["function", "procedure"] = Field(..., description="Routine kind")
    definer: Optional[str] = Field(None, description="DEFINER account")
    created: Optional[datetime] = Field(None, description="Creation time")
    last_altered: Optional[datetime] = Field(None, description="Last alteration time")
    data_access: Optional[str] = Field(None, description="SQL data access mode")
    security_type: Optional[str] = Field(None, description="DEFINER or INVOKER")
    returns: Optional[str] = Field(None, description="Return type (functions only)")
    parameters: str = Field(default="", description="Flattened parameter list")
    definition: Optional[str] = Field(None, description="Verbatim routine body")

    model_config = FROZEN

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.schema, self.name, self.kind)


class VariableEntry(BaseModel):
    """A global system variable."""

    name: str = Field(..., description="Variable name")
    value: str = Field(..., description="Current global value")
    default_value: Optional[str] = Field(
        None, description="Compiled-in default, when known"
    )
    source: Optional[str] = Field(
        None, description="Where the value came from (COMPILED, DYNAMIC, UNKNOWN...)"
    )
    is_modified: bool = Field(
        default=False, description="Whether the value differs from its default"
    )

    model_config = FROZEN

    @property
    def key(self) -> str:
        return self.name


class PluginEntry(BaseModel):
    """An installed, non-built-in plugin."""

    name: str = Field(..., description="Plugin name")
    version: Optional[str] = Field(None, description="Plugin version")
    status: Optional[str] = Field(None, description="ACTIVE, INACTIVE, ...")
    type: Optional[str] = Field(None, description="Plugin type")
    library: Optional[str] = Field(None, description="Shared library file")
    description: Optional[str] = Field(None, description="Plugin description")

    model_config = FROZEN

    @property
    def key(self) -> str:
        return self.name


class ComponentEntry(BaseModel):
    """An installed component (8.0+)."""

    component_id: int = Field(..., description="Component id")
    group_id: int = Field(..., description="Component group id")
    urn: str = Field(..., description="Component URN")

    model_config = FROZEN

    @property
    def key(self) -> int:
        return self.component_id


class ReplicationStatus(BaseModel):
    """Binary log and identity settings of this server."""

    server_id: Optional[int] = Field(None, description="@@server_id")
    server_uuid: Optional[str] = Field(None, description="@@server_uuid")
    log_bin_enabled: Optional[bool] = Field(None, description="@@log_bin")
    binlog_format: Optional[str] = Field(None, description="@@binlog_format")
    gtid_mode: Optional[str] = Field(None, description="@@gtid_mode")
    current_log_file: Optional[str] = Field(
        None, description="Current binary log file when acting as a source"
    )
    current_log_position: Optional[int] = Field(
        None, description="Current binary log position when acting as a source"
    )

    model_config = FROZEN

    @property
    def is_source(self) -> bool:
        return self.current_log_file is not None


class ReplicaChannel(BaseModel):
    """One row of SHOW REPLICA STATUS."""

    channel_name: Optional[str] = Field(None, description="Replication channel")
    source_host: Optional[str] = Field(None, description="Source host")
    source_port: Optional[int] = Field(None, description="Source port")
    io_running: Optional[str] = Field(None, description="Receiver thread state")
    sql_running: Optional[str] = Field(None, description="Applier thread state")
    source_log_file: Optional[str] = Field(None, description="Source log file")
    read_source_log_pos: Optional[int] = Field(
        None, description="Position read from the source log"
    )
    seconds_behind_source: Optional[int] = Field(
        None, description="Replication lag in seconds"
    )

    model_config = FROZEN


class SemiSyncStatus(BaseModel):
    """Semi-synchronous replication flags."""

    source_enabled: Optional[bool] = Field(None, description="Source side enabled")
    replica_enabled: Optional[bool] = Field(None, description="Replica side enabled")

    model_config = FROZEN


class GroupReplicationInfo(BaseModel):
    """Group replication membership of this server."""

    group_name: Optional[str] = Field(None, description="Group name")
    member_state: Optional[str] = Field(None, description="This member's state")
    single_primary_mode: Optional[bool] = Field(
        None, description="Whether the group runs in single-primary mode"
    )

    model_config = FROZEN


class ReplicationInfo(BaseModel):
    """Replication topology as seen from this server."""

    status: Optional[ReplicationStatus] = Field(None, description="Basic status")
    replica_channels: tuple[ReplicaChannel, ...] = Field(
        default=(), description="Replica status rows, empty when not a replica"
    )
    semi_sync: Optional[SemiSyncStatus] = Field(None, description="Semi-sync flags")
    group_replication: Optional[GroupReplicationInfo] = Field(
        None, description="Group replication state"
    )

    model_config = FROZEN

    @property
    def is_replica(self) -> bool:
        return len(self.replica_channels) > 0


def _ensure_unique(items: Iterable[T], key: Callable[[T], Hashable], label: str) -> None:
    seen: set[Hashable] = set()
    for item in items:
        item_key = key(item)
        if item_key in seen:
            raise ValueError(f"duplicate {label}: {item_key!r}")
        seen.add(item_key)


class Snapshot(BaseModel):
    """Everything collected from one server in one pass."""

    connection: Optional[ConnectionInfo] = Field(
        None, description="Connection the snapshot was taken over"
    )
    server_version: Optional[ServerVersion] = Field(
        None, description="Detected server version"
    )
    collected_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the collection pass ran",
    )
    tables: tuple[TableEntry, ...] = Field(default=(), description="Tables and views")
    users: tuple[UserEntry, ...] = Field(default=(), description="User accounts")
    roles: tuple[RoleEntry, ...] = Field(default=(), description="Roles")
    routines: tuple[RoutineEntry, ...] = Field(
        default=(), description="Stored functions and procedures"
    )
    variables: tuple[VariableEntry, ...] = Field(
        default=(), description="Global variables"
    )
    plugins: tuple[PluginEntry, ...] = Field(default=(), description="Plugins")
    components: Optional[tuple[ComponentEntry, ...]] = Field(
        None, description="Components, None when not collected"
    )
    replication: Optional[ReplicationInfo] = Field(
        None, description="Replication information, when requested"
    )

    model_config = FROZEN

    @field_validator("tables")
    @classmethod
    def _order_tables(cls, tables: tuple[TableEntry, ...]) -> tuple[TableEntry, ...]:
        return tuple(sorted(tables, key=lambda t: t.key))

    @model_validator(mode="after")
    def _unique_keys(self) -> "Snapshot":
        _ensure_unique(self.tables, lambda t: t.key, "table")
        _ensure_unique(self.users, lambda u: u.key, "user")
        _ensure_unique(self.roles, lambda r: r.key, "role")
        _ensure_unique(self.routines, lambda r: r.key, "routine")
        _ensure_unique(self.variables, lambda v: v.key, "variable")
        _ensure_unique(self.plugins, lambda p: p.key, "plugin")
        _ensure_unique(self.components or (), lambda c: c.key, "component")
        return self

    @property
    def base_tables(self) -> list[TableEntry]:
        return [t for t in self.tables if not t.is_view]

    @property
    def views(self) -> list[TableEntry]:
        return [t for t in self.tables if t.is_view]

    @property
    def functions(self) -> list[RoutineEntry]:
        return [r for r in self.routines if r.kind == "function"]

    @property
    def procedures(self) -> list[RoutineEntry]:
        return [r for r in self.routines if r.kind == "procedure"]

    @property
    def database_names(self) -> list[str]:
        """Distinct databases that contributed tables, sorted."""
        return sorted({t.database for t in self.tables})
