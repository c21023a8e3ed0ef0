"""Category collectors, one per snapshot section."""

from .base import BaseCollector, ConnectionType
from .connection import ConnectionCollector
from .plugins import ComponentCollector, PluginCollector
from .replication import ReplicationCollector
from .routines import RoutineCollector
from .tables import TableCollector
from .users import RoleCollector, UserCollector
from .variables import VariableCollector

__all__ = [
    "BaseCollector",
    "ConnectionType",
    "ConnectionCollector",
    "TableCollector",
    "UserCollector",
    "RoleCollector",
    "RoutineCollector",
    "VariableCollector",
    "PluginCollector",
    "ComponentCollector",
    "ReplicationCollector",
]
