"""Base renderer abstract class for output formats."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from mysql_snapshot.models.config import FORMAT_EXTENSIONS
from mysql_snapshot.models.snapshot import Snapshot, VariableEntry

SUMMARY = (
    "This file contains comprehensive MySQL database information compiled for "
    "AI context analysis. It includes schema definitions, account "
    "configurations, system variables, and other database metadata "
    "consolidated into a single file for efficient processing."
)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(value: Optional[datetime]) -> str:
    return value.strftime(TIMESTAMP_FORMAT) if value is not None else ""


def has_provenance(variables: Sequence[VariableEntry]) -> bool:
    """True when every variable is modified, i.e. the only-modified listing."""
    return len(variables) > 0 and all(v.is_modified for v in variables)


def describe_sections(snapshot: Snapshot) -> list[str]:
    """Human-readable list of the sections present in the snapshot."""
    sections = []
    if snapshot.variables:
        sections.append("Variables - MySQL system variables and their current values")
    if snapshot.base_tables:
        sections.append("Tables - Database tables with metadata and DDL definitions")
    if snapshot.views:
        sections.append("View Details - Database views with their definitions")
    if snapshot.functions:
        sections.append(
            "Stored Functions - User-defined functions with their definitions"
        )
    if snapshot.procedures:
        sections.append(
            "Stored Procedures - User-defined procedures with their definitions"
        )
    if snapshot.roles:
        sections.append("User Roles - MySQL 8.0+ role definitions and assignments")
    if snapshot.users:
        sections.append("User Accounts - Database user accounts with privileges")
    if snapshot.plugins:
        sections.append("Plugins - Installed MySQL plugins and extensions")
    if snapshot.components is not None:
        sections.append("Components - MySQL 8.0+ components")
    if snapshot.replication is not None:
        sections.append(
            "Replication Info - MySQL replication configuration and status"
        )
    return sections


class BaseRenderer(ABC):
    """Renders a Snapshot into one document format."""

    #: Canonical format name
    format_name: str = ""

    @property
    def file_extension(self) -> str:
        """File extension (with dot) for this format."""
        return FORMAT_EXTENSIONS[self.format_name]

    @abstractmethod
    def render(self, snapshot: Snapshot) -> str:
        """
        Render the snapshot.

        Args:
            snapshot: Collected snapshot

        Returns:
            The complete document
        """
        ...

