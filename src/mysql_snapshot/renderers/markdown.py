"""Markdown renderer."""

import re

from mysql_snapshot.models.snapshot import (
    ReplicationInfo,
    RoutineEntry,
    Snapshot,
    TableEntry,
)
from mysql_snapshot.renderers.base import (
    SUMMARY,
    BaseRenderer,
    describe_sections,
    format_timestamp,
    has_provenance,
)

BACKTICK_RUN = re.compile(r"`+")


def _cell(value: object) -> str:
    """Table cell text; pipes and newlines would break the row."""
    if value is None:
        return ""
    return str(value).replace("|", "\\|").replace("\n", " ")


def _flag(value: object) -> str:
    if value is None:
        return "unknown"
    return "yes" if value else "no"


class MarkdownRenderer(BaseRenderer):
    """Renders the snapshot as a single Markdown document."""

    format_name = "markdown"

    def render(self, snapshot: Snapshot) -> str:
        lines: list[str] = ["# File Summary", "", SUMMARY, ""]

        if snapshot.connection is not None:
            lines.append("**Database Type**: MySQL  ")
            lines.append(f"**Database Version**: {snapshot.connection.version}")
            lines.append("")

        sections = describe_sections(snapshot)
        if sections:
            lines.extend(["## File Structure", ""])
            lines.extend(f"- {section}" for section in sections)
            lines.append("")

        if snapshot.variables:
            lines.extend(["# Variables", ""])
            self._variables(lines, snapshot)

        if snapshot.base_tables:
            lines.extend(["# Tables", ""])
            for table in snapshot.base_tables:
                self._table(lines, table)

        if snapshot.views:
            lines.extend(["# View info details", ""])
            for view in snapshot.views:
                lines.extend([f"## {view.schema}.{view.name}", ""])
                self._fence(lines, view.ddl)

        if snapshot.functions:
            lines.extend(["# Stored Functions", ""])
            for routine in snapshot.functions:
                self._routine(lines, routine)

        if snapshot.procedures:
            lines.extend(["# Stored Procedures", ""])
            for routine in snapshot.procedures:
                self._routine(lines, routine)

        if snapshot.roles:
            lines.extend(["# User Roles (MySQL 8.0+)", ""])
            for role in snapshot.roles:
                lines.extend([f"## {role.name}@{role.host}", ""])
                if role.members:
                    lines.append(f"- Members: {', '.join(role.members)}")
                for grant in role.grants:
                    lines.append(f"- {grant}")
                lines.append("")

        if snapshot.users:
            lines.extend(["# User List", ""])
            for user in snapshot.users:
                lines.extend([f"## {user.account}", ""])
                lines.append(f"- Plugin: {user.plugin or ''}")
                lines.append(f"- Account Locked: {user.account_locked or ''}")
                lines.append(f"- Password Expired: {user.password_expired or ''}")
                if user.grants:
                    lines.append("- Grants:")
                    lines.extend(f"  - {grant}" for grant in user.grants)
                lines.append("")

        if snapshot.plugins:
            lines.extend(["# Plugins", ""])
            lines.append("| Name | Status | Type | Library | Version | Description |")
            lines.append("|------|--------|------|---------|---------|-------------|")
            for plugin in snapshot.plugins:
                lines.append(
                    f"| {_cell(plugin.name)} | {_cell(plugin.status)} "
                    f"| {_cell(plugin.type)} | {_cell(plugin.library) or '-'} "
                    f"| {_cell(plugin.version)} | {_cell(plugin.description)} |"
                )
            lines.append("")

        if snapshot.components is not None:
            lines.extend(["# Components (MySQL 8.0+)", ""])
            if not snapshot.components:
                lines.append("- No components found")
            for component in snapshot.components:
                lines.append(f"- Component ID: {component.component_id}")
                lines.append(f"  - Group ID: {component.group_id}")
                lines.append(f"  - URN: {component.urn}")
            lines.append("")

        if snapshot.replication is not None:
            lines.extend(["# Replication Information", ""])
            self._replication(lines, snapshot.replication)

        return "\n".join(lines).rstrip("\n") + "\n"

    def _variables(self, lines: list[str], snapshot: Snapshot) -> None:
        if has_provenance(snapshot.variables):
            lines.append("| Variable Name | Current Value | Default Value | Source |")
            lines.append("|---------------|---------------|---------------|--------|")
            for v in snapshot.variables:
                lines.append(
                    f"| {_cell(v.name)} | {_cell(v.value)} "
                    f"| {_cell(v.default_value)} | {_cell(v.source)} |"
                )
        else:
            lines.append("| Variable Name | Current Value |")
            lines.append("|---------------|---------------|")
            for v in snapshot.variables:
                lines.append(f"| {_cell(v.name)} | {_cell(v.value)} |")
        lines.append("")

    def _table(self, lines: list[str], table: TableEntry) -> None:
        lines.extend([f"## {table.schema}.{table.name}", ""])
        details = [
            ("Engine", table.engine),
            ("Auto Increment", table.auto_increment),
            ("Created", format_timestamp(table.created_at)),
            ("Updated", format_timestamp(table.updated_at)),
            ("Collation", table.collation),
            ("Charset", table.charset),
            ("Row Format", table.row_format),
            ("Comment", table.comment),
            ("Create Options", table.create_options),
        ]
        for label, value in details:
            if value:
                lines.append(f"- {label}: {value}")
        lines.append("")
        self._fence(lines, table.ddl)

    def _routine(self, lines: list[str], routine: RoutineEntry) -> None:
        lines.extend([f"## {routine.schema}.{routine.name}", ""])
        details = [
            ("Definer", routine.definer),
            ("Parameters", routine.parameters),
            ("Returns", routine.returns),
            ("SQL Data Access", routine.data_access),
            ("Security Type", routine.security_type),
            ("Created", format_timestamp(routine.created)),
            ("Last Altered", format_timestamp(routine.last_altered)),
        ]
        for label, value in details:
            if value:
                lines.append(f"- {label}: {value}")
        lines.append("")
        self._fence(lines, routine.definition)

    def _fence(self, lines: list[str], sql: object) -> None:
        if not sql:
            return
        body = str(sql)
        # Fence must outrun any backtick run inside the body
        longest = max((len(run) for run in BACKTICK_RUN.findall(body)), default=0)
        fence = "`" * max(3, longest + 1)
        lines.extend([f"{fence}sql", body, fence, ""])

    def _replication(self, lines: list[str], replication: ReplicationInfo) -> None:
        status = replication.status
        if status is not None:
            lines.extend(["## Basic Replication Status", ""])
            lines.append(f"- **Server ID**: {status.server_id}")
            lines.append(f"- **Server UUID**: {status.server_uuid or ''}")
            lines.append(f"- **Binary Log Enabled**: {_flag(status.log_bin_enabled)}")
            lines.append(f"- **Binary Log Format**: {status.binlog_format or ''}")
            if status.is_source:
                lines.append(f"- **Current Binary Log File**: {status.current_log_file}")
                lines.append(
                    f"- **Current Binary Log Position**: {status.current_log_position}"
                )
            lines.append(f"- **GTID Mode**: {status.gtid_mode or ''}")
            lines.append("")

        lines.extend(["## Replica Status", ""])
        if not replication.is_replica:
            lines.append("- Not configured as a replica")
        for channel in replication.replica_channels:
            name = channel.channel_name or "default"
            lines.append(
                f"- Channel {name}: source {channel.source_host}:{channel.source_port}, "
                f"IO {channel.io_running}, SQL {channel.sql_running}, "
                f"lag {channel.seconds_behind_source}"
            )
        lines.append("")

        if replication.semi_sync is not None:
            lines.extend(["## Semi-Synchronous Replication", ""])
            lines.append(
                f"- **Source Enabled**: {_flag(replication.semi_sync.source_enabled)}"
            )
            lines.append(
                f"- **Replica Enabled**: {_flag(replication.semi_sync.replica_enabled)}"
            )
            lines.append("")

        group = replication.group_replication
        if group is not None:
            lines.extend(["## Group Replication", ""])
            lines.append(f"- **Group Name**: {group.group_name or ''}")
            lines.append(f"- **Member State**: {group.member_state or ''}")
            lines.append(
                f"- **Single Primary Mode**: {_flag(group.single_primary_mode)}"
            )
            lines.append("")
