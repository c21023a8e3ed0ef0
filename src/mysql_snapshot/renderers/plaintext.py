"""Plain text renderer with underlined headings."""

from mysql_snapshot.models.snapshot import ReplicationInfo, RoutineEntry, Snapshot
from mysql_snapshot.renderers.base import (
    SUMMARY,
    BaseRenderer,
    describe_sections,
    format_timestamp,
    has_provenance,
)


def _heading(lines: list[str], title: str, underline: str = "=") -> None:
    lines.extend([title, underline * len(title), ""])


def _yes_no(value: object) -> str:
    if value is None:
        return "unknown"
    return "yes" if value else "no"


class PlainTextRenderer(BaseRenderer):
    """Renders the snapshot as plain text."""

    format_name = "plaintext"

    def render(self, snapshot: Snapshot) -> str:
        lines: list[str] = []
        _heading(lines, "FILE SUMMARY")
        lines.extend([SUMMARY, ""])

        if snapshot.connection is not None:
            lines.append("Database Type: MySQL")
            lines.append(f"Database Version: {snapshot.connection.version}")
            lines.append("")

        sections = describe_sections(snapshot)
        if sections:
            _heading(lines, "File Structure", "-")
            lines.extend(f"  * {section}" for section in sections)
            lines.append("")

        if snapshot.variables:
            _heading(lines, "VARIABLES")
            extended = has_provenance(snapshot.variables)
            for v in snapshot.variables:
                if extended:
                    lines.append(
                        f"{v.name} = {v.value} "
                        f"(default: {v.default_value or ''}, source: {v.source or ''})"
                    )
                else:
                    lines.append(f"{v.name} = {v.value}")
            lines.append("")

        if snapshot.base_tables:
            _heading(lines, "TABLES")
            for table in snapshot.base_tables:
                _heading(lines, f"{table.schema}.{table.name}", "-")
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
                lines.extend(f"{label}: {value}" for label, value in details if value)
                if table.ddl:
                    lines.extend(["", table.ddl])
                lines.append("")

        if snapshot.views:
            _heading(lines, "VIEW INFO DETAILS")
            for view in snapshot.views:
                _heading(lines, f"{view.schema}.{view.name}", "-")
                if view.ddl:
                    lines.append(view.ddl)
                lines.append("")

        if snapshot.functions:
            _heading(lines, "STORED FUNCTIONS")
            for routine in snapshot.functions:
                self._routine(lines, routine)

        if snapshot.procedures:
            _heading(lines, "STORED PROCEDURES")
            for routine in snapshot.procedures:
                self._routine(lines, routine)

        if snapshot.roles:
            _heading(lines, "USER ROLES")
            for role in snapshot.roles:
                _heading(lines, f"{role.name}@{role.host}", "-")
                if role.members:
                    lines.append(f"Members: {', '.join(role.members)}")
                lines.extend(role.grants)
                lines.append("")

        if snapshot.users:
            _heading(lines, "USER LIST")
            for user in snapshot.users:
                _heading(lines, user.account, "-")
                lines.append(f"Plugin: {user.plugin or ''}")
                lines.append(f"Account Locked: {user.account_locked or ''}")
                lines.append(f"Password Expired: {user.password_expired or ''}")
                lines.extend(f"  {grant}" for grant in user.grants)
                lines.append("")

        if snapshot.plugins:
            _heading(lines, "PLUGINS")
            for plugin in snapshot.plugins:
                lines.append(
                    f"{plugin.name} ({plugin.status or ''}, {plugin.type or ''}, "
                    f"library: {plugin.library or '-'}, version: {plugin.version or ''})"
                )
                if plugin.description:
                    lines.append(f"  {plugin.description}")
            lines.append("")

        if snapshot.components is not None:
            _heading(lines, "COMPONENTS")
            if not snapshot.components:
                lines.append("No components found")
            for component in snapshot.components:
                lines.append(
                    f"{component.component_id} (group {component.group_id}): "
                    f"{component.urn}"
                )
            lines.append("")

        if snapshot.replication is not None:
            _heading(lines, "REPLICATION INFORMATION")
            self._replication(lines, snapshot.replication)

        return "\n".join(lines).rstrip("\n") + "\n"

    def _routine(self, lines: list[str], routine: RoutineEntry) -> None:
        _heading(lines, f"{routine.schema}.{routine.name}", "-")
        details = [
            ("Definer", routine.definer),
            ("Parameters", routine.parameters),
            ("Returns", routine.returns),
            ("SQL Data Access", routine.data_access),
            ("Security Type", routine.security_type),
            ("Created", format_timestamp(routine.created)),
            ("Last Altered", format_timestamp(routine.last_altered)),
        ]
        lines.extend(f"{label}: {value}" for label, value in details if value)
        if routine.definition:
            lines.extend(["", routine.definition])
        lines.append("")

    def _replication(self, lines: list[str], replication: ReplicationInfo) -> None:
        status = replication.status
        if status is not None:
            lines.append(f"Server ID: {status.server_id}")
            lines.append(f"Server UUID: {status.server_uuid or ''}")
            lines.append(f"Binary Log Enabled: {_yes_no(status.log_bin_enabled)}")
            lines.append(f"Binary Log Format: {status.binlog_format or ''}")
            if status.is_source:
                lines.append(f"Current Binary Log File: {status.current_log_file}")
                lines.append(
                    f"Current Binary Log Position: {status.current_log_position}"
                )
            lines.append(f"GTID Mode: {status.gtid_mode or ''}")

        if not replication.is_replica:
            lines.append("Replica: not configured as a replica")
        for channel in replication.replica_channels:
            lines.append(
                f"Replica channel {channel.channel_name or 'default'}: "
                f"source {channel.source_host}:{channel.source_port}, "
                f"IO {channel.io_running}, SQL {channel.sql_running}, "
                f"lag {channel.seconds_behind_source}"
            )

        semi_sync = replication.semi_sync
        if semi_sync is not None:
            lines.append(f"Semi-sync source enabled: {_yes_no(semi_sync.source_enabled)}")
            lines.append(
                f"Semi-sync replica enabled: {_yes_no(semi_sync.replica_enabled)}"
            )

        group = replication.group_replication
        if group is not None:
            lines.append(f"Group Name: {group.group_name or ''}")
            lines.append(f"Member State: {group.member_state or ''}")
            lines.append(f"Single Primary Mode: {_yes_no(group.single_primary_mode)}")
        lines.append("")
