"""XML renderer."""

import xml.etree.ElementTree as ET
from typing import Any, Optional

from mysql_snapshot.models.snapshot import ReplicationInfo, RoutineEntry, Snapshot
from mysql_snapshot.renderers.base import (
    SUMMARY,
    BaseRenderer,
    describe_sections,
    format_timestamp,
    has_provenance,
)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _child(parent: ET.Element, tag: str, value: Any = None) -> ET.Element:
    element = ET.SubElement(parent, tag)
    if value is not None:
        element.text = str(value)
    return element


def _optional_child(parent: ET.Element, tag: str, value: Any) -> Optional[ET.Element]:
    if value is None or value == "":
        return None
    return _child(parent, tag, value)


def _bool_text(value: Optional[bool]) -> Optional[str]:
    if value is None:
        return None
    return "true" if value else "false"


class XMLRenderer(BaseRenderer):
    """Renders the snapshot as an XML document rooted at <mysql_info>."""

    format_name = "xml"

    def render(self, snapshot: Snapshot) -> str:
        root = ET.Element("mysql_info")

        summary = _child(root, "file_summary")
        _child(summary, "description", SUMMARY)
        if snapshot.connection is not None:
            _child(summary, "database_type", "MySQL")
            _child(summary, "database_version", snapshot.connection.version)
        sections = describe_sections(snapshot)
        if sections:
            structure = _child(summary, "file_structure")
            for section in sections:
                _child(structure, "section", section)

        if snapshot.variables:
            extended = has_provenance(snapshot.variables)
            variables = _child(root, "variables")
            for v in snapshot.variables:
                node = _child(variables, "variable")
                _child(node, "name", v.name)
                _child(node, "current_value", v.value)
                if extended:
                    _child(node, "default_value", v.default_value or "")
                    _child(node, "source", v.source or "")

        if snapshot.base_tables:
            tables = _child(root, "tables")
            for table in snapshot.base_tables:
                node = _child(tables, "table")
                _child(node, "database", table.database)
                _child(node, "name", f"{table.schema}.{table.name}")
                _optional_child(node, "engine", table.engine)
                _optional_child(node, "auto_increment", table.auto_increment)
                _optional_child(node, "created", format_timestamp(table.created_at))
                _optional_child(node, "updated", format_timestamp(table.updated_at))
                _optional_child(node, "collation", table.collation)
                _optional_child(node, "charset", table.charset)
                _optional_child(node, "row_format", table.row_format)
                _optional_child(node, "comment", table.comment)
                _optional_child(node, "create_options", table.create_options)
                _optional_child(node, "ddl", table.ddl)

        if snapshot.views:
            views = _child(root, "views")
            for view in snapshot.views:
                node = _child(views, "view")
                _child(node, "name", f"{view.schema}.{view.name}")
                _optional_child(node, "ddl", view.ddl)

        if snapshot.functions:
            functions = _child(root, "stored_functions")
            for routine in snapshot.functions:
                self._routine(_child(functions, "function"), routine)

        if snapshot.procedures:
            procedures = _child(root, "stored_procedures")
            for routine in snapshot.procedures:
                self._routine(_child(procedures, "procedure"), routine)

        if snapshot.roles:
            roles = _child(root, "user_roles")
            for role in snapshot.roles:
                node = _child(roles, "role")
                _child(node, "name", f"{role.name}@{role.host}")
                if role.members:
                    members = _child(node, "members")
                    for member in role.members:
                        _child(members, "member", member)
                if role.grants:
                    grants = _child(node, "grants")
                    for grant in role.grants:
                        _child(grants, "grant", grant)

        if snapshot.users:
            users = _child(root, "users")
            for user in snapshot.users:
                node = _child(users, "user")
                _child(node, "name", user.account)
                _child(node, "plugin", user.plugin or "")
                _child(node, "account_locked", user.account_locked or "")
                _child(node, "password_expired", user.password_expired or "")
                if user.grants:
                    grants = _child(node, "grants")
                    for grant in user.grants:
                        _child(grants, "grant", grant)

        if snapshot.plugins:
            plugins = _child(root, "plugins")
            for plugin in snapshot.plugins:
                node = _child(plugins, "plugin")
                _child(node, "name", plugin.name)
                _child(node, "status", plugin.status or "")
                _child(node, "type", plugin.type or "")
                _optional_child(node, "library", plugin.library)
                _child(node, "version", plugin.version or "")
                _optional_child(node, "description", plugin.description)

        if snapshot.components is not None:
            components = _child(root, "components")
            if not snapshot.components:
                _child(components, "note", "No components found")
            for component in snapshot.components:
                node = _child(components, "component")
                _child(node, "id", component.component_id)
                _child(node, "group_id", component.group_id)
                _child(node, "urn", component.urn)

        if snapshot.replication is not None:
            self._replication(_child(root, "replication"), snapshot.replication)

        ET.indent(root, space="  ")
        return XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"

    def _routine(self, node: ET.Element, routine: RoutineEntry) -> None:
        _child(node, "name", f"{routine.schema}.{routine.name}")
        _optional_child(node, "definer", routine.definer)
        _optional_child(node, "parameters", routine.parameters)
        _optional_child(node, "returns", routine.returns)
        _optional_child(node, "data_access", routine.data_access)
        _optional_child(node, "security_type", routine.security_type)
        _optional_child(node, "created", format_timestamp(routine.created))
        _optional_child(node, "last_altered", format_timestamp(routine.last_altered))
        _optional_child(node, "definition", routine.definition)

    def _replication(self, node: ET.Element, replication: ReplicationInfo) -> None:
        status = replication.status
        if status is not None:
            status_node = _child(node, "status")
            _optional_child(status_node, "server_id", status.server_id)
            _optional_child(status_node, "server_uuid", status.server_uuid)
            _optional_child(
                status_node, "log_bin_enabled", _bool_text(status.log_bin_enabled)
            )
            _optional_child(status_node, "binlog_format", status.binlog_format)
            _optional_child(status_node, "gtid_mode", status.gtid_mode)
            _optional_child(status_node, "current_log_file", status.current_log_file)
            _optional_child(
                status_node, "current_log_position", status.current_log_position
            )

        _child(node, "is_replica", _bool_text(replication.is_replica))
        for channel in replication.replica_channels:
            channel_node = _child(node, "replica_channel")
            for field_name, value in channel.model_dump().items():
                _optional_child(channel_node, field_name, value)

        if replication.semi_sync is not None:
            semi = _child(node, "semi_sync")
            _optional_child(
                semi, "source_enabled", _bool_text(replication.semi_sync.source_enabled)
            )
            _optional_child(
                semi,
                "replica_enabled",
                _bool_text(replication.semi_sync.replica_enabled),
            )

        group = replication.group_replication
        if group is not None:
            group_node = _child(node, "group_replication")
            _optional_child(group_node, "group_name", group.group_name)
            _optional_child(group_node, "member_state", group.member_state)
            _optional_child(
                group_node, "single_primary_mode", _bool_text(group.single_primary_mode)
            )
