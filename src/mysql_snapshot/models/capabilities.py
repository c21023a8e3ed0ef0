"""Server capability matrix model."""

from pydantic import BaseModel, Field

from mysql_snapshot.models.version import ServerVersion


class ServerCapabilities(BaseModel):
    """Flags indicating which catalog features the detected server exposes."""

    roles: bool = Field(
        default=False,
        description="Server supports SQL roles (mysql.role_edges)",
    )
    components: bool = Field(
        default=False,
        description="Server supports components (mysql.component)",
    )
    information_schema_views: bool = Field(
        default=False,
        description="Server has the modern information_schema views",
    )
    variables_info: bool = Field(
        default=False,
        description="performance_schema.variables_info is available",
    )
    password_expired_column: bool = Field(
        default=False,
        description="mysql.user exposes password_expired in the 8.0 shape",
    )
    replica_keyword: bool = Field(
        default=False,
        description="SHOW REPLICA STATUS is understood (otherwise SHOW SLAVE STATUS)",
    )
    binary_log_status: bool = Field(
        default=False,
        description="SHOW BINARY LOG STATUS is understood (otherwise SHOW MASTER STATUS)",
    )

    model_config = {"frozen": True}

    @classmethod
    def from_version(cls, version: ServerVersion) -> "ServerCapabilities":
        """
        Derive the capability matrix from a parsed server version.

        Args:
            version: Detected server version

        Returns:
            Capability flags for that server
        """
        mysql8 = version.is_mysql8_or_later
        mysql57 = version.is_mysql57_or_later
        return cls(
            roles=mysql8,
            components=mysql8,
            information_schema_views=mysql57,
            variables_info=mysql57,
            password_expired_column=mysql8,
            replica_keyword=version.is_mysql and version.is_at_least(8, 0, 22),
            binary_log_status=version.is_mysql and version.is_at_least(8, 2, 0),
        )

    def get_supported_features(self) -> list[str]:
        """Get list of supported feature names."""
        return [
            field_name
            for field_name, value in self.model_dump().items()
            if value is True
        ]

    def get_unsupported_features(self) -> list[str]:
        """Get list of unsupported feature names."""
        return [
            field_name
            for field_name, value in self.model_dump().items()
            if value is False
        ]
