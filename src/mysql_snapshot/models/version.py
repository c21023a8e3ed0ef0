"""Server version model."""

import re
from typing import Literal

from pydantic import BaseModel, Field

from mysql_snapshot.errors import VersionParseError

VERSION_PATTERN = re.compile(r"(\d+)\.(\d+)\.(\d+)")

Variant = Literal["mysql", "mariadb", "percona"]


class ServerVersion(BaseModel):
    """Parsed MySQL-family server version."""

    full_version: str = Field(..., description="Raw string returned by VERSION()")
    major: int = Field(..., ge=0, description="Major version number")
    minor: int = Field(..., ge=0, description="Minor version number")
    patch: int = Field(..., ge=0, description="Patch version number")
    variant: Variant = Field(default="mysql", description="Server vendor lineage")

    model_config = {"frozen": True}

    @classmethod
    def parse(cls, version_string: str) -> "ServerVersion":
        """
        Parse a server version string.

        The first major.minor.patch triple anywhere in the string is used, so
        vendor suffixes such as ``-MariaDB`` or ``-log`` are tolerated.

        Args:
            version_string: Raw version string

        Returns:
            Parsed server version

        Raises:
            VersionParseError: If no numeric triple is present
        """
        match = VERSION_PATTERN.search(version_string)
        if match is None:
            raise VersionParseError(version_string)

        lowered = version_string.lower()
        variant: Variant = "mysql"
        if "mariadb" in lowered:
            variant = "mariadb"
        elif "percona" in lowered:
            variant = "percona"

        return cls(
            full_version=version_string,
            major=int(match.group(1)),
            minor=int(match.group(2)),
            patch=int(match.group(3)),
            variant=variant,
        )

    @property
    def numeric(self) -> str:
        """The major.minor.patch triple as a string."""
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def is_mysql(self) -> bool:
        return self.variant == "mysql"

    @property
    def is_mariadb(self) -> bool:
        return self.variant == "mariadb"

    @property
    def is_percona(self) -> bool:
        return self.variant == "percona"

    @property
    def is_mysql8_or_later(self) -> bool:
        """MySQL 8.0+ (MariaDB and Percona never qualify)."""
        return self.is_mysql and self.major >= 8

    @property
    def is_mysql57_or_later(self) -> bool:
        """MySQL 5.7+ (MariaDB and Percona never qualify)."""
        if not self.is_mysql:
            return False
        return self.major > 5 or (self.major == 5 and self.minor >= 7)

    def is_at_least(self, major: int, minor: int = 0, patch: int = 0) -> bool:
        """Check whether the numeric version is at least major.minor.patch."""
        return (self.major, self.minor, self.patch) >= (major, minor, patch)

    def compare(self, other: "ServerVersion") -> int:
        """
        Compare numeric versions, ignoring the variant.

        Returns:
            -1 if this version is lower, 0 if equal, 1 if higher
        """
        mine = (self.major, self.minor, self.patch)
        theirs = (other.major, other.minor, other.patch)
        if mine < theirs:
            return -1
        if mine > theirs:
            return 1
        return 0

    def __str__(self) -> str:
        return f"{self.variant.title()} {self.numeric} ({self.full_version})"
