"""Exception types raised by the snapshot engine."""

from typing import Optional


class SnapshotError(Exception):
    """Base class for all snapshot errors."""


class VersionParseError(SnapshotError, ValueError):
    """Raised when a server version string contains no major.minor.patch triple."""

    def __init__(self, version_string: str):
        self.version_string = version_string
        super().__init__(f"Unable to parse version string: {version_string!r}")


class SnapshotCollectionError(SnapshotError):
    """Raised when a collection stage fails with no fallback."""

    def __init__(self, stage: str, cause: Optional[BaseException] = None):
        self.stage = stage
        self.cause = cause
        message = f"Failed to collect {stage}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class UnsupportedFormatError(SnapshotError, ValueError):
    """Raised when no renderer exists for the requested output format."""
