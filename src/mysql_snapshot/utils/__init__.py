"""Utility modules."""

from mysql_snapshot.utils.serialization import dumps

__all__ = ["dumps"]
