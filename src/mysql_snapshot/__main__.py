"""Allow running as ``python -m mysql_snapshot``."""

from mysql_snapshot.cli import cli_entry

if __name__ == "__main__":
    cli_entry()
