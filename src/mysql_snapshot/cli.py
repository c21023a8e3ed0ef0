"""Command line entry point.

Connects to a MySQL-family server, collects a snapshot and writes it in the
requested format, either to a file or to stdout.
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from mysql_snapshot.core import DatabaseConnection, take_snapshot
from mysql_snapshot.errors import SnapshotError
from mysql_snapshot.models.config import CollectionConfig, DatabaseConfig, OutputConfig
from mysql_snapshot.renderers import create_renderer

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3306
DEFAULT_USER = "root"


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mysql-snapshot",
        description="Dump MySQL, MariaDB or Percona server metadata into one file.",
    )
    parser.add_argument("--host", default=DEFAULT_HOST, help="Database host")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="MySQL port")
    parser.add_argument("--user", default=DEFAULT_USER, help="MySQL user")
    parser.add_argument("--password", default="", help="Database password")
    parser.add_argument(
        "--database",
        default="",
        help="Database to analyze (all accessible databases when omitted)",
    )
    parser.add_argument(
        "--url",
        default="",
        help="Full connection URL; overrides host, port, user and password",
    )
    parser.add_argument(
        "--replication", action="store_true", help="Include replication information"
    )
    parser.add_argument(
        "--except-tables", action="store_true", help="Exclude tables and views"
    )
    parser.add_argument(
        "--except-stored-procedures",
        action="store_true",
        help="Exclude stored procedures and functions",
    )
    parser.add_argument(
        "--except-variables",
        action="store_true",
        help="Exclude variables/configuration parameters",
    )
    parser.add_argument(
        "--only-modified-variables",
        action="store_true",
        help="Show only modified variables (default: show all)",
    )
    parser.add_argument(
        "--except-users", action="store_true", help="Exclude user accounts"
    )
    parser.add_argument("--except-roles", action="store_true", help="Exclude roles")
    parser.add_argument(
        "--except-plugins",
        action="store_true",
        help="Exclude installed plugins and components",
    )
    parser.add_argument(
        "--format",
        default="markdown",
        help="Output format: markdown, xml, plaintext, json",
    )
    parser.add_argument(
        "--outfile",
        default="dbmix-output",
        help="Output file name; '-' writes to stdout",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def apply_env_overrides(args: argparse.Namespace) -> argparse.Namespace:
    """
    Fill connection settings from MYSQL_* and DATABASE_URL variables.

    MYSQL_HOST only replaces the default host, MYSQL_PASSWORD and
    MYSQL_DATABASE only apply when the flag was not given. MYSQL_PORT and
    MYSQL_USER always win when set.

    Args:
        args: Parsed arguments, updated in place

    Returns:
        The same namespace
    """
    if args.host == DEFAULT_HOST and os.getenv("MYSQL_HOST"):
        args.host = os.environ["MYSQL_HOST"]
    if os.getenv("MYSQL_PORT"):
        try:
            args.port = int(os.environ["MYSQL_PORT"])
        except ValueError:
            logger.warning(f"Ignoring invalid MYSQL_PORT: {os.environ['MYSQL_PORT']}")
    if os.getenv("MYSQL_USER"):
        args.user = os.environ["MYSQL_USER"]
    if not args.password and os.getenv("MYSQL_PASSWORD"):
        args.password = os.environ["MYSQL_PASSWORD"]
    if not args.database and os.getenv("MYSQL_DATABASE"):
        args.database = os.environ["MYSQL_DATABASE"]
    if not args.url and os.getenv("DATABASE_URL"):
        args.url = os.environ["DATABASE_URL"]
    return args


def build_configs(
    args: argparse.Namespace,
) -> tuple[DatabaseConfig, CollectionConfig, OutputConfig]:
    """
    Translate parsed arguments into configuration models.

    Args:
        args: Parsed arguments with environment overrides applied

    Returns:
        Connection, collection and output configuration

    Raises:
        ValidationError: If the URL or a setting is invalid
    """
    if args.url:
        db_config = DatabaseConfig(url=args.url)
        host, port, user = db_config.host, db_config.port, db_config.username
        database = args.database or db_config.database or ""
    else:
        db_config = DatabaseConfig.from_parts(
            host=args.host,
            port=args.port,
            user=args.user,
            password=args.password,
            database=args.database,
        )
        host, port, user, database = args.host, args.port, args.user, args.database

    collection = CollectionConfig(
        host=host,
        port=port,
        user=user,
        database=database,
        except_tables=args.except_tables,
        except_users=args.except_users,
        except_roles=args.except_roles,
        except_routines=args.except_stored_procedures,
        except_variables=args.except_variables,
        except_plugins=args.except_plugins,
        replication=args.replication,
        only_modified_variables=args.only_modified_variables,
    )
    output = OutputConfig(format=args.format, outfile=args.outfile)
    return db_config, collection, output


def write_output(document: str, output: OutputConfig) -> Optional[Path]:
    """
    Write the rendered document to its destination.

    Returns:
        Path written to, or None when the document went to stdout
    """
    if output.writes_to_stdout:
        sys.stdout.write(document)
        return None

    path = Path(output.resolved_path)
    path.write_text(document, encoding="utf-8")
    return path


async def run(args: argparse.Namespace) -> int:
    """
    Collect, render and write one snapshot.

    Args:
        args: Parsed arguments with environment overrides applied

    Returns:
        Process exit code
    """
    try:
        db_config, collection, output = build_configs(args)
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    renderer = create_renderer(output.format)
    logger.info(f"Connecting to {db_config.sanitized_url}")

    try:
        async with DatabaseConnection(db_config) as connection:
            snapshot = await take_snapshot(connection, collection)
    except SnapshotError as e:
        logger.error(f"Failed to collect MySQL information: {e}")
        return 1
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Failed to connect to MySQL: {e}")
        return 1

    document = renderer.render(snapshot)

    try:
        path = write_output(document, output)
    except OSError as e:
        logger.error(f"Failed to write to file: {e}")
        return 1

    if path is not None:
        print(f"Database information has been written to {path}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parse arguments, configure logging and run a snapshot.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    load_dotenv()
    args = apply_env_overrides(build_parser().parse_args(argv))

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        stream=sys.stderr,
    )

    return asyncio.run(run(args))


def cli_entry() -> None:
    """
    Synchronous entry point for console script.

    This function is called by the 'mysql-snapshot' console script.
    """
    # Windows-specific event loop policy
    if os.name == "nt":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())  # type: ignore[attr-defined]

    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Snapshot interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    cli_entry()
