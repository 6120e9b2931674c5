"""Click CLI interface for pgforge."""

import asyncio
import functools
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable

import click

from . import __version__
from .backends import get_backend
from .columns import add_column as add_column_to_table
from .config import DEFAULT_EXCLUDED_TABLES, ForgeConfig
from .exceptions import (
    BackendNotAvailableError,
    ConfigurationError,
    ConnectionError,
    GenerationError,
    LifecycleError,
    PgForgeError,
)
from .generators import MigrationGenerator
from .lifecycle import DatabaseManager
from .seeding import reset_sequences, seed_folder


def setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level."""
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def connection_options(func: Callable) -> Callable:
    """Shared connection and logging options."""
    options = [
        click.option("-h", "--host", envvar="PGHOST", help="Database server hostname"),
        click.option("-P", "--port", type=int, envvar="PGPORT", help="Database server port"),
        click.option("-d", "--database", envvar="PGDATABASE", help="Database name"),
        click.option("-u", "--username", envvar="PGUSER", help="Database username"),
        click.option("-p", "--password", envvar="PGPASSWORD", help="Database password"),
        click.option("--env", "environment", envvar="PGFORGE_ENV", default="development",
                     show_default=True, help="Environment name (production blocks destructive commands)"),
        click.option("-o", "--output", default="./migrations", type=click.Path(),
                     help="Migrations directory"),
        click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_config(
    host: str | None,
    port: int | None,
    database: str | None,
    username: str | None,
    password: str | None,
    environment: str,
    output: str,
    verbose: int,
    **extra: Any,
) -> ForgeConfig:
    setup_logging(verbose)
    config = ForgeConfig(
        host=host,
        port=port,
        database=database,
        username=username,
        password=password,
        environment=environment,
        output_dir=Path(output),
        verbosity=verbose,
        **extra,
    )
    config.validate()
    return config


def run(coro: Awaitable[Any]) -> Any:
    """Run a coroutine, turning pgforge errors into exit code 1."""
    logger = logging.getLogger(__name__)
    try:
        return asyncio.run(coro)
    except BackendNotAvailableError as e:
        click.echo(f"Backend not available: {e}", err=True)
        sys.exit(1)
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except ConnectionError as e:
        click.echo(f"Connection error: {e}", err=True)
        sys.exit(1)
    except GenerationError as e:
        click.echo(f"Generation error: {e}", err=True)
        sys.exit(1)
    except LifecycleError as e:
        click.echo(f"Refused: {e}", err=True)
        sys.exit(1)
    except PgForgeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected error")
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)


def handle_config_errors(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            click.echo(f"Configuration error: {e}", err=True)
            sys.exit(1)
    return wrapper


@click.group()
@click.version_option(version=__version__)
def cli():
    """pgforge - PostgreSQL database utilities.

    Regenerate migrations from a live schema, manage development databases,
    seed data and add columns to populated tables.
    """
    pass


@cli.command()
@connection_options
@click.option("--schema", default="public", show_default=True, help="Schema to introspect")
@click.option("--exclude-tables", multiple=True, help="Tables to skip (default: migration bookkeeping)")
@click.option("--dry-run", is_flag=True, help="Preview without writing files")
@handle_config_errors
def generate(schema: str, exclude_tables: tuple[str, ...], dry_run: bool, **options: Any) -> None:
    """Generate one migration module per table from the live schema."""
    config = build_config(
        **options,
        schema=schema,
        excluded_tables=list(exclude_tables) if exclude_tables else list(DEFAULT_EXCLUDED_TABLES),
        dry_run=dry_run,
    )

    async def _generate() -> list[Path]:
        ConnectionClass, ReaderClass = get_backend("postgresql")
        async with ConnectionClass(config) as conn:
            generator = MigrationGenerator(ReaderClass(conn, config), config)
            return await generator.generate()

    click.echo(f"Generating migrations from schema {schema}...")
    files = run(_generate())
    if dry_run:
        click.echo(f"\n[DRY RUN] Would create {len(files)} files in {config.output_dir}")
    else:
        click.echo(f"\nCreated {len(files)} files in {config.output_dir}")


@cli.command("create-db")
@connection_options
@click.option("--migrate", is_flag=True, help="Apply generated migrations after creating")
@handle_config_errors
def create_db(migrate: bool, **options: Any) -> None:
    """Create the database if it does not exist."""
    manager = DatabaseManager(build_config(**options))
    run(manager.create_db(migrate=migrate))
    click.echo(f"Database {manager.current_database} ready")


@cli.command("drop-db")
@connection_options
@handle_config_errors
def drop_db(**options: Any) -> None:
    """Drop the database."""
    manager = DatabaseManager(build_config(**options))
    run(manager.drop_db())
    click.echo(f"Dropped {manager.current_database}")


@cli.command("recreate-db")
@connection_options
@handle_config_errors
def recreate_db(**options: Any) -> None:
    """Drop and create the database."""
    manager = DatabaseManager(build_config(**options))
    run(manager.recreate_db())
    click.echo(f"Recreated {manager.current_database}")


@cli.command("refresh-db")
@connection_options
@click.option("--seed-dir", type=click.Path(exists=True, file_okay=False), help="Folder of seed files")
@handle_config_errors
def refresh_db(seed_dir: str | None, **options: Any) -> None:
    """Recreate the database, apply migrations and seed it."""
    manager = DatabaseManager(build_config(**options))
    run(manager.refresh_db(Path(seed_dir) if seed_dir else None))
    click.echo(f"Refreshed {manager.current_database}")


@cli.command("copy-db")
@connection_options
@click.argument("old_db")
@click.argument("new_db")
@handle_config_errors
def copy_db(old_db: str, new_db: str, **options: Any) -> None:
    """Create NEW_DB using OLD_DB as a template."""
    manager = DatabaseManager(build_config(**options))
    run(manager.copy_db(old_db, new_db))
    click.echo(f"Copied {old_db} to {new_db}")


@cli.command()
@connection_options
@click.argument("direction", type=click.Choice(["up", "down"]), default="up")
@handle_config_errors
def migrate(direction: str, **options: Any) -> None:
    """Run the generated migrations up or down."""
    manager = DatabaseManager(build_config(**options))
    run(manager.apply_migrations(direction))
    click.echo(f"Migrated {direction}")


@cli.command()
@connection_options
@click.argument("folder", type=click.Path(exists=True, file_okay=False))
@handle_config_errors
def seed(folder: str, **options: Any) -> None:
    """Insert the rows of every <table>.json file in FOLDER."""
    config = build_config(**options)

    async def _seed() -> list[str]:
        ConnectionClass, _ = get_backend("postgresql")
        async with ConnectionClass(config) as conn:
            return await seed_folder(conn, Path(folder))

    tables = run(_seed())
    click.echo(f"Seeded {len(tables)} tables")


@cli.command("reset-sequences")
@connection_options
@handle_config_errors
def reset_sequences_command(**options: Any) -> None:
    """Move sequences past the highest id of their columns."""
    config = build_config(**options)

    async def _reset() -> int:
        ConnectionClass, _ = get_backend("postgresql")
        async with ConnectionClass(config) as conn:
            return await reset_sequences(conn)

    count = run(_reset())
    click.echo(f"Reset {count} sequences")


@cli.command("add-column")
@connection_options
@click.option("--table", required=True, help="Table to alter")
@click.option("--column", required=True, help="Column to add")
@click.option("--type", "column_type", required=True, help="Column type, e.g. string, integer, boolean")
@click.option("--default", "default_value", required=True, help="Default for new rows")
@click.option("--update", "update_value", help="Value for existing rows (default: --default)")
@click.option("--index", is_flag=True, help="Index the new column")
@click.option("--concurrently", is_flag=True, help="Build the index concurrently")
@handle_config_errors
def add_column(
    table: str,
    column: str,
    column_type: str,
    default_value: str,
    update_value: str | None,
    index: bool,
    concurrently: bool,
    **options: Any,
) -> None:
    """Add a NOT NULL column with a default to a populated table."""
    config = build_config(**options)

    async def _add() -> None:
        ConnectionClass, _ = get_backend("postgresql")
        async with ConnectionClass(config) as conn:
            await add_column_to_table(
                conn,
                table=table,
                column=column,
                type=column_type,
                default=default_value,
                update=update_value if update_value is not None else default_value,
                index=index,
                index_concurrent=concurrently,
            )

    run(_add())
    click.echo(f"Added {table}.{column}")


@cli.command("test-connection")
@connection_options
@handle_config_errors
def test_connection(**options: Any) -> None:
    """Test database connection."""
    config = build_config(**options)

    async def _version() -> str:
        ConnectionClass, _ = get_backend("postgresql")
        async with ConnectionClass(config) as conn:
            return await conn.get_version()

    click.echo("Connecting to postgresql database...")
    version = run(_version())
    click.echo("Connection successful!")
    click.echo(f"\nServer version:\n{version}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
