"""Command-line interface for FileDepot.

This module provides the CLI commands for running and managing
the FileDepot application.
"""

import asyncio
import os
import sys
from typing import NoReturn

import click

from filedepot.core.config import Settings, get_settings
from filedepot.core.logging import configure_logging, get_logger


def resolve_workers(value: str | None, settings: Settings) -> int:
    """Resolve a ``--workers`` value, where ``auto`` means one per CPU."""
    if value is None:
        return settings.workers
    if value.strip().lower() == "auto":
        return os.cpu_count() or 1
    try:
        workers = int(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not an integer or 'auto'", param_hint="--workers")
    if workers < 1:
        raise click.BadParameter("must be at least 1", param_hint="--workers")
    return workers


@click.group()
@click.version_option(version="0.1.0", prog_name="FileDepot")
def cli() -> None:
    """FileDepot - File upload and management service.

    Settings are read from FILEDEPOT_* environment variables and .env files.
    """


@cli.command()
@click.option(
    "--host",
    type=str,
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--workers",
    type=str,
    default=None,
    help="Number of worker processes, or 'auto' for one per CPU (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: str | None, reload: bool) -> None:
    """Start the FileDepot server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = resolve_workers(workers, settings)

    if bind_workers > 1 and settings.database_url.startswith("sqlite") and not reload:
        raise click.ClickException(
            f"SQLite does not support multiple worker processes. "
            f"Requested {bind_workers} workers; use --workers 1 or switch to PostgreSQL."
        )

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting FileDepot server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "filedepot.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Run even in production mode",
)
def init(force: bool) -> None:
    """Create the upload directories and database tables.

    Use this only in development. In production, use migrations instead.
    """
    from filedepot.infrastructure.persistence.database import DatabaseManager, init_database
    from filedepot.infrastructure.storage import LocalStorageWriter

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use migrations instead of init.",
            err=True,
        )
        raise SystemExit(1)

    LocalStorageWriter(settings=settings).ensure_directories()
    click.echo(f"Upload directories ready under {settings.upload_base_path}.")

    async def initialize():
        db = DatabaseManager(settings)
        try:
            await init_database(db)
            if settings.is_production:
                await db.create_tables()
            click.echo("Database initialized successfully.")
        finally:
            await db.disconnect()

    asyncio.run(initialize())


@cli.command()
def check() -> None:
    """Report whether storage and the database are ready."""
    from filedepot.domain.exceptions import FileStorageError
    from filedepot.infrastructure.persistence.database import DatabaseManager
    from filedepot.infrastructure.storage import LocalStorageWriter

    settings = get_settings()
    configure_logging(settings)

    ok = True
    try:
        LocalStorageWriter(settings=settings).ensure_directories()
        click.echo(f"Storage:   ready ({settings.upload_base_path})")
    except FileStorageError as e:
        click.echo(f"Storage:   NOT READY ({e})", err=True)
        ok = False

    async def check_database() -> bool:
        db = DatabaseManager(settings)
        try:
            return await db.check_connection()
        finally:
            await db.disconnect()

    if asyncio.run(check_database()):
        click.echo(f"Database:  connected ({settings.database_url})")
    else:
        click.echo(f"Database:  NOT READY ({settings.database_url})", err=True)
        ok = False

    if not ok:
        raise SystemExit(1)


@cli.command()
def info() -> None:
    """Display FileDepot configuration."""
    settings = get_settings()

    click.echo(f"""
FileDepot v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}

Uploads:
  Base Path:    {settings.upload_base_path}
  Temp Path:    {settings.upload_tmp_path}
  Max Size:     {settings.max_file_size} bytes

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `filedepot` command is run
    or when using `python -m filedepot`.
    """
    cli()


def serve_main() -> NoReturn:
    """Entry point for 'python -m filedepot' with no arguments."""
    sys.argv[0] = "filedepot"
    if len(sys.argv) == 1:
        sys.argv.append("serve")
    main()


if __name__ == "__main__":
    main()
