#!/usr/bin/env python3
"""
Personal Notes CLI.

Primary entry point for operating the application.
Use --service to select what to run.

Usage:
    python cli.py --help
    python cli.py --service server --verbose
    python cli.py --service migrate --migrate-action upgrade
    python cli.py --service set-role --user-id abc123 --role admin
    python cli.py --service token --user-id abc123
"""

import asyncio
import subprocess
import sys
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from personal_notes.backend.core.authorization import Role  # noqa: E402
from personal_notes.backend.core.logging import get_logger, setup_logging  # noqa: E402

ALEMBIC_INI = PROJECT_ROOT / "personal_notes" / "backend" / "migrations" / "alembic.ini"


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["server", "config", "migrate", "set-role", "token", "info"]),
    default="info",
    help="Service or command to run.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
@click.option(
    "--host",
    default=None,
    help="Server host.",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Server port.",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload (server only).",
)
@click.option(
    "--migrate-action",
    type=click.Choice(["upgrade", "downgrade", "current", "history"]),
    default="current",
    help="Migration action.",
)
@click.option(
    "--revision",
    default="head",
    help="Target revision for upgrade/downgrade.",
)
@click.option(
    "--user-id",
    default=None,
    help="User ID (set-role, token).",
)
@click.option(
    "--role",
    type=click.Choice([role.value for role in Role]),
    default=None,
    help="Role to assign (set-role).",
)
@click.option(
    "--name",
    default=None,
    help="Display name claim (token).",
)
def main(
    service: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    migrate_action: str,
    revision: str,
    user_id: str | None,
    role: str | None,
    name: str | None,
) -> None:
    """
    Personal Notes CLI.

    Use --service to select what to run.

    \b
    Examples:
        python cli.py --service server --reload --verbose
        python cli.py --service config
        python cli.py --service migrate --migrate-action upgrade
        python cli.py --service set-role --user-id abc123 --role admin
        python cli.py --service token --user-id abc123 --name "Ada"
        python cli.py --service info
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")

    structlog.contextvars.bind_contextvars(source="cli")

    logger = get_logger(__name__)

    logger.debug("CLI invoked", extra={"service": service, "log_level": log_level})

    if service == "server":
        run_server(logger, host, port, reload)
    elif service == "config":
        show_config(logger)
    elif service == "migrate":
        run_migrations(logger, migrate_action, revision)
    elif service == "set-role":
        set_role(logger, user_id, role)
    elif service == "token":
        issue_token(logger, user_id, name)
    elif service == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the FastAPI development server."""
    from personal_notes.backend.core.config import get_app_config

    try:
        server_config = get_app_config().application.server
    except Exception as e:
        logger.error("Failed to load configuration.", extra={"error": str(e)})
        click.echo(
            click.style("Error: Could not load config/settings/application.yaml.", fg="red"),
            err=True,
        )
        sys.exit(1)

    server_host = host or server_config.host
    server_port = port or server_config.port

    logger.info(
        "Starting server",
        extra={"host": server_host, "port": server_port, "reload": reload},
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "personal_notes.backend.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]

    if reload:
        cmd.append("--reload")

    click.echo(f"Starting server at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def show_config(logger) -> None:
    """Display loaded configuration. Secrets are never printed."""
    click.echo("Application Configuration:\n")

    try:
        from personal_notes.backend.core.config import get_app_config

        app_config = get_app_config()

        sections = {
            "Application": app_config.application,
            "Database": app_config.database,
            "Logging": app_config.logging,
            "Security": app_config.security,
        }
        for title, section in sections.items():
            click.echo(f"{title} Settings (from YAML):")
            click.echo("-" * 40)
            for key, value in section.model_dump().items():
                if isinstance(value, dict):
                    click.echo(f"  {key}:")
                    for k, v in value.items():
                        click.echo(f"    {k}: {v}")
                else:
                    click.echo(f"  {key}: {value}")
            click.echo()

        logger.info("Configuration displayed successfully")

    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)


def run_migrations(logger, migrate_action: str, revision: str) -> None:
    """Run database migrations using Alembic."""
    logger.info(
        "Running migrations",
        extra={"action": migrate_action, "revision": revision},
    )

    if not ALEMBIC_INI.exists():
        click.echo(
            click.style("Error: personal_notes/backend/migrations/alembic.ini not found.", fg="red"),
            err=True,
        )
        sys.exit(1)

    cmd = [sys.executable, "-m", "alembic", "-c", str(ALEMBIC_INI)]

    if migrate_action == "upgrade":
        cmd.extend(["upgrade", revision])
        click.echo(f"Upgrading database to revision: {revision}")
    elif migrate_action == "downgrade":
        cmd.extend(["downgrade", revision])
        click.echo(f"Downgrading database to revision: {revision}")
    elif migrate_action == "current":
        cmd.append("current")
        click.echo("Showing current database revision...")
    elif migrate_action == "history":
        cmd.extend(["history", "--verbose"])
        click.echo("Showing migration history...")

    click.echo()

    try:
        result = subprocess.run(cmd, cwd=PROJECT_ROOT)
        if result.returncode != 0:
            logger.error("Migration failed", extra={"exit_code": result.returncode})
            sys.exit(result.returncode)
        logger.info("Migration completed successfully")
    except FileNotFoundError:
        logger.error("alembic not found. Install with: pip install alembic")
        sys.exit(1)


async def _assign_role(user_id: str, role: Role) -> None:
    from personal_notes.backend.core.database import dispose_engine, get_session_factory
    from personal_notes.backend.services.user import UserService

    try:
        async with get_session_factory()() as session:
            await UserService(session).assign_role(user_id, role)
            await session.commit()
    finally:
        await dispose_engine()


def set_role(logger, user_id: str | None, role: str | None) -> None:
    """
    Assign a role to an existing user.

    This is the only supported way to change a role; the HTTP API
    has no endpoint for it.
    """
    from personal_notes.backend.core.exceptions import ApplicationError

    if not user_id or not role:
        click.echo(
            click.style("Error: --user-id and --role are required for set-role.", fg="red"),
            err=True,
        )
        sys.exit(1)

    try:
        asyncio.run(_assign_role(user_id, Role.parse(role)))
    except ApplicationError as e:
        logger.error("Role assignment failed", extra={"user_id": user_id, "error": e.message})
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        sys.exit(1)

    logger.info("Role assigned", extra={"user_id": user_id, "role": role})
    click.echo(f"User {user_id} now has role '{role}'.")


def issue_token(logger, user_id: str | None, name: str | None) -> None:
    """Mint a development access token. Production tokens come from the identity provider."""
    from personal_notes.backend.core.security import create_access_token

    if not user_id:
        click.echo(
            click.style("Error: --user-id is required for token.", fg="red"),
            err=True,
        )
        sys.exit(1)

    claims = {"sub": user_id}
    if name:
        claims["name"] = name

    token = create_access_token(claims)
    logger.debug("Development token issued", extra={"user_id": user_id})
    click.echo(token)


def show_info(logger) -> None:
    """Display application information."""
    try:
        from personal_notes.backend.core.config import get_app_config

        app = get_app_config().application
        click.echo(app.name)
        click.echo("=" * 40)
        click.echo(f"Version: {app.version}")
        click.echo(f"Description: {app.description}")
    except Exception as e:
        logger.error(
            "Failed to load application configuration",
            extra={"error": str(e)},
        )
        click.echo(
            click.style(
                "Error: Could not load application.yaml configuration.",
                fg="red",
            ),
            err=True,
        )
        sys.exit(1)

    click.echo()
    click.echo("Services (--service):")
    click.echo("  server         FastAPI development server")
    click.echo("  config         Display configuration")
    click.echo("  migrate        Database migrations")
    click.echo("  set-role       Assign a role to a user (out-of-band admin action)")
    click.echo("  token          Issue a development access token")
    click.echo("  info           Show this information")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()
