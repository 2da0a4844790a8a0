#!/usr/bin/env python3
"""
IT Desk CLI.

Primary entry point for all application operations.
Use --service to select what to run, --action to control lifecycle.

Usage:
    python cli.py --help
    python cli.py --service server --verbose
    python cli.py --service server --action stop
    python cli.py --service telegram-poll --verbose
    python cli.py --service create-admin --username admin
    python cli.py --service health --debug
    python cli.py --service config
    python cli.py --service test --test-type unit
"""

import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from itdesk.backend.core.logging import get_logger, setup_logging

LONG_RUNNING_SERVICES = {"server", "telegram-poll"}


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


def _find_process_on_port(port: int) -> list[int]:
    """Find PIDs listening on a port."""
    result = subprocess.run(
        ["lsof", "-ti", f":{port}"],
        capture_output=True, text=True,
    )
    pids = result.stdout.strip().split("\n")
    return [int(p) for p in pids if p.strip()]


def _service_stop(logger, service: str, port: int) -> None:
    """Stop a running service by finding its process on the port."""
    pids = _find_process_on_port(port)
    if not pids:
        click.echo(f"No {service} running on port {port}.")
        return

    for pid in pids:
        os.kill(pid, signal.SIGINT)
        logger.info("Sent SIGINT", extra={"service": service, "pid": pid, "port": port})

    click.echo(f"{service.title()} on port {port} stopped (PID: {', '.join(str(p) for p in pids)}).")


def _service_status(logger, service: str, port: int) -> None:
    """Check if a service is running on a port."""
    pids = _find_process_on_port(port)
    if pids:
        click.echo(f"{service.title()} is running on port {port} (PID: {', '.join(str(p) for p in pids)}).")
    else:
        click.echo(f"{service.title()} is not running on port {port}.")


def _get_service_port(port: int | None) -> int:
    """Get the port from argument or config."""
    if port is not None:
        return port
    from itdesk.backend.core.config import get_app_config
    return get_app_config().application.server.port


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["server", "telegram-poll", "migrate", "create-admin", "health", "config", "test", "info"]),
    default="info",
    help="Service or command to run.",
)
@click.option(
    "--action", "-a",
    type=click.Choice(["start", "stop", "restart", "status"]),
    default="start",
    help="Lifecycle action for the server.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging).")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output (DEBUG level logging).")
@click.option("--host", default=None, help="Server host.")
@click.option("--port", default=None, type=int, help="Server port.")
@click.option("--reload", is_flag=True, help="Enable auto-reload (server only).")
@click.option(
    "--test-type",
    type=click.Choice(["all", "unit", "integration"]),
    default="all",
    help="Test type to run.",
)
@click.option("--coverage", is_flag=True, help="Run tests with coverage.")
@click.option(
    "--migrate-action",
    type=click.Choice(["upgrade", "downgrade", "current", "history", "autogenerate"]),
    default="current",
    help="Migration action.",
)
@click.option("--revision", default="head", help="Target revision for upgrade/downgrade.")
@click.option("-m", "--message", default=None, help="Migration message (for autogenerate).")
@click.option("--username", default=None, help="Admin username (create-admin).")
@click.option(
    "--password",
    default=None,
    help="Admin password (create-admin). Prompted for when omitted.",
)
def main(
    service: str,
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    test_type: str,
    coverage: bool,
    migrate_action: str,
    revision: str,
    message: str | None,
    username: str | None,
    password: str | None,
) -> None:
    """
    IT Desk CLI.

    Use --service to select what to run. For the server, use --action to
    control lifecycle (start/stop/restart/status).

    \b
    Examples:
        python cli.py --service server --verbose
        python cli.py --service server --action restart --port 8099
        python cli.py --service telegram-poll --verbose
        python cli.py --service migrate --migrate-action upgrade
        python cli.py --service create-admin --username admin
        python cli.py --service health --debug
        python cli.py --service test --test-type unit --coverage
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

    logger.debug("CLI invoked", extra={"service": service, "action": action, "log_level": log_level})

    if service in LONG_RUNNING_SERVICES and action != "start":
        service_port = _get_service_port(port)

        if action == "stop":
            _service_stop(logger, service, service_port)
            return
        elif action == "status":
            _service_status(logger, service, service_port)
            return
        elif action == "restart":
            _service_stop(logger, service, service_port)
            time.sleep(2)

    if service == "server":
        run_server(logger, host, port, reload)
    elif service == "telegram-poll":
        run_telegram_poll(logger)
    elif service == "migrate":
        run_migrations(logger, migrate_action, revision, message)
    elif service == "create-admin":
        create_admin(logger, username, password)
    elif service == "health":
        check_health(logger)
    elif service == "config":
        show_config(logger)
    elif service == "test":
        run_tests(logger, test_type, coverage)
    elif service == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the FastAPI server. The bot polls inside the same process."""
    from itdesk.backend.core.config import get_app_config

    try:
        server_config = get_app_config().application.server
    except (FileNotFoundError, ValueError) as e:
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
        "itdesk.backend.main:app",
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


def run_telegram_poll(logger) -> None:
    """Run only the Telegram bot, without the web panel."""
    import asyncio

    from itdesk.backend.core.config import get_app_config

    if not get_app_config().features.channel_telegram_enabled:
        click.echo(
            click.style(
                "Error: channel_telegram_enabled is false in features.yaml. "
                "Enable it to use the Telegram bot.",
                fg="red",
            ),
            err=True,
        )
        sys.exit(1)

    logger.info("Starting Telegram bot in polling mode")
    click.echo("Starting Telegram bot (polling mode)")
    click.echo("Send /start to your bot on Telegram")
    click.echo("Press Ctrl+C to stop\n")

    try:
        asyncio.run(_run_polling(logger))
    except KeyboardInterrupt:
        logger.info("Telegram bot stopped")


async def _run_polling(logger) -> None:
    """Poll until interrupted, then release the bot and the engine."""
    from itdesk.backend.core.database import dispose_engine
    from itdesk.backend.main import create_bot_connection, resolve_bot_token

    connection, notifier = create_bot_connection()
    try:
        if not await connection.start(await resolve_bot_token()):
            click.echo(
                click.style("Error: no valid bot token in bot settings or TELEGRAM_BOT_TOKEN.", fg="red"),
                err=True,
            )
            sys.exit(1)
        await connection.wait()
    finally:
        await connection.stop()
        await notifier.drain()
        await dispose_engine()
        logger.info("Telegram polling finished")


def create_admin(logger, username: str | None, password: str | None) -> None:
    """Create a web panel admin, or promote the user with that username."""
    import asyncio

    username = username or click.prompt("Username")
    password = password or click.prompt("Password", hide_input=True, confirmation_prompt=True)

    from itdesk.backend.core.exceptions import ApplicationError

    try:
        user_id = asyncio.run(_create_admin(username, password))
    except ApplicationError as e:
        logger.error("Admin creation failed", extra={"error": e.message, "code": e.code})
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style(f"Admin '{username}' is ready (user id {user_id}).", fg="green"))


async def _create_admin(username: str, password: str) -> int:
    from itdesk.backend.core.database import dispose_engine, get_session_factory
    from itdesk.backend.services.user import UserService

    try:
        async with get_session_factory()() as session:
            async with session.begin():
                user = await UserService(session).create_admin(username, password)
                return user.id
    finally:
        await dispose_engine()


def check_health(logger) -> None:
    """Check application health by testing imports and configuration."""
    click.echo("Checking application health...\n")

    checks = []

    # Check 1: Core imports
    try:
        from itdesk.backend.core.config import get_app_config, get_settings
        checks.append(("Core imports", True, None))
        logger.debug("Core imports successful")
    except ImportError as e:
        checks.append(("Core imports", False, str(e)))
        logger.error("Core imports failed", extra={"error": str(e)})
        _print_checks(checks)
        return

    # Check 2: Configuration loading
    try:
        app_name = get_app_config().application.name
        checks.append(("YAML configuration", True, f"App: {app_name}"))
        logger.debug("Configuration loaded", extra={"app_name": app_name})
    except (FileNotFoundError, ValueError) as e:
        checks.append(("YAML configuration", False, str(e)))
        logger.error("Configuration failed", extra={"error": str(e)})

    # Check 3: Secrets
    try:
        get_settings()
        checks.append(("Secrets (config/.env)", True, None))
    except ValueError as e:
        checks.append(("Secrets (config/.env)", False, str(e)))
        logger.warning("Secrets not configured", extra={"error": str(e)})

    # Check 4: FastAPI app
    try:
        from itdesk.backend.main import get_app
        app = get_app()
        checks.append(("FastAPI application", True, f"Title: {app.title}"))
        logger.debug("FastAPI app loaded", extra={"title": app.title})
    except (ImportError, FileNotFoundError, ValueError) as e:
        checks.append(("FastAPI application", False, str(e)))
        logger.error("FastAPI app failed", extra={"error": str(e)})

    # Check 5: Database models
    try:
        from itdesk.backend.models import Base
        checks.append(("Database models", True, f"{len(Base.metadata.tables)} tables"))
    except ImportError as e:
        checks.append(("Database models", False, str(e)))
        logger.error("Database models failed", extra={"error": str(e)})

    # Check 6: Bot handlers
    try:
        from itdesk.telegram.handlers import get_all_routers
        checks.append(("Telegram handlers", True, f"{len(get_all_routers())} routers"))
    except ImportError as e:
        checks.append(("Telegram handlers", False, str(e)))
        logger.error("Telegram handlers failed", extra={"error": str(e)})

    _print_checks(checks)


def _print_checks(checks: list[tuple[str, bool, str | None]]) -> None:
    click.echo("Health Check Results:")
    click.echo("-" * 50)

    all_passed = True
    for name, passed, detail in checks:
        status = click.style("✓ PASS", fg="green") if passed else click.style("✗ FAIL", fg="red")
        detail_str = f" ({detail})" if detail else ""
        click.echo(f"  {status}  {name}{detail_str}")
        if not passed:
            all_passed = False

    click.echo("-" * 50)

    if all_passed:
        click.echo(click.style("\nAll checks passed!", fg="green"))
    else:
        click.echo(click.style("\nSome checks failed. See details above.", fg="yellow"))
        click.echo("Note: secrets require config/.env to be configured.")


def _echo_section(title: str, values: dict) -> None:
    click.echo(f"\n{title}:")
    click.echo("-" * 40)
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"  {key}:")
            for k, v in value.items():
                click.echo(f"    {k}: {v}")
        else:
            click.echo(f"  {key}: {value}")


def show_config(logger) -> None:
    """Display loaded configuration. Secrets are never printed."""
    click.echo("Application Configuration:")

    from itdesk.backend.core.config import get_app_config

    try:
        app_config = get_app_config()
    except (FileNotFoundError, ValueError) as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)

    _echo_section("Application Settings (from YAML)", app_config.application.model_dump())
    _echo_section("Database Settings (from YAML)", app_config.database.model_dump())
    _echo_section("Logging Settings (from YAML)", app_config.logging.model_dump())
    _echo_section("Feature Flags (from YAML)", app_config.features.model_dump())
    logger.info("Configuration displayed successfully")


def run_tests(logger, test_type: str, coverage: bool) -> None:
    """Run the test suite."""
    logger.info("Running tests", extra={"type": test_type, "coverage": coverage})

    cmd = [sys.executable, "-m", "pytest"]

    if test_type == "unit":
        cmd.append("tests/unit")
    elif test_type == "integration":
        cmd.append("tests/integration")
    else:
        cmd.append("tests/")

    cmd.append("-v")

    if coverage:
        cmd.extend(["--cov=itdesk", "--cov-report=term-missing"])

    click.echo(f"Running: {' '.join(cmd)}\n")

    try:
        result = subprocess.run(cmd)
        sys.exit(result.returncode)
    except FileNotFoundError:
        logger.error("pytest not found. Install with: pip install -e .[test]")
        sys.exit(1)


def run_migrations(
    logger,
    migrate_action: str,
    revision: str,
    message: str | None,
) -> None:
    """Run database migrations using Alembic."""
    logger.info(
        "Running migrations",
        extra={"action": migrate_action, "revision": revision},
    )

    alembic_ini = PROJECT_ROOT / "itdesk" / "backend" / "migrations" / "alembic.ini"

    if not alembic_ini.exists():
        click.echo(
            click.style("Error: itdesk/backend/migrations/alembic.ini not found.", fg="red"),
            err=True,
        )
        sys.exit(1)

    cmd = [sys.executable, "-m", "alembic", "-c", str(alembic_ini)]

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
    elif migrate_action == "autogenerate":
        if not message:
            click.echo(
                click.style("Error: --message/-m required for autogenerate.", fg="red"),
                err=True,
            )
            sys.exit(1)
        cmd.extend(["revision", "--autogenerate", "-m", message])
        click.echo(f"Generating migration: {message}")

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


def show_info(logger) -> None:
    """Display application information."""
    click.echo("IT Desk")
    click.echo("=" * 40)

    from itdesk.backend.core.config import get_app_config

    try:
        application = get_app_config().application
    except (FileNotFoundError, ValueError) as e:
        logger.error(
            "Failed to load application configuration",
            extra={"error": str(e)},
        )
        click.echo(
            click.style("Error: Could not load application.yaml configuration.", fg="red"),
            err=True,
        )
        sys.exit(1)

    click.echo(f"Name: {application.name}")
    click.echo(f"Version: {application.version}")
    click.echo(f"Description: {application.description}")
    click.echo()
    click.echo("Services (--service):")
    click.echo("  server         Admin API server (runs the bot when enabled)")
    click.echo("  telegram-poll  Telegram bot only")
    click.echo("  migrate        Database migrations")
    click.echo("  create-admin   Create or promote a web panel admin")
    click.echo("  health         Check application health")
    click.echo("  config         Display configuration")
    click.echo("  test           Run test suite")
    click.echo("  info           Show this information")
    click.echo()
    click.echo("Lifecycle actions (--action, for the server):")
    click.echo("  start          Start the service (default)")
    click.echo("  stop           Stop a running service")
    click.echo("  restart        Stop then start")
    click.echo("  status         Check if running")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()
