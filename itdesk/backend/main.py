"""
FastAPI Application Entry Point.

Serves the admin REST API and, when enabled, runs the Telegram bot on the
same event loop. The bot connection and the notifier live on app.state.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from itdesk.backend.api import health
from itdesk.backend.api.v1 import router as api_v1_router
from itdesk.backend.core.config import get_app_config, get_settings
from itdesk.backend.core.database import dispose_engine, get_session_factory
from itdesk.backend.core.exception_handlers import register_exception_handlers
from itdesk.backend.core.logging import get_logger, setup_logging
from itdesk.backend.core.middleware import RequestContextMiddleware
from itdesk.backend.core.startup_checks import run_startup_checks
from itdesk.backend.services.bot_settings import BotSettingsService
from itdesk.backend.services.user import UserService
from itdesk.telegram.bot import BotConnection
from itdesk.telegram.services.notifications import NotificationService

logger = get_logger(__name__)

_app: FastAPI | None = None


async def _bootstrap_admin() -> None:
    """Create the configured default admin when no admin exists."""
    bootstrap = get_app_config().application.default_admin
    if not bootstrap.enabled:
        return
    async with get_session_factory()() as session:
        async with session.begin():
            await UserService(session).ensure_default_admin(
                bootstrap.username,
                get_settings().default_admin_password,
            )


async def resolve_bot_token() -> str:
    """Token from the stored bot settings, else the TELEGRAM_BOT_TOKEN secret."""
    async with get_session_factory()() as session:
        settings = await BotSettingsService(session).get()
    return settings.bot_token or get_settings().telegram_bot_token


def create_bot_connection() -> tuple[BotConnection, NotificationService]:
    """Build the bot connection and its notifier, wired to each other."""
    telegram = get_app_config().application.telegram
    connection = BotConnection(
        get_session_factory(),
        update_rate_limit_per_minute=telegram.update_rate_limit_per_minute,
    )
    notifier = NotificationService(
        connection,
        rate_limit_per_minute=telegram.notification_rate_limit_per_minute,
    )
    if get_app_config().features.notifications_enabled:
        connection.workflow_data["notifier"] = notifier
    return connection, notifier


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    app_config = get_app_config()
    setup_logging()
    run_startup_checks()

    logger.info(
        "Application starting",
        extra={
            "app_name": app_config.application.name,
            "env": app_config.application.environment,
        },
    )

    await _bootstrap_admin()

    connection, notifier = create_bot_connection()
    app.state.bot = connection
    app.state.notifier = notifier if app_config.features.notifications_enabled else None

    if app_config.features.channel_telegram_enabled and app_config.application.telegram.polling_enabled:
        await connection.start(await resolve_bot_token())

    try:
        yield
    finally:
        logger.info("Application shutting down")
        await connection.stop()
        await notifier.drain()
        await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app_config = get_app_config()
    app_settings = app_config.application

    app = FastAPI(
        title=app_settings.name,
        description=app_settings.description,
        version=app_settings.version,
        docs_url="/docs" if app_settings.docs_enabled else None,
        redoc_url="/redoc" if app_settings.docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)

    cors_origins = app_settings.cors.origins
    if cors_origins:
        cors_policy = app_config.security.cors
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=cors_policy.allow_methods,
            allow_headers=cors_policy.allow_headers,
        )

    register_exception_handlers(app)

    app.include_router(health.router, prefix=app_settings.api_prefix, tags=["health"])
    app.include_router(api_v1_router, prefix=app_settings.api_prefix)

    return app


def get_app() -> FastAPI:
    """
    Get the application instance (lazy initialization).

    This function creates the app on first call and caches it.
    Use this instead of importing `app` directly to avoid
    import-time configuration errors.
    """
    global _app
    if _app is None:
        _app = create_app()
    return _app


# For uvicorn: `uvicorn itdesk.backend.main:app`
def __getattr__(name: str) -> FastAPI:
    """Support lazy access to `app` for uvicorn compatibility."""
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
