"""
Startup Security Validation.

Checks secrets and production settings before the application accepts
traffic. If any check fails, the application refuses to start with a
clear error message.

Called during FastAPI lifespan initialization.
"""

from cryptography.fernet import Fernet

from itdesk.backend.core.config import AppConfig, Settings, get_app_config, get_settings
from itdesk.backend.core.logging import get_logger

logger = get_logger(__name__)


class StartupSecurityError(RuntimeError):
    """Raised when a startup security check fails."""

    pass


def run_startup_checks(app_config: AppConfig | None = None, settings: Settings | None = None) -> None:
    """
    Validate all security invariants at startup.

    Raises:
        StartupSecurityError: If any check fails
    """
    app_config = app_config or get_app_config()
    settings = settings or get_settings()
    environment = app_config.application.environment

    errors: list[str] = []

    _check_secret_strength(settings, app_config, errors)
    _check_note_key(settings, errors)
    _check_admin_bootstrap(settings, app_config, errors)
    _check_production_safety(app_config, environment == "production", errors)

    if errors:
        for error in errors:
            logger.error("Startup security check failed", extra={"check": error})
        raise StartupSecurityError(
            f"Startup blocked: {len(errors)} security check(s) failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    logger.info("Startup security checks passed", extra={"environment": environment})


def _check_secret_strength(settings: Settings, app_config: AppConfig, errors: list[str]) -> None:
    jwt_min = app_config.security.secrets_validation.jwt_secret_min_length
    if len(settings.jwt_secret) < jwt_min:
        errors.append(f"JWT_SECRET is {len(settings.jwt_secret)} chars, minimum is {jwt_min}")


def _check_note_key(settings: Settings, errors: list[str]) -> None:
    """NOTE_ENCRYPTION_KEY must be a valid Fernet key."""
    try:
        Fernet(settings.note_encryption_key.encode("utf-8"))
    except ValueError:
        errors.append("NOTE_ENCRYPTION_KEY is not a valid Fernet key")


def _check_admin_bootstrap(settings: Settings, app_config: AppConfig, errors: list[str]) -> None:
    if app_config.application.default_admin.enabled and not settings.default_admin_password:
        errors.append("default_admin is enabled but DEFAULT_ADMIN_PASSWORD is empty")


def _check_production_safety(app_config: AppConfig, is_production: bool, errors: list[str]) -> None:
    """Validate production environment safety constraints."""
    if not is_production:
        return

    app = app_config.application
    if app.debug:
        errors.append("debug is true in production environment")

    if app_config.features.api_detailed_errors:
        errors.append("api_detailed_errors is true in production environment")

    if app.docs_enabled:
        errors.append("docs_enabled is true in production environment")

    if not app.session_cookie.secure:
        errors.append("session_cookie.secure is false in production environment")

    localhost_origins = [o for o in app.cors.origins if "localhost" in o]
    if localhost_origins:
        errors.append(f"CORS origins contain localhost in production: {localhost_origins}")
