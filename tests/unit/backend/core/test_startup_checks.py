"""
Unit tests for startup security validation.
"""

import pytest
from cryptography.fernet import Fernet

from itdesk.backend.core.config import Settings, get_app_config
from itdesk.backend.core.startup_checks import StartupSecurityError, run_startup_checks


def _settings(**overrides) -> Settings:
    fields = {
        "db_password": "pw",
        "jwt_secret": "x" * 48,
        "note_encryption_key": Fernet.generate_key().decode(),
        "default_admin_password": "admin-pass",
    }
    fields.update(overrides)
    return Settings(**fields)


class TestStartupChecks:

    def test_valid_configuration_passes(self):
        run_startup_checks(get_app_config(), _settings())

    def test_short_jwt_secret_blocks_startup(self):
        with pytest.raises(StartupSecurityError, match="JWT_SECRET"):
            run_startup_checks(get_app_config(), _settings(jwt_secret="short"))

    def test_invalid_note_key_blocks_startup(self):
        with pytest.raises(StartupSecurityError, match="NOTE_ENCRYPTION_KEY"):
            run_startup_checks(get_app_config(), _settings(note_encryption_key="not-a-fernet-key"))

    def test_missing_admin_password_blocks_startup(self):
        with pytest.raises(StartupSecurityError, match="DEFAULT_ADMIN_PASSWORD"):
            run_startup_checks(get_app_config(), _settings(default_admin_password=""))

    def test_production_rejects_development_settings(self):
        config = get_app_config()
        production = type(config).__new__(type(config))
        production.__dict__.update(config.__dict__)
        production._application = config.application.model_copy(
            update={"environment": "production", "docs_enabled": True}
        )

        with pytest.raises(StartupSecurityError, match="docs_enabled"):
            run_startup_checks(production, _settings())
