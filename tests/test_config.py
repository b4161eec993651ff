"""Tests for settings groups and the token secret check."""

import pytest

from expense_tracker.config import (
    DEVELOPMENT_SECRET_KEY,
    AppSettings,
    AuthSettings,
    DatabaseSettings,
    InsecureSettingsError,
    Settings,
    check_secret_key,
)
from expense_tracker.orchestrator import create_app_components


def build_settings(environment: str, secret_key: str) -> Settings:
    if secret_key == DEVELOPMENT_SECRET_KEY:
        with pytest.warns(UserWarning):
            auth = AuthSettings(secret_key=secret_key)
    else:
        auth = AuthSettings(secret_key=secret_key)
    return Settings.from_parts(
        database=DatabaseSettings(url="sqlite://", connect_attempts=1),
        auth=auth,
        app=AppSettings(app_environment=environment),
    )


class TestAppSettings:
    """Tests for AppSettings normalization."""

    def test_api_prefix_normalized(self):
        """Prefixes get a leading slash and lose the trailing one."""
        assert AppSettings(api_prefix="api/").api_prefix == "/api"
        assert AppSettings(api_prefix="/").api_prefix == ""

    def test_cors_origins_list(self):
        """Comma-separated origins are split and trimmed."""
        settings = AppSettings(cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_is_development(self):
        """Only the development environment counts as development."""
        assert AppSettings(app_environment="Development").is_development
        assert not AppSettings(app_environment="production").is_development
        assert not AppSettings(app_environment="staging").is_development


class TestSecretKey:
    """Tests for refusing the development token secret outside development."""

    def test_development_secret_warns(self):
        """Using the built-in secret is always flagged."""
        with pytest.warns(UserWarning, match="JWT_SECRET_KEY"):
            AuthSettings(secret_key=DEVELOPMENT_SECRET_KEY)

    def test_development_secret_allowed_in_development(self):
        """Local development may run on the built-in secret."""
        check_secret_key(build_settings("development", DEVELOPMENT_SECRET_KEY))

    @pytest.mark.parametrize("environment", ["production", "staging"])
    def test_development_secret_refused_elsewhere(self, environment):
        """Any other environment must configure its own secret."""
        with pytest.raises(InsecureSettingsError, match="JWT_SECRET_KEY"):
            check_secret_key(build_settings(environment, DEVELOPMENT_SECRET_KEY))

    def test_configured_secret_accepted_in_production(self):
        """A real secret passes the check."""
        check_secret_key(build_settings("production", "a-real-production-secret"))

    def test_component_factory_refuses_development_secret(self):
        """The app cannot be assembled for production with the built-in secret."""
        settings = build_settings("production", DEVELOPMENT_SECRET_KEY)
        with pytest.raises(InsecureSettingsError):
            create_app_components(settings)

    def test_component_factory_accepts_configured_secret(self):
        """With a real secret the components are built."""
        components = create_app_components(build_settings("production", "a-real-production-secret"))
        try:
            assert components.settings.app.app_environment == "production"
        finally:
            components.database.dispose()
