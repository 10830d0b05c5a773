"""Tests for application settings."""

import pytest
from pydantic import SecretStr
from pydantic import ValidationError as PydanticValidationError

from contentgate.config import (
    DEVELOPMENT_API_KEY,
    Environment,
    LogFormat,
    Settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment variables out of the defaults."""
    for name in (
        "APP_ENV",
        "API_KEY",
        "STRAPI_URL",
        "REDIS_URL",
        "CACHE_TTL",
        "ALLOWED_ORIGINS",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.app_env == Environment.DEVELOPMENT
        assert settings.port == 8080
        assert settings.strapi_url == "http://localhost:1337"
        assert settings.strapi_timeout == 10.0
        assert settings.redis_url == "redis://localhost:6379/0"
        assert settings.cache_ttl == 300
        assert settings.api_key.get_secret_value() == DEVELOPMENT_API_KEY
        assert settings.strapi_api_token is None

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STRAPI_URL", "https://cms.example.com/")
        monkeypatch.setenv("CACHE_TTL", "60")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.strapi_url == "https://cms.example.com"
        assert settings.cache_ttl == 60

    def test_settings_are_frozen(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        with pytest.raises(PydanticValidationError):
            settings.cache_ttl = 10  # type: ignore[misc]

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, cache_ttl=0)  # type: ignore[call-arg]


class TestDerivedProperties:
    """Tests for computed settings."""

    def test_cors_origins_split_and_trimmed(self) -> None:
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            allowed_origins="https://a.example, https://b.example ,",
        )

        assert settings.cors_origins == ["https://a.example", "https://b.example"]

    def test_api_key_not_required_with_development_key(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.api_key_required is False

    def test_api_key_required_with_real_key(self) -> None:
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            api_key=SecretStr("k"),
        )

        assert settings.api_key_required is True

    def test_production_forces_json_logs(self) -> None:
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            app_env=Environment.PRODUCTION,
            log_format=LogFormat.CONSOLE,
        )

        assert settings.is_production is True
        assert settings.use_json_logs is True
