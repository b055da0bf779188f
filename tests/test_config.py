"""Tests for settings and DEBUG namespace handling."""

import pytest
from pydantic import ValidationError

from coral_auth.auth.providers import provider_configs
from coral_auth.config import Settings
from coral_auth.utils.logging import debug_enabled

SECRET = "x" * 40


def make_settings(**overrides) -> Settings:
    values = {"app_secret_key": SECRET, "database_url": "postgresql://u:p@db/coral"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    """Tests for Settings."""

    def test_missing_database_url_is_fatal(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, app_secret_key=SECRET)

    def test_blank_database_url_is_fatal(self):
        with pytest.raises(ValidationError):
            make_settings(database_url="   ")

    def test_short_secret_key_is_refused(self):
        with pytest.raises(ValidationError):
            make_settings(app_secret_key="too-short")

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://env/coral")
        monkeypatch.setenv("APP_SECRET_KEY", SECRET)
        monkeypatch.setenv("TWITTER_CONSUMER_KEY", "ck")

        settings = Settings(_env_file=None)

        assert settings.database_url == "postgresql://env/coral"
        assert settings.twitter_consumer_key == "ck"

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("postgresql://u:p@db/coral", "postgresql+asyncpg://u:p@db/coral"),
            ("postgres://u:p@db/coral", "postgresql+asyncpg://u:p@db/coral"),
            ("sqlite+aiosqlite:///coral.db", "sqlite+aiosqlite:///coral.db"),
        ],
    )
    def test_database_url_async(self, url: str, expected: str):
        assert make_settings(database_url=url).database_url_async == expected

    def test_oauth_callback_url(self):
        settings = make_settings(root_url="https://talk.example.com/")
        assert (
            settings.oauth_callback_url("google")
            == "https://talk.example.com/connect/google/callback"
        )

    def test_db_debug_flag(self):
        assert make_settings(debug="coral-auth:db").db_debug_enabled
        assert make_settings(debug="coral-auth:*").db_debug_enabled
        assert not make_settings(debug="").db_debug_enabled
        assert not make_settings(debug="coral-auth:*,-coral-auth:db").db_debug_enabled


class TestDebugEnabled:
    """Tests for DEBUG pattern matching."""

    @pytest.mark.parametrize(
        "patterns,expected",
        [
            ("coral-auth:db", True),
            ("*", True),
            ("other,coral-auth:db", True),
            ("other coral-auth:*", True),
            ("coral-auth", False),
            ("coral-auth:dbx", False),
            ("-coral-auth:db,*", False),
            ("", False),
        ],
    )
    def test_patterns(self, patterns: str, expected: bool):
        assert debug_enabled(patterns, "coral-auth:db") is expected


class TestProviderConfigs:
    """Tests for provider_configs."""

    def test_unconfigured_providers_are_skipped(self):
        settings = make_settings(google_client_id="gid", google_client_secret="gsecret")

        configs = provider_configs(settings)

        assert [c.name for c in configs] == ["google"]

    def test_partial_credentials_are_skipped(self):
        settings = make_settings(facebook_app_id="only-the-id")
        assert provider_configs(settings) == []

    def test_twitter_consumer_credentials(self):
        settings = make_settings(
            root_url="https://talk.example.com",
            twitter_consumer_key="ck",
            twitter_consumer_secret="cs",
        )

        (config,) = provider_configs(settings)

        assert config.client_id == "ck"
        assert config.client_secret == "cs"
        assert config.callback_url == "https://talk.example.com/connect/twitter/callback"
