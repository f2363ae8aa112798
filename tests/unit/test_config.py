"""
Unit tests for environment-driven settings.
"""

from pathlib import Path

import pytest

from config import Settings, get_settings

X_ENV = {
    "X_API_KEY": "key",
    "X_API_SECRET": "secret",
    "X_ACCESS_TOKEN": "token",
    "X_ACCESS_SECRET": "token-secret",
    "X_BEARER_TOKEN": "bearer",
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run without a .env file and without inherited settings."""
    monkeypatch.chdir(tmp_path)
    for name in [*X_ENV, "NOTES_DIR", "EXPORT_DIR", "GITHUB_API_URL", "GITHUB_TOKEN", "RETRY_ATTEMPTS", "LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    settings = Settings()

    assert settings.notes_dir == Path("learning-notes")
    assert settings.github_api_url == "https://api.github.com"
    assert settings.retry_attempts == 3
    assert settings.log_level == "WARNING"
    assert settings.has_github_token() is False
    assert settings.has_x_configured() is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("NOTES_DIR", "/tmp/notes")
    monkeypatch.setenv("RETRY_ATTEMPTS", "5")
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")

    settings = Settings()

    assert settings.notes_dir == Path("/tmp/notes")
    assert settings.get_retry_config() == {"attempts": 5, "base_delay": 1.0}
    assert settings.has_github_token() is True


def test_x_credentials(monkeypatch):
    for name, value in X_ENV.items():
        monkeypatch.setenv(name, value)

    settings = Settings()

    assert settings.has_x_configured() is True
    assert settings.get_x_credentials()["access_token"] == "token"


def test_env_file(tmp_path):
    (tmp_path / ".env").write_text("LOG_LEVEL=DEBUG\n", encoding="utf-8")
    assert Settings().log_level == "DEBUG"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
