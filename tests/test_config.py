"""Tests for environment driven settings."""

import logging
import os

import pytest
from pydantic import ValidationError

from blog.core.config import Settings
from blog.utils.logger import get_logger


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ("APP_ENV", "NODE_ENV", "SEED_ON_START", "WATCH_INTERVAL", "CORS_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    settings = Settings(_env_file=None)

    assert settings.APP_ENV == "development"
    assert not settings.is_prod
    assert settings.SEED_ON_START is True
    assert settings.cors_origins == ["*"]
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.DIST_DIR == os.path.abspath("dist")


def test_node_env_is_used_when_app_env_is_missing(clean_env) -> None:
    clean_env.setenv("NODE_ENV", "production")

    assert Settings(_env_file=None).is_prod

    clean_env.setenv("APP_ENV", "development")
    assert Settings(_env_file=None).APP_ENV == "development"


def test_comma_separated_origins(clean_env) -> None:
    clean_env.setenv("CORS_ORIGINS", "http://a.io, http://b.io,")

    assert Settings(_env_file=None).cors_origins == ["http://a.io", "http://b.io"]


def test_misspelled_boolean_is_rejected(clean_env) -> None:
    clean_env.setenv("SEED_ON_START", "ture")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_non_numeric_interval_is_rejected(clean_env) -> None:
    clean_env.setenv("WATCH_INTERVAL", "abc")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_values_are_read_from_env_file(clean_env, tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("APP_ENV=production\nLOG_LEVEL=WARNING\n", encoding="utf-8")

    settings = Settings(_env_file=env_file)

    assert settings.is_prod
    assert settings.LOG_LEVEL == "WARNING"


def test_logger_level_follows_setting() -> None:
    assert get_logger("blog-test", "WARNING").level == logging.WARNING
