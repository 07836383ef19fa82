"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from streakbook.config import BaseConfig, TestingConfig


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in (
        "STREAKBOOK_DATABASE_URL",
        "STREAKBOOK_DEV_MODE",
        "STREAKBOOK_HISTORY_MONTHS",
        "STREAKBOOK_REMINDERS_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("STREAKBOOK_DATA_DIR", str(tmp_path / "data"))


def test_defaults(tmp_path):
    config = BaseConfig()
    assert config.DATA_DIR == (tmp_path / "data").resolve()
    assert config.DATA_DIR.exists()
    assert config.DATABASE_URL == f"sqlite:///{config.DATA_DIR / 'streakbook.db'}"
    assert config.DEV_MODE is True
    assert config.HISTORY_MONTHS == 3
    assert config.REMINDERS_ENABLED is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("STREAKBOOK_DATABASE_URL", "sqlite:///elsewhere.db")
    monkeypatch.setenv("STREAKBOOK_DEV_MODE", "off")
    monkeypatch.setenv("STREAKBOOK_HISTORY_MONTHS", "6")
    monkeypatch.setenv("STREAKBOOK_REMINDERS_ENABLED", "no")

    config = BaseConfig()

    assert config.DATABASE_URL == "sqlite:///elsewhere.db"
    assert config.DEV_MODE is False
    assert config.HISTORY_MONTHS == 6
    assert config.REMINDERS_ENABLED is False


@pytest.mark.parametrize("value", ["three", "0"])
def test_bad_history_months(monkeypatch, value):
    monkeypatch.setenv("STREAKBOOK_HISTORY_MONTHS", value)
    with pytest.raises(ValueError):
        BaseConfig()


def test_testing_config_uses_memory_database():
    config = TestingConfig()
    assert config.DATABASE_URL == "sqlite://"
    assert config.REMINDERS_ENABLED is False
    assert "poolclass" in config.sqlalchemy_engine_options()
