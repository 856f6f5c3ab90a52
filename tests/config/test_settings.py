import importlib

import pytest

from hrms.config import db_config_from_env, env_flag, get_settings_module


@pytest.mark.parametrize(
    "env, expected",
    [
        ("production", "hrms.config.production"),
        ("PROD", "hrms.config.production"),
        ("test", "hrms.config.testing"),
        ("anything-else", "hrms.config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)

    assert get_settings_module() == expected


def test_development_is_default(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)

    assert get_settings_module() == "hrms.config.development"


def test_db_config_reads_environment(monkeypatch):
    monkeypatch.setenv("DB_HOST", "mysql.internal")
    monkeypatch.setenv("DB_PORT", "3310")
    monkeypatch.delenv("DB_NAME", raising=False)

    config = db_config_from_env("hrms_test")

    assert config["host"] == "mysql.internal"
    assert config["port"] == 3310
    assert config["database"] == "hrms_test"


def test_env_flag(monkeypatch):
    monkeypatch.setenv("SCHEDULER_ENABLED", "0")

    assert env_flag("SCHEDULER_ENABLED", True) is False
    assert env_flag("UNSET_FLAG_FOR_TEST", True) is True


def test_testing_settings_disable_scheduler():
    settings = importlib.import_module("hrms.config.testing")

    assert settings.TESTING is True
    assert settings.SCHEDULER_ENABLED is False
