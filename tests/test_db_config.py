from __future__ import annotations

import pytest

from db.config import DatabaseSettings, normalize_database_url, read_database_settings

_DB_ENV_VARS = ("DATABASE_URL", "DB_HOST", "DB_USER", "DB_PASSWORD", "DB_NAME", "DB_PORT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in _DB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("db.config.load_env_files", lambda: None)


def test_defaults_target_local_mysql() -> None:
    settings = read_database_settings()

    assert settings.describe() == {
        "host": "localhost",
        "user": "root",
        "database": "yedire_frewoch",
        "port": 3306,
    }
    assert settings.url.drivername == "mysql+pymysql"
    assert settings.url.password is None


def test_env_vars_override_defaults(monkeypatch) -> None:
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_USER", "importer")
    monkeypatch.setenv("DB_PASSWORD", "s3cret")
    monkeypatch.setenv("DB_NAME", "charity")
    monkeypatch.setenv("DB_PORT", "3307")

    settings = read_database_settings()

    assert settings.url.host == "db.internal"
    assert settings.url.port == 3307
    assert settings.url.password == "s3cret"
    assert "s3cret" not in settings.masked_url()


def test_invalid_port_falls_back_to_default(monkeypatch) -> None:
    monkeypatch.setenv("DB_PORT", "not-a-port")
    assert read_database_settings().port == 3306


def test_database_url_wins_over_parts(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@pg:5432/schools")
    monkeypatch.setenv("DB_HOST", "ignored")

    url = read_database_settings().url

    assert url.drivername == "postgresql+psycopg"
    assert url.host == "pg"
    assert url.database == "schools"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("postgres://u@h/db", "postgresql+psycopg://u@h/db"),
        ("postgresql://u@h/db", "postgresql+psycopg://u@h/db"),
        ("mysql://u@h/db", "mysql+pymysql://u@h/db"),
        ("sqlite:///local.db", "sqlite:///local.db"),
    ],
)
def test_normalize_database_url(raw: str, expected: str) -> None:
    assert normalize_database_url(raw) == expected


def test_settings_are_immutable() -> None:
    settings = DatabaseSettings()
    with pytest.raises((AttributeError, TypeError)):
        settings.host = "elsewhere"  # type: ignore[misc]
