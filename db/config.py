"""
Shared environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from sqlalchemy.engine import URL, make_url

DEFAULT_DRIVER = "mysql+pymysql"
DEFAULT_HOST = "localhost"
DEFAULT_USER = "root"
DEFAULT_PASSWORD = ""
DEFAULT_DATABASE = "yedire_frewoch"
DEFAULT_PORT = 3306


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_database_url(url: str) -> str:
    """
    Normalize bare postgres/mysql URLs to the SQLAlchemy driver form we ship with.
    """

    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    if url.startswith("mysql://"):
        return url.replace("mysql://", "mysql+pymysql://", 1)
    return url


def _get_port_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class DatabaseSettings:
    """
    Connection parameters for the import target database.

    `url_override` comes from DATABASE_URL and, when present, wins over
    the individual parts.
    """

    host: str = DEFAULT_HOST
    user: str = DEFAULT_USER
    password: str = DEFAULT_PASSWORD
    database: str = DEFAULT_DATABASE
    port: int = DEFAULT_PORT
    driver: str = DEFAULT_DRIVER
    url_override: str | None = None

    @property
    def url(self) -> URL:
        if self.url_override:
            return make_url(normalize_database_url(self.url_override))
        return URL.create(
            self.driver,
            username=self.user,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.database,
        )

    def masked_url(self) -> str:
        """Render the URL with the password hidden, safe for log output."""
        return self.url.render_as_string(hide_password=True)

    def describe(self) -> dict[str, object]:
        url = self.url
        return {
            "host": url.host,
            "user": url.username,
            "database": url.database,
            "port": url.port,
        }


def read_database_settings() -> DatabaseSettings:
    """
    Build database settings from environment variables and optional .env files.

    Recognised variables: DATABASE_URL, DB_HOST, DB_USER, DB_PASSWORD,
    DB_NAME, DB_PORT.
    """

    load_env_files()

    direct_url = (os.getenv("DATABASE_URL") or "").strip() or None
    return DatabaseSettings(
        host=os.getenv("DB_HOST") or DEFAULT_HOST,
        user=os.getenv("DB_USER") or DEFAULT_USER,
        password=os.getenv("DB_PASSWORD", DEFAULT_PASSWORD),
        database=os.getenv("DB_NAME") or DEFAULT_DATABASE,
        port=_get_port_env("DB_PORT", DEFAULT_PORT),
        url_override=direct_url,
    )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
    """Return cached database settings."""
    return read_database_settings()
