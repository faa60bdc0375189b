"""Programmatic Alembic runner for console migrations."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager, suppress
from importlib import resources
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import text
from sqlalchemy.engine import make_url

from .engine import build_engine
from .settings import DatabaseSettings, get_settings

__all__ = [
    "alembic_config",
    "migration_lock",
    "run_migrations",
]

MIGRATION_LOCK_KEY = 0xC0750E  # stable Postgres advisory lock key


def _alembic_resource_paths() -> tuple[Path, Path]:
    package = resources.files("console_db")
    alembic_ini = package / "alembic.ini"
    migrations_dir = package / "migrations"
    return alembic_ini, migrations_dir


@contextmanager
def migration_lock(settings: DatabaseSettings) -> Iterator[None]:
    """Serialize concurrent migrators on Postgres; a no-op on SQLite."""
    if make_url(str(settings.database_url)).get_backend_name() != "postgresql":
        yield
        return

    engine = build_engine(settings)
    try:
        with engine.connect() as base_conn:
            conn = base_conn.execution_options(isolation_level="AUTOCOMMIT")
            conn.execute(text("SELECT pg_advisory_lock(:key)"), {"key": MIGRATION_LOCK_KEY})
            try:
                yield
            finally:
                with suppress(Exception):
                    conn.execute(
                        text("SELECT pg_advisory_unlock(:key)"), {"key": MIGRATION_LOCK_KEY}
                    )
    finally:
        engine.dispose()


@contextmanager
def alembic_config(settings: DatabaseSettings | None = None) -> Iterator[Config]:
    alembic_ini_ref, migrations_ref = _alembic_resource_paths()
    with resources.as_file(alembic_ini_ref) as alembic_ini, resources.as_file(
        migrations_ref
    ) as migrations_dir:
        if not alembic_ini.exists():
            raise FileNotFoundError(f"Alembic config not found at {alembic_ini}")
        if not migrations_dir.exists():
            raise FileNotFoundError(f"Alembic migrations not found at {migrations_dir}")

        alembic_cfg = Config(str(alembic_ini))
        alembic_cfg.set_main_option("script_location", str(migrations_dir))
        resolved = settings or get_settings()
        alembic_cfg.attributes["settings"] = resolved
        alembic_cfg.attributes["configure_logger"] = False
        # ConfigParser treats % as interpolation; escape to preserve URL encoding.
        safe_url = str(resolved.database_url).replace("%", "%%")
        alembic_cfg.set_main_option("sqlalchemy.url", safe_url)
        yield alembic_cfg


def run_migrations(settings: DatabaseSettings | None = None, *, revision: str = "head") -> None:
    resolved = settings or get_settings()
    with migration_lock(resolved):
        with alembic_config(resolved) as alembic_cfg:
            command.upgrade(alembic_cfg, revision)
