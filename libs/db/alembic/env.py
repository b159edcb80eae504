# ruff: noqa: I001
"""
Alembic environment for the ledger schema (``transactions``, ``category_budget``).

``DATABASE_URL`` wins over ``sqlalchemy.url`` from alembic.ini; a ``.env``
discovered from the working directory is loaded first without overriding the
process environment. SQLite URLs run in batch mode so column alterations are
emitted as table copies.
"""

from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool
from dotenv import find_dotenv, load_dotenv

from db import metadata as ledger_metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _resolve_url() -> str:
    found = find_dotenv(usecwd=True)
    if found:
        load_dotenv(dotenv_path=found, override=False)
    url = os.getenv("DATABASE_URL") or config.get_main_option("sqlalchemy.url")
    if not url:
        raise RuntimeError(
            "No database configured: set DATABASE_URL or 'sqlalchemy.url' in alembic.ini"
        )
    return url


LEDGER_URL = _resolve_url()
config.set_main_option("sqlalchemy.url", LEDGER_URL)


def _configure(**kwargs: object) -> None:
    context.configure(
        target_metadata=ledger_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=LEDGER_URL.startswith("sqlite"),
        **kwargs,
    )


def run_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    _configure(url=LEDGER_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
