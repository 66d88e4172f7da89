"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: alembic/env.py (Alembic Environment Configuration)

Responsibilities:
  - Correr las migraciones del esquema de Spaced (users, actividades,
    inscripciones, posts) online u offline.
  - Tomar DATABASE_URL de los mismos Settings que usa la API.

Collaborators:
  - spaced_api.crosscutting.config.get_settings
  - Alembic (context, config)
  - SQLAlchemy create_engine (driver psycopg)

Policy:
  - Sin ORM: migraciones escritas a mano (target_metadata = None).
  - Sin DATABASE_URL no hay migración (error explícito).
============================================================
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from spaced_api.crosscutting.config import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

_DRIVER_PREFIXES = ("postgresql://", "postgres://")


def database_url() -> str:
    url = get_settings().database_url.strip()
    if not url:
        raise RuntimeError("DATABASE_URL is required to run migrations.")
    for prefix in _DRIVER_PREFIXES:
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def run_migrations_offline() -> None:
    context.configure(
        url=database_url(),
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=None)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
