"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  ConnectionPool del proceso (psycopg_pool)

Responsabilidades:
  - Abrirlo en el lifespan de la API (solo si hay DATABASE_URL) y cerrarlo al
    apagar.
  - Aplicar statement_timeout a cada conexión nueva y validarla al prestarla.
  - Entregar el pool a los repositorios; sin pool => ConfigurationError (500
    con mensaje de operador, no un error de base de datos).

Colaboradores:
  - psycopg_pool.ConnectionPool
  - crosscutting.config (DB_STATEMENT_TIMEOUT_MS)
===============================================================================
"""

from __future__ import annotations

import threading
from typing import Optional

from psycopg_pool import ConnectionPool

from ...crosscutting.config import get_settings
from ...crosscutting.exceptions import ConfigurationError
from ...crosscutting.logger import logger

MISSING_DATABASE_URL_MESSAGE = "DATABASE_URL 환경변수가 설정되지 않았습니다."
POOL_NAME = "spaced-api"


class PoolAlreadyInitializedError(RuntimeError):
    """init_pool() llamado dos veces."""


class PoolNotInitializedError(RuntimeError):
    """Uso del pool antes de init_pool()."""


_lock = threading.Lock()
_active: Optional[ConnectionPool] = None


def _configure_connection(conn) -> None:
    timeout_ms = get_settings().db_statement_timeout_ms
    if timeout_ms > 0:
        conn.execute(f"SET statement_timeout = {int(timeout_ms)}")
        conn.commit()


def init_pool(database_url: str, min_size: int, max_size: int) -> ConnectionPool:
    global _active

    with _lock:
        if _active is not None:
            raise PoolAlreadyInitializedError("Pool already initialized.")
        _active = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            name=POOL_NAME,
            configure=_configure_connection,
            check=ConnectionPool.check_connection,
            open=True,
        )

    logger.info("pool DB abierto", extra={"min_size": min_size, "max_size": max_size})
    return _active


def get_pool() -> ConnectionPool:
    pool = _active
    if pool is None:
        raise PoolNotInitializedError("Pool not initialized. Call init_pool() first.")
    return pool


def is_pool_initialized() -> bool:
    return _active is not None


def require_pool() -> ConnectionPool:
    """Pool para repositorios; sin DATABASE_URL es un error de configuración."""
    try:
        return get_pool()
    except PoolNotInitializedError as exc:
        raise ConfigurationError(MISSING_DATABASE_URL_MESSAGE) from exc


def _detach() -> Optional[ConnectionPool]:
    global _active

    with _lock:
        pool, _active = _active, None
    return pool


def close_pool() -> None:
    """Cierra el pool al apagar (sin pool: no-op)."""
    pool = _detach()
    if pool is not None:
        pool.close()
        logger.info("pool DB cerrado")


def reset_pool() -> None:
    """Olvida el pool actual (tests); un close fallido solo se loguea."""
    pool = _detach()
    if pool is None:
        return
    try:
        pool.close()
    except Exception as exc:
        logger.warning("reset_pool: close falló", extra={"error": str(exc)})
