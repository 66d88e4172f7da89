"""Infra DB: pool de conexiones (psycopg_pool)."""

from .pool import (
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
    close_pool,
    get_pool,
    init_pool,
    require_pool,
)

__all__ = [
    "init_pool",
    "get_pool",
    "require_pool",
    "close_pool",
    "PoolAlreadyInitializedError",
    "PoolNotInitializedError",
]
