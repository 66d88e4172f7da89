"""PostgreSQL repositories (psycopg + psycopg_pool)."""

from .user import PostgresUserRepository
from .volunteer import PostgresVolunteerRepository

__all__ = ["PostgresUserRepository", "PostgresVolunteerRepository"]
