"""In-memory repositories (tests / local dev)."""

from .user import InMemoryUserRepository
from .volunteer import InMemoryVolunteerRepository

__all__ = ["InMemoryUserRepository", "InMemoryVolunteerRepository"]
