"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Almacenar usuarios en memoria (tests / local dev).
  - Lookup por nickname exacto y por id; update de password_hash.

Collaborators:
  - identity.users.User
  - domain.repositories.UserRepository (contrato)

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - nickname único (sensible a mayúsculas), como uq_users_nickname.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Optional
from uuid import UUID, uuid4

from ....crosscutting.exceptions import DatabaseError
from ....domain.repositories import UserRepository
from ....identity.users import User


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[UUID, User] = {}

    def get_user_by_nickname(self, nickname: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.nickname == nickname:
                    return user
        return None

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def update_password_hash(self, user_id: UUID, password_hash: str) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            self._users[user_id] = replace(user, password_hash=password_hash)
            return True

    def create_user(self, user: User) -> User:
        with self._lock:
            if any(u.nickname == user.nickname for u in self._users.values()):
                raise DatabaseError(f"duplicate nickname: {user.nickname}")
            stored = replace(
                user,
                id=user.id or uuid4(),
                created_at=user.created_at or datetime.now(timezone.utc),
            )
            self._users[stored.id] = stored
            return stored
