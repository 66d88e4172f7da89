"""
===============================================================================
TARJETA CRC — identity/users.py
===============================================================================

Módulo:
    Modelo de Usuario (sesión firmada)

Responsabilidades:
    - Definir el dataclass User utilizado por los flujos de auth (login / sesión).
    - Mantener el contrato de datos de auth centralizado y estable.

Colaboradores:
    - identity/auth_users.py: autentica y migra password_hash.
    - infrastructure/repositories/postgres/user.py: mapea filas -> User.
    - infrastructure/repositories/in_memory/user.py

Notas:
    - Este módulo NO contiene lógica de negocio: solo “shapes” de datos.
    - nickname es la clave de login (única, sensible a mayúsculas).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class User:
    """Registro de usuario utilizado por autenticación."""

    id: UUID
    nickname: str
    password_hash: str
    employee_id: str | None = None
    gender: str | None = None
    profile_icon_url: str | None = None
    is_admin: bool = False
    created_at: datetime | None = None
