"""
===============================================================================
TARJETA CRC — identity/passwords.py
===============================================================================

Módulo:
    Hash de passwords versionado (PBKDF2-SHA256) + migración de legacy SHA-256

Responsabilidades:
    - Construir hashes autodescriptivos: pbkdf2_sha256$<iter>$<salt b64>$<key b64>.
    - Verificar contra el formato versionado o contra el legacy (hex SHA-256).
    - Señalar needs_rehash para migrar de forma transparente en el login.
    - Comparar en tiempo constante.

Colaboradores:
    - identity/auth_users.py: login y cambio de password.
    - identity/sessions.py: reutiliza constant_time_equals para la firma.

Decisiones de diseño:
    - El formato legacy se acepta SOLO para verificar; nunca se escribe.
    - Cualquier hash malformado => inválido, sin rehash (nunca excepción).
===============================================================================
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import os
from dataclasses import dataclass
from functools import lru_cache

PASSWORD_HASH_VERSION: str = "pbkdf2_sha256"
PASSWORD_HASH_ITERATIONS: int = 210_000
PASSWORD_MIN_ITERATIONS: int = 10_000
PASSWORD_HASH_BYTES: int = 32
PASSWORD_SALT_BYTES: int = 16


@dataclass(frozen=True, slots=True)
class PasswordCheck:
    """Resultado de verificación."""

    valid: bool
    needs_rehash: bool


_INVALID = PasswordCheck(valid=False, needs_rehash=False)


def constant_time_equals(left: bytes, right: bytes) -> bool:
    """
    Igualdad de bytes en tiempo constante.

    Longitudes distintas se rechazan de inmediato; para igual longitud el
    tiempo no depende de dónde difieren.
    """
    if len(left) != len(right):
        return False
    return hmac.compare_digest(left, right)


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        iterations,
        dklen=PASSWORD_HASH_BYTES,
    )


def hash_password(
    password: str,
    *,
    iterations: int = PASSWORD_HASH_ITERATIONS,
    salt: bytes | None = None,
) -> str:
    """Hashea con PBKDF2-SHA256 (salt aleatorio de 16 bytes)."""
    salt = salt if salt is not None else os.urandom(PASSWORD_SALT_BYTES)
    derived = _derive(password, salt, iterations)
    return "$".join(
        (
            PASSWORD_HASH_VERSION,
            str(iterations),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(derived).decode("ascii"),
        )
    )


def hash_password_legacy_sha256(password: str) -> str:
    """Formato histórico (hex SHA-256 sin salt). Solo para tests/fixtures."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(password: str, stored_hash: str | None) -> PasswordCheck:
    """Verifica password vs hash almacenado (versionado o legacy)."""
    if not isinstance(stored_hash, str) or not stored_hash.strip():
        return _INVALID

    parts = stored_hash.split("$")
    if len(parts) == 4 and parts[0] == PASSWORD_HASH_VERSION:
        raw_iterations = parts[1]
        if not raw_iterations.isdigit():
            return _INVALID
        iterations = int(raw_iterations)
        if iterations < PASSWORD_MIN_ITERATIONS:
            return _INVALID

        try:
            salt = base64.b64decode(parts[2], validate=True)
            expected = base64.b64decode(parts[3], validate=True)
        except (binascii.Error, ValueError):
            return _INVALID

        valid = constant_time_equals(_derive(password, salt, iterations), expected)
        return PasswordCheck(
            valid=valid,
            needs_rehash=valid and iterations < PASSWORD_HASH_ITERATIONS,
        )

    candidate = hash_password_legacy_sha256(password).encode("ascii")
    valid = constant_time_equals(candidate, stored_hash.encode("utf-8"))
    return PasswordCheck(valid=valid, needs_rehash=valid)


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash fijo para igualar el costo de verificación cuando el usuario no existe."""
    return hash_password("spaced-dummy-password", salt=b"\x00" * PASSWORD_SALT_BYTES)
