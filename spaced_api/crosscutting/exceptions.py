# spaced_api/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas del backend (errores internos)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable
- error_id para correlación con logs
- message "humana" (sin filtrar secretos)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  SpacedError + subclases

Responsabilidades:
  - Distinguir error de operador (ConfigurationError) de fallas externas
    (UpstreamError / DatabaseError)
  - Generar error_id para rastreo

Colaboradores:
  - api/exception_handlers.py (mapea a respuestas {success:false, error})
  - infrastructure/repositories/postgres/* (lanzan DatabaseError)
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class SpacedError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      SpacedError

    Responsabilidades:
      - Base para errores internos del sistema
      - Proveer error_code + error_id + message

    Colaboradores:
      - api/exception_handlers.py
    ----------------------------------------------------------------------------
    """

    error_code: str = "SPACED_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


class ConfigurationError(SpacedError):
    """Falta un secreto o credencial requerida (siempre 500, mensaje para el operador)."""

    error_code: str = "CONFIGURATION_ERROR"


class UpstreamError(SpacedError):
    """Falla de un colaborador externo (data store, proveedor de terceros)."""

    error_code: str = "UPSTREAM_ERROR"


class DatabaseError(UpstreamError):
    """Errores de DB (conexión, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"
