# spaced_api/crosscutting/error_responses.py
"""
===============================================================================
MÓDULO: Respuestas de error estándar ({success: false, error})
===============================================================================

Objetivo
--------
Uniformar TODOS los errores HTTP para que:
- El frontend pueda mostrar directamente "error" (mensajes en coreano)
- El backend pueda correlacionar por request_id (logs, nunca en el body)
- La API sea consistente con el contrato histórico del cliente

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  AppHTTPException + handlers

Responsabilidades:
  - Definir catálogo de códigos de error (ErrorCode)
  - Construir el payload {success: false, error}
  - Proveer factories de errores frecuentes
  - Proveer handlers (FastAPI) para devolver JSON

Colaboradores:
  - crosscutting/middleware.py (request_id)
  - api/exception_handlers.py (mapea errores internos)
===============================================================================
"""

from __future__ import annotations

from enum import Enum

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .logger import logger


class ErrorCode(str, Enum):
    # 4xx
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    ORIGIN_REJECTED = "ORIGIN_REJECTED"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"

    # 5xx
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorBody(BaseModel):
    """Cuerpo de error del contrato del cliente."""

    success: bool = False
    error: str


GENERIC_ERROR_MESSAGE = "요청 처리 중 오류가 발생했습니다."
RATE_LIMITED_MESSAGE = "요청이 너무 많습니다. 잠시 후 다시 시도해주세요."

OPENAPI_ERROR_RESPONSES = {
    "400": {"description": "Bad Request", "model": ErrorBody},
    "401": {"description": "Unauthorized", "model": ErrorBody},
    "403": {"description": "Forbidden", "model": ErrorBody},
    "429": {"description": "Too Many Requests", "model": ErrorBody},
    "500": {"description": "Server Error", "model": ErrorBody},
}


class AppHTTPException(HTTPException):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      AppHTTPException

    Responsabilidades:
      - Adjuntar un ErrorCode estable (para logs y tests)
      - Permitir headers custom (Retry-After, etc.)

    Colaboradores:
      - app_exception_handler()
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code


# ---------------------------------------------------------------------------
# Factories de error (helpers)
# ---------------------------------------------------------------------------
def bad_request(detail: str) -> AppHTTPException:
    return AppHTTPException(400, ErrorCode.VALIDATION_ERROR, detail)


def unauthorized(detail: str = "Unauthorized") -> AppHTTPException:
    return AppHTTPException(401, ErrorCode.UNAUTHORIZED, detail)


def forbidden(detail: str = "Forbidden") -> AppHTTPException:
    return AppHTTPException(403, ErrorCode.FORBIDDEN, detail)


def origin_rejected() -> AppHTTPException:
    return AppHTTPException(403, ErrorCode.ORIGIN_REJECTED, "Origin Not Allowed")


def not_found(detail: str) -> AppHTTPException:
    return AppHTTPException(404, ErrorCode.NOT_FOUND, detail)


def conflict(detail: str) -> AppHTTPException:
    return AppHTTPException(409, ErrorCode.CONFLICT, detail)


def rate_limited(retry_after: int = 60) -> AppHTTPException:
    return AppHTTPException(
        429,
        ErrorCode.RATE_LIMITED,
        RATE_LIMITED_MESSAGE,
        headers={"Retry-After": str(retry_after)},
    )


def internal_error(detail: str = GENERIC_ERROR_MESSAGE) -> AppHTTPException:
    return AppHTTPException(500, ErrorCode.INTERNAL_ERROR, detail)


def error_json(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Construye la respuesta JSON de error (usada también por middlewares ASGI)."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorBody(error=message).model_dump(),
        headers=headers,
    )


# ---------------------------------------------------------------------------
# Handlers FastAPI
# ---------------------------------------------------------------------------
async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    """Handler para AppHTTPException (propaga headers opcionales como Retry-After)."""
    request_id = getattr(getattr(request, "state", None), "request_id", None)
    if exc.status_code >= 500:
        logger.error(
            "error de aplicación",
            extra={"code": exc.code.value, "detail": exc.detail, "request_id": request_id},
        )
    return error_json(exc.status_code, str(exc.detail), getattr(exc, "headers", None))
