"""
===============================================================================
TARJETA CRC — spaced_api/api/exception_handlers.py (Manejo Centralizado de Excepciones)
===============================================================================

Responsabilidades:
  - Traducir excepciones de la aplicación a `{success: false, error}`.
  - Centralizar logging de errores con request_id + error_id.
  - Evitar filtrar detalles internos en errores no controlados.

Patrones aplicados:
  - Exception Mapping (Presentation Layer).
  - Fail-safe: cualquier excepción no tipada -> 500 genérico (con logging).
  - Observabilidad: correlación por request_id y error_id.

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, error_json
  - crosscutting.exceptions: SpacedError y derivadas (Configuration/Upstream/Database)
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..crosscutting.error_responses import (
    GENERIC_ERROR_MESSAGE,
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    error_json,
)
from ..crosscutting.exceptions import (
    ConfigurationError,
    DatabaseError,
    SpacedError,
    UpstreamError,
)
from ..crosscutting.logger import logger

INVALID_REQUEST_MESSAGE = "잘못된 요청입니다."

_STATUS_MESSAGES = {
    404: "Not Found",
    405: "Method Not Allowed",
}


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


async def _handle_service_error(
    request: Request,
    *,
    exc: SpacedError,
    code: ErrorCode,
    status_code: int,
) -> JSONResponse:
    """Helper común para errores tipados de servicios."""
    request_id = _request_id_from(request)

    logger.error(
        "Error de servicio",
        extra={
            "code": code.value,
            "error_id": exc.error_id,
            "error_message": exc.message,
            "request_id": request_id,
        },
    )

    app_exc = AppHTTPException(status_code=status_code, code=code, detail=exc.message)
    return await app_exception_handler(request, app_exc)


async def configuration_error_handler(
    request: Request, exc: ConfigurationError
) -> JSONResponse:
    # R: mensaje orientado al operador (qué variable falta), nunca un secreto.
    return await _handle_service_error(
        request, exc=exc, code=ErrorCode.CONFIGURATION_ERROR, status_code=500
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    return await _handle_service_error(
        request, exc=exc, code=ErrorCode.UPSTREAM_ERROR, status_code=500
    )


async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    return await _handle_service_error(
        request, exc=exc, code=ErrorCode.UPSTREAM_ERROR, status_code=500
    )


async def spaced_error_handler(request: Request, exc: SpacedError) -> JSONResponse:
    return await _handle_service_error(
        request, exc=exc, code=ErrorCode.INTERNAL_ERROR, status_code=500
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info(
        "request inválido",
        extra={
            "request_id": _request_id_from(request),
            "errors": [e.get("loc") for e in exc.errors()],
        },
    )
    return error_json(400, INVALID_REQUEST_MESSAGE)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """404/405 del router con el mismo cuerpo JSON que el resto."""
    message = _STATUS_MESSAGES.get(exc.status_code) or str(exc.detail)
    return error_json(exc.status_code, message, getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler para excepciones no tipadas.

    - Log completo (stacktrace).
    - Respuesta genérica (nunca filtra detalles internos).
    """
    logger.error(
        "Excepción no controlada",
        exc_info=exc,
        extra={"request_id": _request_id_from(request)},
    )
    return error_json(500, GENERIC_ERROR_MESSAGE)


def register_exception_handlers(app) -> None:
    """
    Registra handlers en la app FastAPI.

    Importante:
      - AppHTTPException se registra antes que HTTPException de Starlette.
      - Exception genérica se registra al final como fallback.
    """
    app.add_exception_handler(ConfigurationError, configuration_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(UpstreamError, upstream_error_handler)
    app.add_exception_handler(SpacedError, spaced_error_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
