# spaced_api/crosscutting/middleware.py
"""
===============================================================================
MÓDULO: Middleware HTTP de contexto
===============================================================================

Objetivo
--------
RequestContextMiddleware (el más externo):
   - X-Request-Id: se respeta el del cliente (1..128 chars) o se genera uno
   - contextvars (method/path) para que cada log del request los lleve
   - una línea de log + métricas al terminar, incluso si la app lanzó

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Colaboradores:
  - spaced_api/context.py
  - crosscutting/metrics.py (record_request_metrics)
===============================================================================
"""

from __future__ import annotations

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..context import clear_context, set_request_context
from .logger import logger
from .metrics import record_request_metrics

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 128

# Sondas: sin log por request.
_UNLOGGED_PATHS = frozenset({"/healthz", "/metrics"})


def resolve_request_id(raw: str | None) -> str:
    candidate = (raw or "").strip()
    if 0 < len(candidate) <= MAX_REQUEST_ID_LENGTH:
        return candidate
    return uuid.uuid4().hex


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        path = request.url.path
        set_request_context(request_id=request_id, method=request.method, path=path)
        request.state.request_id = request_id

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception:
            logger.exception("request sin respuesta")
            raise
        finally:
            elapsed = time.perf_counter() - started
            record_request_metrics(
                endpoint=path,
                method=request.method,
                status_code=status_code,
                latency_seconds=elapsed,
            )
            if path not in _UNLOGGED_PATHS:
                logger.info(
                    "request completado",
                    extra={
                        "status_code": status_code,
                        "latency_ms": round(elapsed * 1000, 2),
                    },
                )
            clear_context()
