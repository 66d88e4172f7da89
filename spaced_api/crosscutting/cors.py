# spaced_api/crosscutting/cors.py
"""
===============================================================================
MÓDULO: Guardia de Origin (CORS con credenciales)
===============================================================================

Objetivo
--------
Rechazar, antes de cualquier lógica de negocio, requests de navegador cuyo
`Origin` no pertenece a la allow-list:
- ALLOWED_ORIGINS (CSV)
- el propio host del request ({proto}://{host}, respetando X-Forwarded-*)
- orígenes fijos de desarrollo local (Vite)

El endpoint del sorteo programado es la excepción: se protege por secreto
(Bearer), no por cookie, así que responde con CORS abierto (`*`).

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  OriginGuardMiddleware (ASGI puro)

Responsabilidades:
  - 403 "Origin Not Allowed" si el Origin no está permitido
  - Reflejar el Origin permitido con Allow-Credentials + Vary: Origin
  - Responder preflight OPTIONS con 204 sin body

Colaboradores:
  - crosscutting.config (ALLOWED_ORIGINS)
  - crosscutting.error_responses (cuerpo {success:false, error})
  - identity.sessions (usa request_protocol para el flag Secure)
===============================================================================
"""

from __future__ import annotations

from typing import Iterable, Mapping

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import Response

from .error_responses import error_json, origin_rejected
from .logger import logger
from .metrics import record_origin_rejection

LOCAL_DEV_ORIGINS = ("http://localhost:5173", "http://127.0.0.1:5173")

DEFAULT_ALLOWED_METHODS = "GET,POST,DELETE,OPTIONS"
DEFAULT_ALLOWED_HEADERS = "Content-Type, Authorization"
OPEN_ALLOWED_HEADERS = (
    "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
    "Content-MD5, Content-Type, Date, X-Api-Version, Authorization"
)


def request_host(headers: Mapping[str, str]) -> str:
    return headers.get("x-forwarded-host") or headers.get("host") or ""


def request_protocol(headers: Mapping[str, str]) -> str:
    """
    Protocolo efectivo del request.

    X-Forwarded-Proto (primer valor) manda; si no viene, se asume https salvo
    para hosts locales.
    """
    forwarded_proto = (headers.get("x-forwarded-proto") or "").strip()
    if forwarded_proto:
        return forwarded_proto.split(",")[0].strip()

    host = request_host(headers)
    if "localhost" in host or host.startswith("127.0.0.1"):
        return "http"
    return "https"


def allowed_origins_for(
    headers: Mapping[str, str], configured: Iterable[str]
) -> set[str]:
    allowed = set(configured)
    host = request_host(headers)
    if host:
        allowed.add(f"{request_protocol(headers)}://{host}")
    allowed.update(LOCAL_DEV_ORIGINS)
    return allowed


def is_allowed_origin(
    headers: Mapping[str, str], origin: str, configured: Iterable[str]
) -> bool:
    if not origin:
        return True
    return origin in allowed_origins_for(headers, configured)


class OriginGuardMiddleware:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      OriginGuardMiddleware

    Responsabilidades:
      - Aplicar la allow-list de Origin a las rutas /api
      - CORS abierto para rutas protegidas por secreto (open_paths)
      - Cortar preflight con 204

    Colaboradores:
      - crosscutting.config.get_settings()
    ----------------------------------------------------------------------------
    """

    EXCLUDED_PATHS = {"/healthz", "/metrics", "/openapi.json", "/docs", "/redoc"}

    def __init__(self, app, *, open_paths: Iterable[str] = ()):
        self.app = app
        self.open_paths = set(open_paths)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        if path in self.EXCLUDED_PATHS:
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        method = scope.get("method", "").upper()

        if path in self.open_paths:
            cors_headers = {
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": DEFAULT_ALLOWED_METHODS,
                "Access-Control-Allow-Headers": OPEN_ALLOWED_HEADERS,
            }
            await self._dispatch(scope, receive, send, method, cors_headers, vary=False)
            return

        from .config import get_settings

        origin = (headers.get("origin") or "").strip()
        configured = get_settings().get_allowed_origins_list()
        if origin and not is_allowed_origin(headers, origin, configured):
            logger.warning(
                "origin rechazado",
                extra={"origin": origin, "path": path},
            )
            record_origin_rejection()
            rejection = origin_rejected()
            response = error_json(rejection.status_code, rejection.detail)
            await response(scope, receive, send)
            return

        cors_headers = {
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Allow-Methods": DEFAULT_ALLOWED_METHODS,
            "Access-Control-Allow-Headers": DEFAULT_ALLOWED_HEADERS,
        }
        if origin:
            cors_headers["Access-Control-Allow-Origin"] = origin
        await self._dispatch(
            scope, receive, send, method, cors_headers, vary=bool(origin)
        )

    async def _dispatch(self, scope, receive, send, method, cors_headers, *, vary):
        if method == "OPTIONS":
            response = Response(status_code=204, headers=cors_headers)
            if vary:
                response.headers.add_vary_header("Origin")
            await response(scope, receive, send)
            return

        async def send_with_cors(message):
            if message["type"] == "http.response.start":
                hdrs = MutableHeaders(scope=message)
                for name, value in cors_headers.items():
                    hdrs[name] = value
                if vary:
                    hdrs.add_vary_header("Origin")
            await send(message)

        await self.app(scope, receive, send_with_cors)
