"""
===============================================================================
TARJETA CRC — spaced_api/context.py (Contexto por request)
===============================================================================

Responsabilidades:
  - Guardar, por request, request_id / method / path y el trigger del sorteo
    (cron / admin) en un ContextVar (async-safe, threadpool-safe).
  - Entregarlo al logger como dict sin claves vacías.

Colaboradores:
  - crosscutting.middleware: set_request_context() al entrar, clear_context()
    al salir.
  - api.lottery_routes: set_lottery_trigger().
  - crosscutting.logger: get_context_dict().
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import asdict, dataclass, replace


@dataclass(frozen=True)
class RequestContext:
    request_id: str = ""
    method: str = ""
    path: str = ""
    lottery_trigger: str = ""


_EMPTY = RequestContext()
_current: ContextVar[RequestContext] = ContextVar("spaced_request_context", default=_EMPTY)


def set_request_context(
    *, request_id: str = "", method: str = "", path: str = ""
) -> None:
    _current.set(
        RequestContext(request_id=request_id or "", method=method or "", path=path or "")
    )


def set_lottery_trigger(trigger: str) -> None:
    _current.set(replace(_current.get(), lottery_trigger=trigger or ""))


def get_context_dict() -> dict[str, str]:
    return {key: value for key, value in asdict(_current.get()).items() if value}


def clear_context() -> None:
    _current.set(_EMPTY)
