# spaced_api/crosscutting/logger.py
"""
===============================================================================
MÓDULO: Logger estructurado (JSON, una línea por evento)
===============================================================================

Objetivo
--------
Cada evento del servicio (login, rehash, sorteo, rechazo de origen, 429)
sale como un objeto JSON con:
- ts / level / logger / msg / src
- contexto del request (request_id, method, path, lottery_trigger)
- los campos pasados en `extra=...`, con secretos enmascarados

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  JSONFormatter + redact() + setup_logger()

Responsabilidades:
  - Serializar LogRecord a JSON
  - Enmascarar cualquier clave que contenga password/secret/token/cookie/...
  - Elegir formato y nivel según Settings (LOG_LEVEL / LOG_JSON)

Colaboradores:
  - spaced_api/context.py (get_context_dict)
  - crosscutting/config.py
===============================================================================
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

# Atributos estándar de LogRecord: todo lo demás viene de `extra=`.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

# Fragmentos de clave que nunca se escriben en claro.
_SENSITIVE_FRAGMENTS = (
    "password",
    "secret",
    "token",
    "cookie",
    "authorization",
    "database_url",
    "redis_url",
)

REDACTED = "[redacted]"
_MAX_VALUE_CHARS = 4_000
_MAX_DEPTH = 3


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in _SENSITIVE_FRAGMENTS)


def redact(value: Any, key: str = "", depth: int = 0) -> Any:
    """Copia JSON-friendly de `value` con claves sensibles enmascaradas."""
    if key and _is_sensitive(key):
        return REDACTED
    if depth > _MAX_DEPTH:
        return "[depth]"
    if isinstance(value, dict):
        return {str(k): redact(v, str(k), depth + 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [redact(v, key, depth + 1) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    if isinstance(value, str) and len(value) > _MAX_VALUE_CHARS:
        return value[:_MAX_VALUE_CHARS] + "..."
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


class JSONFormatter(logging.Formatter):
    """LogRecord -> JSON (contexto de request + extras enmascarados)."""

    def format(self, record: logging.LogRecord) -> str:
        from ..context import get_context_dict

        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "src": f"{record.module}:{record.lineno}",
        }
        entry.update(get_context_dict())

        for name, value in record.__dict__.items():
            if name not in _RECORD_ATTRS and not name.startswith("_"):
                entry[name] = redact(value, name)

        if record.exc_info and record.exc_info[0] is not None:
            entry["error"] = {
                "type": record.exc_info[0].__name__,
                "detail": str(record.exc_info[1]),
                "trace": self.formatException(record.exc_info),
            }

        return json.dumps(entry, ensure_ascii=False, default=str)


def _resolve_format() -> tuple[int, bool]:
    from .config import get_settings

    try:
        settings = get_settings()
    except ValidationError:
        # Env inválido: el lifespan vuelve a fallar con el error completo.
        return logging.INFO, True
    level = logging.getLevelName((settings.log_level or "INFO").upper())
    return (level if isinstance(level, int) else logging.INFO), settings.log_json


def setup_logger(name: str = "spaced-api") -> logging.Logger:
    """Logger del servicio; idempotente ante reimports."""
    level, use_json = _resolve_format()
    log = logging.getLogger(name)
    log.setLevel(level)

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter()
            if use_json
            else logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        log.addHandler(handler)

    return log


logger = setup_logger()
