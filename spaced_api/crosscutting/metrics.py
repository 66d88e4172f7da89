"""
===============================================================================
ARCHIVO: crosscutting/metrics.py
===============================================================================

CRC CARD (Módulo)
-------------------------------------------------------------------------------
Nombre:
    Métricas (Prometheus): observabilidad de bajo acoplamiento

Responsabilidades:
    - Definir métricas Prometheus en un registry propio.
    - Proveer funciones pequeñas y estables para registrar eventos/duraciones.
    - Cuidar cardinalidad (NO user_id, NO activity_id, NO IPs).
    - Exponer helpers para generar la respuesta /metrics.

Colaboradores:
    - crosscutting.middleware: registra latencia y conteo HTTP.
    - crosscutting.rate_limit: rechazos 429 por operación.
    - identity.auth_users: intentos de login por resultado.
    - application/usecases/lottery: resultados por actividad y decisiones.
===============================================================================
"""

from __future__ import annotations

import re

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

# ------------------------
# HTTP
# ------------------------
_requests_total = Counter(
    "spaced_requests_total",
    "Total de requests HTTP",
    ["endpoint", "method", "status"],
    registry=_registry,
)

_request_latency = Histogram(
    "spaced_request_latency_seconds",
    "Latencia de requests HTTP (segundos)",
    ["endpoint", "method"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=_registry,
)

# ------------------------
# Sorteo
# ------------------------
_lottery_activities_total = Counter(
    "spaced_lottery_activities_total",
    "Actividades procesadas por el sorteo",
    ["trigger", "outcome"],
    registry=_registry,
)

_lottery_registrations_total = Counter(
    "spaced_lottery_registrations_total",
    "Decisiones de inscripciones tomadas por el sorteo",
    ["status"],
    registry=_registry,
)

_lottery_run_duration = Histogram(
    "spaced_lottery_run_duration_seconds",
    "Duración de una corrida completa del sorteo (segundos)",
    ["trigger"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
    registry=_registry,
)

# ------------------------
# Auth / admisión
# ------------------------
_login_attempts_total = Counter(
    "spaced_login_attempts_total",
    "Intentos de login por resultado",
    ["outcome"],
    registry=_registry,
)

_rate_limit_rejections_total = Counter(
    "spaced_rate_limit_rejections_total",
    "Requests rechazados por rate limit",
    ["key"],
    registry=_registry,
)

_origin_rejections_total = Counter(
    "spaced_origin_rejections_total",
    "Requests rechazados por Origin no permitido",
    registry=_registry,
)


def record_request_metrics(
    endpoint: str,
    method: str,
    status_code: int,
    latency_seconds: float,
) -> None:
    """Registra métricas HTTP.

    - endpoint se normaliza para no explotar cardinalidad.
    - status se agrupa por 2xx/4xx/5xx.
    """
    normalized = _normalize_endpoint(endpoint)
    _requests_total.labels(
        endpoint=normalized,
        method=method,
        status=_status_bucket(status_code),
    ).inc()
    _request_latency.labels(endpoint=normalized, method=method).observe(
        latency_seconds
    )


def record_lottery_activity(trigger: str, outcome: str) -> None:
    """outcome: drawn | skipped_empty | skipped_closed"""
    _lottery_activities_total.labels(trigger=trigger, outcome=outcome).inc()


def record_lottery_registrations(status: str, count: int) -> None:
    if count > 0:
        _lottery_registrations_total.labels(status=status).inc(count)


def observe_lottery_run_duration(trigger: str, seconds: float) -> None:
    _lottery_run_duration.labels(trigger=trigger).observe(seconds)


def record_login_attempt(outcome: str) -> None:
    _login_attempts_total.labels(outcome=outcome).inc()


def record_rate_limit_rejection(key: str) -> None:
    _rate_limit_rejections_total.labels(key=key).inc()


def record_origin_rejection() -> None:
    _origin_rejections_total.inc()


# -----------------------------------------------------------------------------
# Helpers internos
# -----------------------------------------------------------------------------


def _normalize_endpoint(path: str) -> str:
    """Normaliza paths para evitar cardinalidad alta.

    Reemplaza UUIDs e IDs numéricos por `{id}`.
    """
    path = re.sub(
        r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
        "{id}",
        path,
        flags=re.IGNORECASE,
    )
    path = re.sub(r"/\d+", "/{id}", path)
    return path


def _status_bucket(code: int) -> str:
    """Agrupa status code para baja cardinalidad."""
    if 200 <= code < 300:
        return "2xx"
    if 300 <= code < 400:
        return "3xx"
    if 400 <= code < 500:
        return "4xx"
    if 500 <= code < 600:
        return "5xx"
    return "other"


def get_metrics_response() -> tuple[bytes, str]:
    """Genera el body y content-type para /metrics."""
    return generate_latest(_registry), CONTENT_TYPE_LATEST
