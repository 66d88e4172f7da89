# spaced_api/crosscutting/rate_limit.py
"""
===============================================================================
MÓDULO: Rate limiting (Fixed Window) - in-memory / Redis
===============================================================================

Objetivo
--------
Limitar abuso por operación lógica + IP del cliente:
- key "{operación}:{ip}" (ej: "auth-login:10.0.0.1")
- ventana fija: al vencer, el contador vuelve a 0

Incluye:
- Header Retry-After en cada respuesta de una ruta limitada
- Respuesta {success:false, error} 429 al exceder el máximo
- Backend Redis opcional (multi-instancia)

Mejoras incluidas
-----------------
- Barrido de ventanas vencidas cuando se supera el high-water mark de keys,
  para acotar la memoria del proceso.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componentes:
  - FixedWindowRateLimiter
  - RedisFixedWindowRateLimiter
  - enforce_rate_limit (dependency FastAPI)

Responsabilidades:
  - Decidir allow/deny por ventana fija
  - Emitir 429 con Retry-After
  - Mantener estado thread-safe

Colaboradores:
  - crosscutting.config
  - crosscutting.error_responses
  - crosscutting.metrics
  - crosscutting.logger
===============================================================================
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from fastapi import Request, Response

from .error_responses import rate_limited
from .logger import logger
from .metrics import record_rate_limit_rejection


@dataclass
class Window:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: int
    count: int


class RateLimiter(Protocol):
    def hit(
        self, key: str, max_requests: int, window_seconds: int
    ) -> RateLimitDecision: ...

    def clear(self) -> None: ...


class FixedWindowRateLimiter:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      FixedWindowRateLimiter

    Responsabilidades:
      - Contar requests por key dentro de una ventana fija
      - Reiniciar la ventana al vencer
      - Barrer ventanas vencidas al superar sweep_threshold keys

    Colaboradores:
      - enforce_rate_limit
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        *,
        sweep_threshold: int = 2000,
        time_fn: Callable[[], float] = time.monotonic,
    ):
        if sweep_threshold <= 0:
            raise ValueError("sweep_threshold debe ser > 0")
        self.sweep_threshold = int(sweep_threshold)
        self._time = time_fn
        self._windows: dict[str, Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, max_requests: int, window_seconds: int) -> RateLimitDecision:
        with self._lock:
            now = self._time()
            self._sweep_if_needed(now)

            window = self._windows.get(key)
            if window is None or window.reset_at <= now:
                window = Window(count=0, reset_at=now + window_seconds)
                self._windows[key] = window

            window.count += 1
            retry_after = max(1, math.ceil(window.reset_at - now))
            return RateLimitDecision(
                allowed=window.count <= max_requests,
                retry_after=retry_after,
                count=window.count,
            )

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._windows)

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()

    # --------------------------- internos ---------------------------

    def _sweep_if_needed(self, now: float) -> None:
        if len(self._windows) < self.sweep_threshold:
            return

        expired = [k for k, w in self._windows.items() if w.reset_at <= now]
        for k in expired:
            self._windows.pop(k, None)


class RedisFixedWindowRateLimiter:
    """
    Ventana fija compartida entre instancias (INCR + EXPIRE NX + TTL).

    El primer INCR de una ventana crea la key; EXPIRE NX fija su vencimiento
    solo una vez, así los hits siguientes no la extienden.
    """

    def __init__(self, client, *, prefix: str = "spaced:ratelimit:"):
        self._client = client
        self._prefix = prefix

    def hit(self, key: str, max_requests: int, window_seconds: int) -> RateLimitDecision:
        redis_key = f"{self._prefix}{key}"
        pipe = self._client.pipeline()
        pipe.incr(redis_key)
        pipe.expire(redis_key, window_seconds, nx=True)
        pipe.ttl(redis_key)
        count, _, ttl = pipe.execute()

        count = int(count)
        ttl = int(ttl)
        retry_after = max(1, ttl if ttl > 0 else window_seconds)
        return RateLimitDecision(
            allowed=count <= max_requests,
            retry_after=retry_after,
            count=count,
        )

    def clear(self) -> None:
        for redis_key in self._client.scan_iter(match=f"{self._prefix}*"):
            self._client.delete(redis_key)


_rate_limiter: Optional[RateLimiter] = None
_limiter_lock = threading.Lock()


def get_rate_limiter() -> RateLimiter:
    global _rate_limiter
    with _limiter_lock:
        if _rate_limiter is None:
            from .config import get_settings

            s = get_settings()
            if s.redis_url:
                import redis

                _rate_limiter = RedisFixedWindowRateLimiter(
                    redis.Redis.from_url(s.redis_url)
                )
            else:
                _rate_limiter = FixedWindowRateLimiter(
                    sweep_threshold=s.rate_limit_sweep_threshold
                )
        return _rate_limiter


def reset_rate_limiter() -> None:
    global _rate_limiter
    with _limiter_lock:
        _rate_limiter = None


def get_client_ip(request: Request) -> str:
    # 1) Proxy header (primer valor)
    forwarded_for = (request.headers.get("X-Forwarded-For") or "").strip()
    if forwarded_for:
        ip = forwarded_for.split(",")[0].strip()
        if ip:
            return ip

    # 2) IP directa
    client = request.client
    if client and client.host:
        return client.host

    return "unknown"


def enforce_rate_limit(
    key: str,
    max_requests: int | None = None,
    window_seconds: int | None = None,
):
    """
    Dependency factory FastAPI.

    Sin max/window explícitos usa el límite de login de Settings.
    """

    def _dependency(request: Request, response: Response) -> None:
        from .config import get_settings

        s = get_settings()
        limit = max_requests if max_requests is not None else s.login_rate_limit_max
        window = (
            window_seconds
            if window_seconds is not None
            else s.login_rate_limit_window_seconds
        )

        client_ip = get_client_ip(request)
        decision = get_rate_limiter().hit(f"{key}:{client_ip}", limit, window)
        response.headers["Retry-After"] = str(decision.retry_after)

        if not decision.allowed:
            logger.warning(
                "rate limit excedido",
                extra={
                    "rate_limit_key": key,
                    "client_ip": client_ip,
                    "retry_after": decision.retry_after,
                },
            )
            record_rate_limit_rejection(key)
            raise rate_limited(decision.retry_after)

    return _dependency
