"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Build the FastAPI application (create_app) with metadata and lifespan
  - Configure middleware (request context, origin guard)
  - Mount the auth, lottery and volunteer routers under /api
  - Expose health check and metrics endpoints

Collaborators:
  - FastAPI: ASGI web framework
  - OriginGuardMiddleware: Origin allow-list, CORS headers, preflight 204
  - RequestContextMiddleware: Request ID, logging context, HTTP metrics
  - auth_routes / lottery_routes / volunteer_routes: business endpoints

Constraints:
  - DATABASE_URL is optional at startup; data access without it fails with
    a ConfigurationError (500) at the call site
  - The scheduled lottery endpoint is secret-gated, so its CORS is open (*)

Notes:
  - Middleware order matters: RequestContext → OriginGuard → routes
  - /healthz follows Kubernetes health check convention
  - /metrics exposes Prometheus metrics
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, Response

from ..container import get_volunteer_repository
from ..crosscutting.config import get_settings
from ..crosscutting.cors import OriginGuardMiddleware
from ..crosscutting.logger import logger
from ..crosscutting.metrics import get_metrics_response
from ..crosscutting.middleware import RequestContextMiddleware
from ..identity.sessions import require_admin_session
from ..infrastructure.db.pool import close_pool, init_pool, is_pool_initialized
from .auth_routes import router as auth_router
from .exception_handlers import register_exception_handlers
from .lottery_routes import AUTO_LOTTERY_PATH
from .lottery_routes import router as lottery_router
from .volunteer_routes import router as volunteer_router

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Initializes the DB pool when configured."""
    settings = get_settings()

    if settings.database_url and not settings.is_test():
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
    else:
        logger.warning("DATABASE_URL no configurada: pool no inicializado")

    try:
        logger.info(
            "Spaced API starting up",
            extra={
                "app_env": settings.app_env,
                "lottery_time_zone": settings.lottery_time_zone,
                "lottery_run_hour": settings.lottery_run_hour,
                "rate_limit_backend": "redis" if settings.redis_url else "memory",
                "db_pool_min": settings.db_pool_min_size,
                "db_pool_max": settings.db_pool_max_size,
            },
        )
        yield
    finally:
        close_pool()
        logger.info("Spaced API shutting down")


def require_metrics_access(request: Request) -> None:
    """Admin session on /metrics only when METRICS_REQUIRE_AUTH is set."""
    if get_settings().metrics_require_auth:
        require_admin_session(request)


def healthz(request: Request):
    """
    R: Health check.

    Returns:
        ok: False only when a configured database does not answer
        db: "connected", "disconnected" or "not_configured"
    """
    settings = get_settings()
    if not settings.is_test() and not is_pool_initialized():
        return {"ok": True, "db": "not_configured"}

    db_status = "disconnected"
    try:
        if get_volunteer_repository().ping():
            db_status = "connected"
    except Exception as e:
        logger.warning("Health check: DB unavailable", extra={"error": str(e)})

    return {"ok": db_status == "connected", "db": db_status}


def metrics(_auth: None = Depends(require_metrics_access)):
    """R: Prometheus text format metrics."""
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Spaced API",
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "auth", "description": "Cookie sessions (HMAC-signed)"},
            {"name": "lottery", "description": "Scheduled and manual draws"},
            {"name": "volunteer", "description": "Activities and registrations"},
            {"name": "admin", "description": "Admin-only volunteer management"},
        ],
    )

    # R: add_middleware apila al revés: el último agregado es el más externo.
    app.add_middleware(
        OriginGuardMiddleware, open_paths={f"{API_PREFIX}{AUTO_LOTTERY_PATH}"}
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_api_route("/healthz", healthz, methods=["GET"])
    app.add_api_route("/metrics", metrics, methods=["GET"])

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(lottery_router, prefix=API_PREFIX)
    app.include_router(volunteer_router, prefix=API_PREFIX)

    register_exception_handlers(app)
    return app


app = create_app()
