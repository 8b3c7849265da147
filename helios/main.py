import time
import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .application.use_cases.session_store import IDurableStorage, INetwork, SessionStore
from .config import Settings, settings
from .infrastructure.metrics import (
    metrics_endpoint,
    http_requests_total,
    http_request_duration_seconds
)
from .infrastructure.network import SimulatedNetwork
from .infrastructure.storage import build_storage
from .interfaces.http.middleware import install_route_guard
from .interfaces.http.routers import pages as pages_router
from .interfaces.http.routers import session as session_router
from .interfaces.http.session import CookieOutbox, NavigationLog

logger = structlog.get_logger()


def configure_logging(level_name: str) -> None:
    # Настройка структурированного логирования
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_session_store(
    app_settings: Settings,
    storage: IDurableStorage | None = None,
    network: INetwork | None = None,
) -> SessionStore:
    return SessionStore(
        storage=storage or build_storage(app_settings.STORAGE_BACKEND),
        cookies=CookieOutbox(),
        navigator=NavigationLog(),
        network=network or SimulatedNetwork(
            latency_ms=app_settings.SIMULATED_LATENCY_MS,
            failure_rate=app_settings.SIMULATED_FAILURE_RATE,
        ),
        key=app_settings.SESSION_KEY,
        cookie_max_age=app_settings.COOKIE_MAX_AGE,
    )


def create_app(
    app_settings: Settings | None = None,
    storage: IDurableStorage | None = None,
    network: INetwork | None = None,
) -> FastAPI:
    app_settings = app_settings or settings
    configure_logging(app_settings.LOG_LEVEL)
    store = build_session_store(app_settings, storage=storage, network=network)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting helios session service", version="0.1.0", storage=app_settings.STORAGE_BACKEND)
        await run_in_threadpool(store.initialize)
        yield

    app = FastAPI(title="Helios Session Service", version="0.1.0", lifespan=lifespan)
    app.state.settings = app_settings
    app.state.session_store = store
    app.state.limiter = Limiter(key_func=get_remote_address)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    install_route_guard(app)

    # Метрики и логирование запросов (внешний слой, видит и редиректы guard'а)
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        method = request.method
        path = request.url.path

        response = await call_next(request)

        if response.headers.get("content-type", "").startswith("application/json"):
            response.headers["content-type"] = "application/json; charset=utf-8"

        duration = time.time() - start_time
        status_code = response.status_code
        http_requests_total.labels(method=method, endpoint=path, status=status_code).inc()
        http_request_duration_seconds.labels(method=method, endpoint=path).observe(duration)

        logger.info(
            "http_request",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=round(duration * 1000, 2)
        )

        return response

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/metrics")
    def metrics():
        """Prometheus metrics endpoint"""
        return metrics_endpoint()

    app.include_router(session_router.router)
    app.include_router(pages_router.router)
    return app


app = create_app()
