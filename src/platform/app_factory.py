"""
Booking API assembly.

`create_app` is used by the service entrypoint and by the test app; both get the
same routers, error mapping, request timing and operational endpoints.
"""

from collections.abc import Awaitable, Callable, Sequence
from contextlib import AbstractAsyncContextManager
import time
from typing import Any, Optional

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.routing import BaseRoute, Match

from src.platform.config.core_setting import settings
from src.platform.exception.exception_handlers import register_exception_handlers
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.observability.tracing import TracingConfig
from src.service.booking.driving_adapter.http_controller.booking_controller import (
    router as booking_router,
)
from src.service.booking.driving_adapter.http_controller.package_controller import (
    router as package_router,
)


# (router, prefix, tag)
API_ROUTERS: list[tuple[APIRouter, str, str]] = [
    (booking_router, '/api/bookings', 'booking'),
    (package_router, '/api/packages', 'package'),
]

# Not timed, scraped too often to be interesting
UNTIMED_PATHS = frozenset({'/health', '/metrics'})


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]],
    title_suffix: str = '',
    description: str = 'Multi-tenant appointment booking',
    service_name: str = 'booking-service',
) -> FastAPI:
    app = FastAPI(
        title=f'{settings.PROJECT_NAME}{title_suffix}',
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )

    # Instrumentation has to wrap the app before any route is mounted
    TracingConfig(service_name=service_name).instrument_fastapi(app=app)

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    app.middleware('http')(_time_request)

    register_exception_handlers(app)

    for router, prefix, tag in API_ROUTERS:
        app.include_router(router, prefix=prefix, tags=[tag])

    _mount_operational_endpoints(app, service_name=service_name)
    return app


async def _time_request(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    if request.url.path in UNTIMED_PATHS:
        return await call_next(request)

    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    route_path = _route_template(request)
    metrics.record_http_request(
        method=request.method,
        route=route_path,
        status=response.status_code,
        duration=elapsed,
    )
    if response.status_code >= 500:
        Logger.base.error(
            f'💥 [HTTP] {request.method} {route_path} -> {response.status_code} '
            f'in {elapsed * 1000:.1f}ms'
        )
    elif elapsed > settings.SLOW_REQUEST_THRESHOLD_SECONDS:
        Logger.base.warning(
            f'🐢 [HTTP] {request.method} {route_path} took {elapsed * 1000:.1f}ms'
        )
    return response


def _route_template(request: Request) -> str:
    """
    App-level path template of the matched route, prefix included.

    Templates keep label cardinality bounded (lock ids are in the path).
    """
    return _match_template(request.app.router.routes, dict(request.scope)) or 'unmatched'


def _match_template(
    routes: Sequence[BaseRoute], scope: dict[str, Any], prefix: str = ''
) -> Optional[str]:
    for route in routes:
        match, child_scope = route.matches(scope)
        if match != Match.FULL:
            continue
        path = prefix + getattr(route, 'path', '')
        # Mounted sub-routers keep their own routes relative to the mount path
        children = getattr(route, 'routes', None)
        if children:
            return _match_template(children, {**scope, **child_scope}, path) or path
        return path
    return None


def _mount_operational_endpoints(app: FastAPI, *, service_name: str) -> None:
    @app.get('/health', include_in_schema=False)
    async def health() -> dict[str, str]:
        return {'status': 'healthy', 'service': service_name, 'version': settings.VERSION}

    @app.get('/metrics', include_in_schema=False)
    async def prometheus_metrics() -> PlainTextResponse:
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
