import time

from fastapi import FastAPI
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware

from api.core.config import get_settings
from shared.core.catch_exception_middleware import CatchExceptionMiddleware
from shared.core.config import resolve_symbol
from shared.core.logging import RequestIDLoggerMiddleware, configure_logging, get_logger
from shared.core.request_context import RequestContextMiddleware
from shared.core.system import create_fastapi
from shared.security.swagger_auth_middleware import SwaggerAuthMiddleware
from shared.security.swagger_gate import SwaggerAuthGate


def include_router(app: FastAPI, router: str, prefix: str | None = None, api_version: int | None = 1) -> None:
    router = resolve_symbol(router)
    app.include_router(router, prefix=f"{f'/v{api_version}' if api_version else ''}{f'/{prefix}' if prefix else ''}")


def create_app() -> FastAPI:

    start_time = time.perf_counter()

    settings = get_settings()  # Ensure settings are loaded before anything else

    configure_logging()

    # Refuses to start without admin credentials or with malformed access keys
    swagger_gate = SwaggerAuthGate.from_settings(settings.swagger)

    app = create_fastapi(settings, swagger_gate.uri)

    # Middlewares, from innermost to outermost
    app.add_middleware(CatchExceptionMiddleware, expose_errors=settings.is_dev_environment())
    app.add_middleware(SwaggerAuthMiddleware, gate=swagger_gate)
    app.add_middleware(RequestIDLoggerMiddleware)
    app.add_middleware(RequestContextMiddleware)

    if settings.allowed_hosts:
        allowed_hosts = list(settings.allowed_hosts)
        if "localhost" not in allowed_hosts:
            allowed_hosts.append("localhost")
        if "127.0.0.1" not in allowed_hosts:
            allowed_hosts.append("127.0.0.1")
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)
    if settings.redirect_https:
        # Do not redirect when behind a proxy that terminates TLS
        app.add_middleware(HTTPSRedirectMiddleware)

    # Routes
    include_router(app, "shared.core.system.router", "system")

    end_time = time.perf_counter()
    get_logger().info(
        "[Startup] FastAPI app started.",
        startup_time_ms=int((end_time - start_time) * 1000),
        swagger_uri=swagger_gate.uri,
        access_keys=len(swagger_gate.config.access_keys or ()),
        local_bypass=swagger_gate.config.local_authentication_bypass_enabled,
    )
    return app


app = create_app()
