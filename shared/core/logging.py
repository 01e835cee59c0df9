import json
import logging
import sys
import time
import uuid

import structlog
from fastapi import Request
from starlette.concurrency import iterate_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from shared.core.config import AppEnvironment, get_settings
from shared.core.request_context import request_context

_logging_configured: bool = False

# Never written to logs, they carry credentials
SENSITIVE_HEADERS = ("authorization", "cookie")
SENSITIVE_QUERY_PARAMS = ("accesskey",)
REDACTED = "***"


def configure_logging() -> None:
    global _logging_configured  # noqa: PLW0603
    if _logging_configured:
        return

    _logging_configured = True

    # Only use json logs for cloud deployments
    json_logs: bool = get_settings().app_environment != AppEnvironment.LOCAL

    if json_logs:

        # Adapted from https://www.structlog.org/en/stable/standard-library.html
        # Note: only OUR logs will be in JSON format, other libraries may still log in plain text
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=get_settings().log_level.upper(),
        )

        processors = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.CallsiteParameterAdder(
                {
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                }
            ),
        ]

        # Additional log processors from settings go at the end of the stack
        processors.extend(get_settings().log_processors or [])

        processors.append(structlog.processors.JSONRenderer())

        structlog.configure(
            processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            # Freeze configuration after creating the first bound logger
            cache_logger_on_first_use=True,
        )

    else:
        logging.basicConfig(level=get_settings().log_level.upper())


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() not in SENSITIVE_HEADERS}


def redact_query_params(query_params: dict[str, str]) -> dict[str, str]:
    return {k: REDACTED if k.lower() in SENSITIVE_QUERY_PARAMS else v for k, v in query_params.items()}


# Middleware to assign request_id and logger
class RequestIDLoggerMiddleware(BaseHTTPMiddleware):

    def __init__(self, app: ASGIApp, *, log_full: bool = True) -> None:
        super().__init__(app)
        self.log_full = log_full

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # Generate or propagate request ID
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id
        logger = structlog.stdlib.get_logger().bind(request_id=request_id)
        request.state.logger = logger

        http_request = {
            "method": request.method,
            "url": str(request.url.path),
            "headers": redact_headers(dict(request.headers)),
        }

        if self.log_full:
            http_request["query_params"] = redact_query_params(dict(request.query_params))
            http_request["remote_ip"] = request.client.host if request.client else None

        logger.info("Request received", http_request=http_request)

        start_time = time.perf_counter()
        response = await call_next(request)
        processing_time_ms = int((time.perf_counter() - start_time) * 1000)

        # Only JSON bodies are worth logging, documentation pages and assets are not
        res_body = None
        if self.log_full and response.headers.get("content-type", "").startswith("application/json"):
            try:
                sections = [
                    section async for section in response.body_iterator  # pyright: ignore[reportAttributeAccessIssue]
                ]
                response.body_iterator = iterate_in_threadpool(  # pyright: ignore[reportAttributeAccessIssue]
                    iter(sections)
                )
                res_body = json.loads(b"".join(sections).decode()) if sections else None
            except (json.JSONDecodeError, UnicodeDecodeError):
                res_body = None

        logger.info(
            "Response sent",
            http_request=http_request,
            http_response={
                "status_code": response.status_code,
                "body": res_body,
                "processing_time": processing_time_ms,
            },
        )

        # Inject request_id into response headers
        response.headers["X-Request-ID"] = request_id

        return response


# always returns a logger, without context if necessary
def get_logger(request: Request = None) -> structlog.BoundLogger:  # pyright: ignore[reportArgumentType]
    if request:
        return getattr(request.state, "logger", None) or structlog.stdlib.get_logger()
    try:
        ctx_request = request_context.get()
    except LookupError:
        return structlog.stdlib.get_logger()
    else:
        return getattr(ctx_request.state, "logger", None) or structlog.stdlib.get_logger()
