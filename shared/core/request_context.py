from contextvars import ContextVar
from typing import TYPE_CHECKING

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

if TYPE_CHECKING:
    from shared.security.identity import RequestIdentity


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        token = request_context.set(request)
        try:
            response = await call_next(request)
        finally:
            request_context.reset(token)
        return response


# Context variable to hold the current request context
request_context: ContextVar[Request] = ContextVar("request_context")


def get_request_identity(request: Request | None = None) -> "RequestIdentity | None":
    """Return the identity the documentation gate attached to the request, if any."""
    if request is None:
        try:
            request = request_context.get()
        except LookupError:
            return None
    return getattr(request.state, "identity", None)
