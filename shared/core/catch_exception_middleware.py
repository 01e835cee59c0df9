from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from shared.core.logging import get_logger


# This middleware catches unhandled exceptions and returns a 500 response
# Note that HTTPExceptions are not caught here and will be handled by FastAPI
class CatchExceptionMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, *, expose_errors: bool = False) -> None:
        super().__init__(app)
        self.expose_errors = expose_errors

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            get_logger(request).exception("Unhandled exception occurred", path=request.url.path)
            # Error details only leak to clients in dev environments
            error = str(e) if self.expose_errors else "Internal server error"
            return JSONResponse({"error": error}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
