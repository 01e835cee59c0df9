from collections.abc import Callable

from fastapi import Request, status
from starlette.authentication import AuthCredentials, SimpleUser
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from shared.security.identity import RequestIdentity
from shared.security.swagger_gate import (
    ACCESS_KEY_COOKIE,
    ACCESS_KEY_QUERY_PARAM,
    AUTHORIZATION_HEADER,
    BASIC_CHALLENGE,
    WWW_AUTHENTICATE_HEADER,
    GateOutcome,
    GateRequest,
    SwaggerAuthGate,
)
from shared.utils.network_utils import is_local_request


def build_gate_request(request: Request, is_local: Callable[[Request], bool] = is_local_request) -> GateRequest:
    return GateRequest(
        path=request.scope["path"],
        query_access_key=request.query_params.get(ACCESS_KEY_QUERY_PARAM),
        cookie_access_key=request.cookies.get(ACCESS_KEY_COOKIE),
        authorization=request.headers.get(AUTHORIZATION_HEADER),
        is_local=is_local(request),
        client_host=request.client.host if request.client else None,
    )


def attach_identity(request: Request, identity: RequestIdentity) -> None:
    # Also exposed through request.user / request.auth like Starlette's AuthenticationMiddleware does
    request.state.identity = identity
    request.scope["user"] = SimpleUser(identity.name)
    request.scope["auth"] = AuthCredentials([identity.role])


def unauthorized_response() -> Response:
    return Response(status_code=status.HTTP_401_UNAUTHORIZED, headers={WWW_AUTHENTICATE_HEADER: BASIC_CHALLENGE})


# Protects the API documentation, see shared.security.swagger_gate for the decision chain
class SwaggerAuthMiddleware(BaseHTTPMiddleware):

    def __init__(
        self,
        app: ASGIApp,
        *,
        gate: SwaggerAuthGate,
        is_local: Callable[[Request], bool] = is_local_request,
    ) -> None:
        super().__init__(app)
        self.gate = gate
        self.is_local = is_local

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # Runs for every request of the app, keep it cheap
        if not self.gate.guards(request.scope["path"]):
            return await call_next(request)

        outcome = self.gate.evaluate(build_gate_request(request, self.is_local))

        if outcome.forwarded:
            if outcome.identity:
                attach_identity(request, outcome.identity)
            response = await call_next(request)
        else:
            response = unauthorized_response()

        self.apply_cookie(response, outcome)
        return response

    def apply_cookie(self, response: Response, outcome: GateOutcome) -> None:
        secure = self.gate.config.cookie_secure
        if outcome.delete_cookie:
            response.delete_cookie(ACCESS_KEY_COOKIE, path="/", secure=secure, httponly=True, samesite="lax")
        if outcome.set_cookie:
            response.set_cookie(
                ACCESS_KEY_COOKIE, outcome.set_cookie, path="/", secure=secure, httponly=True, samesite="lax"
            )
