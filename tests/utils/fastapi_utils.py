from collections.abc import Callable
from unittest.mock import Mock

from fastapi import FastAPI, Request

from shared.core.request_context import get_request_identity
from shared.security.swagger_auth_middleware import SwaggerAuthMiddleware
from shared.security.swagger_gate import SwaggerAuthGate
from shared.utils.network_utils import is_local_request


def create_mock_request(client_host: str | None = "203.0.113.10", server_host: str | None = "10.0.0.5") -> Mock:
    """
    Provide a mock Request instance with the given client and server addresses.
    """
    mock = Mock()
    mock.client = Mock(host=client_host) if client_host is not None else None
    mock.scope = {"server": (server_host, 8000)} if server_host is not None else {}
    return mock


class GatedApp:
    """Small app behind the documentation gate, records how often the downstream handler ran."""

    def __init__(self, gate: SwaggerAuthGate, is_local: Callable[[Request], bool] = is_local_request) -> None:
        self.calls = 0
        self.app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
        self.app.add_middleware(SwaggerAuthMiddleware, gate=gate, is_local=is_local)

        async def whoami(request: Request) -> dict:
            self.calls += 1
            identity = get_request_identity(request)
            return {
                "name": identity.name if identity else None,
                "role": identity.role if identity else None,
                "user": request.user.display_name if "user" in request.scope else None,
                "scopes": request.auth.scopes if "auth" in request.scope else None,
            }

        self.app.add_api_route(f"{gate.uri}", whoami)
        self.app.add_api_route(f"{gate.uri}/index.html", whoami)
        self.app.add_api_route(f"{gate.uri}/whoami", whoami)
        self.app.add_api_route("/public", whoami)
