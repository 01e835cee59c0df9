from http import HTTPStatus

import pytest
from fastapi.testclient import TestClient

from api.main import app

client = TestClient(app)


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("get", "/v1/system/health"),
        ("get", "/v1/system/healthz"),
        ("get", "/health"),
        ("get", "/healthz"),
        ("head", "/v1/system/health"),
        ("head", "/v1/system/healthz"),
        ("head", "/health"),
        ("head", "/healthz"),
    ],
)
def test_system_health(method: str, path: str) -> None:
    # System routes are outside the documentation gate
    response = getattr(client, method)(path)
    assert response.status_code == HTTPStatus.OK
    if method == "get":
        assert response.json() == {"status": "ok"}


@pytest.mark.parametrize(
    "path",
    [
        "/v1/system/version",
        "/version",
    ],
)
def test_system_version(path: str) -> None:
    response = client.get(path)
    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"name": "swagger-gate-test", "version": "1.0.0"}
