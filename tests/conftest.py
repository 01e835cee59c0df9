import os
from pathlib import Path

import pytest

# Must be set before anything loads the settings singleton (api.main does on import)
os.environ.setdefault("CONFIG_YAML_PATH", str(Path(__file__).parent / "resources" / "config.yaml"))

from shared.core.config import SwaggerSettings  # noqa: E402
from shared.security.swagger_gate import SwaggerAuthGate  # noqa: E402
from tests.utils.auth_utils import create_swagger_settings  # noqa: E402


@pytest.fixture
def swagger_settings() -> SwaggerSettings:
    return create_swagger_settings()


@pytest.fixture
def gate(swagger_settings: SwaggerSettings) -> SwaggerAuthGate:
    return SwaggerAuthGate.from_settings(swagger_settings)


@pytest.fixture
def bypass_gate() -> SwaggerAuthGate:
    return SwaggerAuthGate.from_settings(create_swagger_settings(local_authentication_bypass_enabled=True))


@pytest.fixture
def get_test_resources() -> Path:
    return Path(__file__).parent / "resources"
