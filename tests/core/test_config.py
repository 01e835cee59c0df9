from pathlib import Path

import pytest
from packaging.version import Version
from pydantic import ValidationError

from shared.core.app_environment import AppEnvironment
from api.core.config import get_settings
from shared.core.config import Settings, SwaggerSettings, expand_env_vars, load_yaml_config


def test_expand_env_vars(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    secret_file = tmp_path / "swagger_password"
    secret_file.write_text("from-file\n", encoding="utf-8")
    monkeypatch.setenv("SWAGGER_TEST_USER", "from-env")

    config = {
        "swagger": {
            "username": "${SWAGGER_TEST_USER}",
            "password": f"${{{secret_file}}}",
            "access_keys": ["editor:${SWAGGER_TEST_MISSING}"],
        }
    }

    assert expand_env_vars(config) == {
        "swagger": {
            "username": "from-env",
            "password": "from-file",
            # Unresolved placeholders are left as is
            "access_keys": ["editor:${SWAGGER_TEST_MISSING}"],
        }
    }


def test_swagger_settings_defaults() -> None:
    swagger = SwaggerSettings()
    assert swagger.uri is None
    assert swagger.username is None
    assert swagger.access_keys is None
    assert swagger.local_authentication_bypass_enabled is False
    assert swagger.cookie_secure is False


def test_swagger_settings_access_keys_from_string() -> None:
    swagger = SwaggerSettings(access_keys="editor:a, viewer:b,")
    assert swagger.access_keys == ["editor:a", "viewer:b"]


def test_swagger_settings_are_frozen() -> None:
    swagger = SwaggerSettings(username="admin")
    with pytest.raises(ValidationError):
        swagger.username = "other"


def test_log_level_outside_dev() -> None:
    settings = Settings(app_environment=AppEnvironment.PRODUCTION, log_level="debug")
    assert settings.log_level == "info"
    assert not settings.is_dev_environment()

    settings = Settings(app_environment=AppEnvironment.DEVELOPMENT, log_level="debug")
    assert settings.log_level == "debug"
    assert settings.is_dev_environment()


def test_settings_from_yaml(get_test_resources: Path) -> None:
    raw = load_yaml_config(get_test_resources / "config.yaml")
    assert raw["swagger"]["uri"] == "/swagger"

    settings = get_settings()
    assert settings.app_version == Version("1.0.0")
    assert settings.swagger.username == "Admin"
    assert len(settings.swagger.access_keys) == 3
