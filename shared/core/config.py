import importlib
import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from packaging.version import Version
from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from structlog import BoundLogger
from structlog.types import EventDict

from shared.core.app_environment import AppEnvironment

# Load .env file if present as soon as this module is imported
load_dotenv()

DEFAULT_SWAGGER_URI = "/swagger"


def load_yaml_config(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    with p.open() as f:
        return yaml.safe_load(f) or {}


def expand_env_vars(obj: Any) -> Any:  # noqa: ANN401
    if isinstance(obj, dict):
        return {k: expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [expand_env_vars(v) for v in obj]
    elif isinstance(obj, str):

        def replacer(m: re.Match) -> str:
            var_name = m.group(1)
            env_val = os.getenv(var_name)
            if env_val:
                return env_val
            # If not in env, treat var_name as a file path
            # (Useful for volume mounted secrets, e.g. the swagger admin password)
            if Path(var_name).is_file():
                try:
                    with Path(var_name).open("r", encoding="utf-8") as f:
                        return f.read().strip()
                except OSError:
                    return m.group(0)
            return m.group(0)

        return re.sub(r"\$\{([^\}]+)\}", replacer, obj)
    else:
        return obj


def resolve_symbol(symbol_str: str) -> type:
    module_name, class_name = symbol_str.rsplit(".", 1)
    module = importlib.import_module(module_name)
    symbol = getattr(module, class_name)
    if symbol is None:
        msg = f"Could not resolve symbol {symbol_str}"
        raise ValueError(msg)
    return symbol


class SwaggerSettings(BaseModel):
    """
    Settings of the documentation gate.

    Credentials are optional here on purpose so settings can always be loaded,
    the gate refuses to start when they are missing (see shared.security.swagger_gate).
    """

    uri: str | None = None
    username: str | None = None
    password: str | None = None
    # Entries formatted as "role:key"
    access_keys: list[str] | None = None
    local_authentication_bypass_enabled: bool = False
    cookie_secure: bool = False

    model_config = {"frozen": True}

    @field_validator("access_keys", mode="before")
    def parse_access_keys(cls, v) -> list[str] | None:  # noqa: ANN001, N805
        # Allow a comma separated string, handy for env var overrides
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


# Settings class
class Settings(BaseSettings):
    app_name: str | None = None
    app_version: Version | None = None
    app_environment: AppEnvironment = AppEnvironment.PRODUCTION  # Default to production for safety
    allowed_hosts: list[str] | None = None
    redirect_https: bool = False
    log_level: str = (
        "debug"  # Default to debug, however for any non-dev environment this will be overridden to "info" in the validator
    )
    log_processors: list[Callable[[BoundLogger, str, EventDict], EventDict]] | None = None
    swagger: SwaggerSettings = SwaggerSettings()

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_nested_delimiter="__", case_sensitive=False, frozen=True
    )

    @field_validator("app_version", mode="before")
    def parse_version(cls, v) -> Version | None:  # noqa: ANN001, N805
        return Version(v) if v else None

    @field_validator("log_processors", mode="before")
    def parse_log_processors(cls, v) -> list[Callable[[BoundLogger, str, EventDict], EventDict]]:  # noqa: ANN001, N805
        return [resolve_symbol(item) if isinstance(item, str) else item for item in v] if v else None

    @field_validator("log_level", mode="before")
    def set_log_level(cls, v, info) -> str:  # noqa: ANN001, N805
        env_type = info.data.get("app_environment", AppEnvironment.PRODUCTION)
        if env_type != AppEnvironment.DEVELOPMENT:
            return "info"
        return v if isinstance(v, str) else "info"

    def is_dev_environment(self) -> bool:
        return self.app_environment in (AppEnvironment.LOCAL, AppEnvironment.DEVELOPMENT)


# Lazily initialized singleton config instance
_settings_instance: Settings | None = None
_settings_class: type[Settings] = Settings


def override_settings_class(new_class: type[Settings]) -> None:
    global _settings_class  # noqa: PLW0603
    if _settings_class != Settings:
        msg = "Settings class can only be overridden once and only if it is the default Settings class"
        raise RuntimeError(msg)
    if _settings_instance:
        msg = "Settings instance has already been created, cannot override class"
        raise RuntimeError(msg)
    _settings_class = new_class


def get_settings() -> Settings:
    global _settings_instance  # noqa: PLW0603
    if _settings_instance is None:
        yaml_path = os.getenv("CONFIG_YAML_PATH")
        if not yaml_path:
            msg = "CONFIG_YAML_PATH environment variable is not set. Cannot load YAML config."
            raise RuntimeError(msg)

        # Using print here to avoid circular import with shared.core.logging
        print("Loading configuration from: ", yaml_path)  # noqa: T201

        # Pydantic will merge env vars, .env, and yaml_config
        # We are not using pydancic's built-in yaml support because we want to
        # expand env vars in a more advanced way in the yaml file first
        # See SettingsConfigDict for more details

        yaml_config = load_yaml_config(yaml_path)
        yaml_config = expand_env_vars(yaml_config)

        _settings_instance = _settings_class(**yaml_config)
    return _settings_instance
