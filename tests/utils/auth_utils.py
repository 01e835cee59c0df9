import base64

from shared.core.config import SwaggerSettings

ADMIN_USERNAME = "Admin"
ADMIN_PASSWORD = "correct-pw"
EDITOR_KEY = "editor-key-123"
VIEWER_KEY = "viewer-key-456"
ADMIN_KEY = "admin-key-789"
ACCESS_KEYS = [f"editor:{EDITOR_KEY}", f"viewer:{VIEWER_KEY}", f"admin:{ADMIN_KEY}"]


def basic_auth_header(username: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()


def create_swagger_settings(**overrides: object) -> SwaggerSettings:
    """Swagger settings matching tests/resources/config.yaml, with overrides."""
    values = {
        "uri": "/swagger",
        "username": ADMIN_USERNAME,
        "password": ADMIN_PASSWORD,
        "access_keys": ACCESS_KEYS,
        "local_authentication_bypass_enabled": False,
    }
    values |= overrides
    return SwaggerSettings(**values)
