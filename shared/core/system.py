from fastapi import APIRouter, FastAPI, Request
from fastapi.openapi.docs import get_swagger_ui_html
from pydantic import BaseModel
from starlette.responses import HTMLResponse

from shared.core.config import Settings
from shared.security.swagger_gate import LANDING_PAGE

router = APIRouter(tags=["system"])


@router.head("/healthz")
@router.head("/health")
@router.get("/health")
@router.get("/healthz")
def health() -> dict:
    """
    Health check endpoint for the API.

    Returns a simple status response indicating that the service is running.
    """
    return {"status": "ok"}


class Version(BaseModel):
    name: str
    version: str


@router.get("/version")
def version(request: Request) -> Version:
    """Return the global app name and version."""
    return Version(name=request.app.title, version=request.app.version)


def create_fastapi(settings: Settings, docs_uri: str) -> FastAPI:
    """
    Create a FastAPI app instance based on settings.

    The interactive documentation and the OpenAPI schema are both served under docs_uri,
    so the documentation gate protects them together.
    """
    openapi_url = f"{docs_uri}/openapi.json"
    oauth2_redirect_url = f"{docs_uri}/oauth2-redirect"

    app = FastAPI(
        title=settings.app_name or "API",
        version=str(settings.app_version) if settings.app_version else "0.0.0",
        docs_url=docs_uri,
        redoc_url=None,
        openapi_url=openapi_url,
        swagger_ui_oauth2_redirect_url=oauth2_redirect_url,
    )

    # Swagger UI's classic landing page, visiting it without a key resets the access key cookie
    async def swagger_index(_request: Request) -> HTMLResponse:
        return get_swagger_ui_html(
            openapi_url=openapi_url, title=f"{app.title} - Swagger UI", oauth2_redirect_url=oauth2_redirect_url
        )

    app.add_route(f"{docs_uri}{LANDING_PAGE}", swagger_index, include_in_schema=False)

    app.include_router(router)
    return app
