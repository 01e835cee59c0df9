"""
Authorization gate for the API documentation.

Every request under the guarded path goes through the same ordered chain:

1. access key (query parameter, else persistence cookie; the landing page
   without a query key deletes the cookie and never honours it)
2. local bypass (loopback callers, when enabled)
3. HTTP Basic credentials of the single configured admin
4. reject with a Basic challenge

The gate holds read-only configuration and never touches the request or the
response itself: `evaluate` returns a `GateOutcome` which the middleware applies.
"""

import secrets
from dataclasses import dataclass, field, replace
from enum import StrEnum

from shared.core.config import DEFAULT_SWAGGER_URI, SwaggerSettings
from shared.core.logging import get_logger
from shared.security.access_key_table import AccessKeyFormatError, AccessKeyTable
from shared.security.basic_credentials import MalformedCredentialsError, parse_basic_authorization
from shared.security.identity import ADMIN_ROLE, RequestIdentity

ACCESS_KEY_COOKIE = "swagger-access-key"
ACCESS_KEY_QUERY_PARAM = "accesskey"
ACCESS_KEY_IDENTITY_NAME = "accesskey"
AUTHORIZATION_HEADER = "Authorization"
WWW_AUTHENTICATE_HEADER = "WWW-Authenticate"
BASIC_CHALLENGE = "Basic"
LANDING_PAGE = "/index.html"


class SwaggerConfigError(ValueError):
    pass


class Verdict(StrEnum):
    FORWARD = "forward"
    REJECT = "reject"


@dataclass(frozen=True, slots=True)
class GateRequest:
    """What the gate needs to know about an incoming request."""

    path: str
    query_access_key: str | None = None
    cookie_access_key: str | None = None
    authorization: str | None = None
    is_local: bool = False
    client_host: str | None = None


@dataclass(frozen=True, slots=True)
class GateOutcome:
    verdict: Verdict
    identity: RequestIdentity | None = None
    # Access key to persist in the cookie
    set_cookie: str | None = None
    delete_cookie: bool = False
    bad_attempt: bool = False

    @property
    def forwarded(self) -> bool:
        return self.verdict == Verdict.FORWARD

    @classmethod
    def forward(cls, identity: RequestIdentity | None = None, set_cookie: str | None = None) -> "GateOutcome":
        return cls(Verdict.FORWARD, identity=identity, set_cookie=set_cookie)

    @classmethod
    def reject(cls, *, bad_attempt: bool = False) -> "GateOutcome":
        return cls(Verdict.REJECT, bad_attempt=bad_attempt)


FORWARD_UNMODIFIED = GateOutcome.forward()


def normalize_uri(uri: str | None) -> str:
    if not uri or not uri.strip("/ "):
        return DEFAULT_SWAGGER_URI
    return "/" + uri.strip().strip("/")


@dataclass(frozen=True)
class GateConfig:
    uri: str
    username: str
    password: str = field(repr=False)
    local_authentication_bypass_enabled: bool = False
    access_keys: AccessKeyTable | None = field(default=None, repr=False)
    cookie_secure: bool = False

    @classmethod
    def from_settings(cls, settings: SwaggerSettings) -> "GateConfig":
        if not settings.username:
            msg = "Swagger username is required (swagger.username)"
            raise SwaggerConfigError(msg)
        if not settings.password:
            msg = "Swagger password is required (swagger.password)"
            raise SwaggerConfigError(msg)

        if not settings.uri:
            get_logger().debug("A swagger uri was not set explicitly, so choosing default", uri=DEFAULT_SWAGGER_URI)

        access_keys = None
        if settings.access_keys:
            try:
                access_keys = AccessKeyTable.from_entries(settings.access_keys)
            except AccessKeyFormatError as e:
                raise SwaggerConfigError(str(e)) from e

        return cls(
            uri=normalize_uri(settings.uri),
            username=settings.username,
            password=settings.password,
            local_authentication_bypass_enabled=settings.local_authentication_bypass_enabled,
            access_keys=access_keys,
            cookie_secure=settings.cookie_secure,
        )


class SwaggerAuthGate:
    """Decides whether a documentation request is forwarded or rejected. Safe to share between requests."""

    def __init__(self, config: GateConfig) -> None:
        self.config = config
        self._uri = config.uri
        self._uri_prefix = config.uri + "/"
        self._landing_pages = (config.uri, config.uri + LANDING_PAGE)
        self._username = config.username.lower()
        self._password = config.password.encode("utf-8")

    @classmethod
    def from_settings(cls, settings: SwaggerSettings) -> "SwaggerAuthGate":
        return cls(GateConfig.from_settings(settings))

    @property
    def uri(self) -> str:
        return self._uri

    def guards(self, path: str) -> bool:
        # Segment aware: "/swagger" and "/swagger/..." but never "/swaggerfoo"
        return path == self._uri or path.startswith(self._uri_prefix)

    def is_landing_page(self, path: str) -> bool:
        return path in self._landing_pages

    def evaluate(self, request: GateRequest) -> GateOutcome:
        if not self.guards(request.path):
            return FORWARD_UNMODIFIED

        # Visiting the landing page without a key clears any previous key
        reset = (
            self.config.access_keys is not None
            and not request.query_access_key
            and self.is_landing_page(request.path)
        )

        outcome = (
            self._check_access_keys(request, reset=reset)
            or self._check_local_bypass(request)
            or self._check_credentials(request)
            or GateOutcome.reject()
        )

        if reset:
            outcome = replace(outcome, delete_cookie=True)
        return outcome

    def _check_access_keys(self, request: GateRequest, *, reset: bool) -> GateOutcome | None:
        table = self.config.access_keys
        if table is None:
            return None

        access_key = request.query_access_key
        if not access_key and not reset:
            access_key = request.cookie_access_key

        role = table.role_for(access_key)
        if role is None:
            return None

        identity = RequestIdentity(name=ACCESS_KEY_IDENTITY_NAME, role=role)
        cookie = None if identity.is_admin else table.key_for(role)
        return GateOutcome.forward(identity, set_cookie=cookie)

    def _check_local_bypass(self, request: GateRequest) -> GateOutcome | None:
        if not self.config.local_authentication_bypass_enabled or not request.is_local:
            return None

        get_logger().debug("Allowed Swagger access because we're local")
        return FORWARD_UNMODIFIED

    def _check_credentials(self, request: GateRequest) -> GateOutcome | None:
        try:
            credentials = parse_basic_authorization(request.authorization)
        except MalformedCredentialsError:
            get_logger().debug("Unauthorized attempt at Swagger", ip=request.client_host)
            return GateOutcome.reject(bad_attempt=True)

        if credentials is None:
            return None

        username_matches = credentials.username.lower() == self._username
        password_matches = secrets.compare_digest(credentials.password.encode("utf-8"), self._password)
        if username_matches and password_matches:
            return GateOutcome.forward(RequestIdentity(name=self.config.username, role=ADMIN_ROLE))

        return None
