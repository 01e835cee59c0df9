import base64
from dataclasses import dataclass

BASIC_PREFIX = "Basic "


class MalformedCredentialsError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class BasicCredentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"BasicCredentials(username={self.username!r}, password='***')"


def parse_basic_authorization(header: str | None) -> BasicCredentials | None:
    """
    Parse an HTTP Basic Authorization header value.

    Returns None when the header is absent or uses another scheme (the prefix match
    is case sensitive). Raises MalformedCredentialsError when the header claims to
    be Basic but its payload is empty, not base64, not UTF-8, or has no usable
    "username:password" separator.
    """
    if not header or not header.startswith(BASIC_PREFIX):
        return None

    payload = header[len(BASIC_PREFIX) :].strip()
    if not payload:
        msg = "Empty Basic credentials payload"
        raise MalformedCredentialsError(msg)

    try:
        decoded = base64.b64decode(payload, validate=True).decode("utf-8")
    except ValueError as e:  # Covers binascii.Error and UnicodeDecodeError, also raised for non-ASCII payloads
        msg = "Basic credentials payload could not be decoded"
        raise MalformedCredentialsError(msg) from e

    username, separator, password = decoded.partition(":")
    if not separator or not username or not password:
        msg = "Basic credentials must be formatted as 'username:password'"
        raise MalformedCredentialsError(msg)

    return BasicCredentials(username=username, password=password)
