"""
Static access keys granting documentation access to a role.

Keys are configured as "role:key" strings. Both directions are indexed:
key -> role to authorize a request, role -> key to re-issue the persistence cookie.
"""

from collections.abc import Iterable

ACCESS_KEY_SEPARATOR = ":"


class AccessKeyFormatError(ValueError):
    pass


def parse_access_key_entry(entry: str) -> tuple[str, str]:
    """Split a "role:key" entry at its first colon, the key may itself contain colons."""
    role, separator, key = entry.partition(ACCESS_KEY_SEPARATOR)
    if not separator or not role or not key:
        msg = "Badly formed Swagger access key. Needs to be in format 'role:accessKey'"
        raise AccessKeyFormatError(msg)
    return role, key


class AccessKeyTable:
    __slots__ = ("_key_to_role", "_role_to_key")

    def __init__(self, key_to_role: dict[str, str], role_to_key: dict[str, str]) -> None:
        self._key_to_role = key_to_role
        self._role_to_key = role_to_key

    @classmethod
    def from_entries(cls, entries: Iterable[str]) -> "AccessKeyTable":
        key_to_role: dict[str, str] = {}
        role_to_key: dict[str, str] = {}
        for entry in entries:
            role, key = parse_access_key_entry(entry)
            # Last entry wins for a duplicated key or role
            key_to_role[key] = role
            role_to_key[role] = key
        return cls(key_to_role, role_to_key)

    def role_for(self, key: str | None) -> str | None:
        if not key:
            return None
        return self._key_to_role.get(key)

    def key_for(self, role: str) -> str | None:
        return self._role_to_key.get(role)

    def __len__(self) -> int:
        return len(self._key_to_role)

    def __contains__(self, key: object) -> bool:
        return key in self._key_to_role
