"""Response body field lookup

Backend responses come either flat or wrapped in a ``data`` envelope. All
shape guessing goes through ``first_string`` with one of the ordered path
lists below.
"""

from typing import Any, Iterable, Optional

# Paths are dotted keys tried in order; the first non-empty string wins
ACCESS_TOKEN_PATHS = ("data.accessToken", "accessToken")
REFRESH_TOKEN_PATHS = ("data.refreshToken", "refreshToken")
CSRF_TOKEN_PATHS = ("token", "data.token", "_csrf", "data._csrf")
CSRF_HEADER_NAME_PATHS = ("headerName",)
MESSAGE_PATHS = ("message",)


def lookup(payload: Any, path: str) -> Any:
    """Follow a dotted path through nested dicts, None when any hop is missing"""
    current = payload
    for key in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def first_string(payload: Any, paths: Iterable[str]) -> Optional[str]:
    """Return the first non-empty string found along paths, or None"""
    for path in paths:
        value = lookup(payload, path)
        if isinstance(value, str) and value:
            return value
    return None
