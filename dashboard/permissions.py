"""Client-side permission checks for gating dashboard screens"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from pydantic import ValidationError

from admin_client import ApiError, AuthenticatedHttpClient
from .models import PermissionEntry, normalize

logger = logging.getLogger(__name__)

WILDCARD = "*"

PermissionInput = Union[PermissionEntry, dict]


def _coerce(entries: Iterable[PermissionInput]) -> List[PermissionEntry]:
    return [e if isinstance(e, PermissionEntry) else PermissionEntry.model_validate(e) for e in entries]


def extract_permission_list(body: Any) -> List[Any]:
    """Find the permission list in a /api/permissions/me response"""
    data = body.get("data", body) if isinstance(body, dict) else body
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("permissions"), list):
        return data["permissions"]
    return []


class PermissionSet:
    """Permissions granted to the signed-in admin

    Matching rules for ``has``:
    - resource matches when equal, when the granted resource is ``*``, or
      when the queried resource is ``*``
    - action and type match when not asked for, when equal, or when the
      granted value is ``*``
    """

    def __init__(self, entries: Optional[Iterable[PermissionInput]] = None, storage_file: Optional[str] = None):
        self.storage_path = Path(storage_file) if storage_file else None
        self._entries: List[PermissionEntry] = []
        if entries is not None:
            self._entries = _coerce(entries)
        elif self.storage_path is not None:
            self._entries = self._load()

    @property
    def entries(self) -> List[PermissionEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def set(self, entries: Iterable[PermissionInput]) -> None:
        """Replace all permissions"""
        self._entries = _coerce(entries)
        self._persist()

    def add(self, entries: Union[PermissionInput, Iterable[PermissionInput]]) -> None:
        """Merge permissions, de-duplicated on resource:action:type"""
        if isinstance(entries, (PermissionEntry, dict)):
            entries = [entries]
        merged = {e.key: e for e in self._entries}
        for entry in _coerce(entries):
            merged[entry.key] = entry
        self._entries = list(merged.values())
        self._persist()

    def has(self, resource: str, action: Optional[str] = None, type: Optional[str] = None) -> bool:
        """Check whether any granted permission covers the request"""
        wanted_resource = normalize(resource)
        wanted_action = normalize(action)
        wanted_type = normalize(type)

        for p in self._entries:
            resource_ok = p.resource == wanted_resource or p.resource == WILDCARD or wanted_resource == WILDCARD
            action_ok = not wanted_action or p.action == wanted_action or p.action == WILDCARD
            type_ok = not wanted_type or p.type == wanted_type or p.type == WILDCARD
            if resource_ok and action_ok and type_ok:
                return True
        return False

    async def refresh(self, client: AuthenticatedHttpClient, path: Optional[str] = None) -> bool:
        """Hydrate from the backend; on failure the current permissions are kept

        Returns:
            True if permissions were replaced
        """
        if path is None:
            from settings import PERMISSIONS_ME_URL
            path = PERMISSIONS_ME_URL

        try:
            body = await client.get(path)
            entries = _coerce(extract_permission_list(body))
        except ApiError as e:
            logger.warning(f"Could not load permissions, keeping {len(self._entries)} cached: {e}")
            return False
        except ValidationError as e:
            logger.warning(f"Ignoring malformed permissions response: {e}")
            return False

        self.set(entries)
        logger.debug(f"Loaded {len(entries)} permissions")
        return True

    def _load(self) -> List[PermissionEntry]:
        if not self.storage_path.exists():
            return []
        try:
            raw = json.loads(self.storage_path.read_text())
            return _coerce(raw) if isinstance(raw, list) else []
        except (json.JSONDecodeError, ValidationError, OSError) as e:
            logger.warning(f"Ignoring unreadable permissions file {self.storage_path}: {e}")
            return []

    def _persist(self) -> None:
        if self.storage_path is None:
            return
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        self.storage_path.write_text(json.dumps([e.model_dump() for e in self._entries], indent=2))
