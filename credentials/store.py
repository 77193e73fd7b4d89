"""Credential stores standing in for the browser cookie jar"""

import json
import logging
import os
import platform
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from .models import (
    ACCESS_TOKEN,
    AUTH_TOKEN,
    REFRESH_TOKEN,
    Credential,
    CredentialOptions,
)

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """Key/value credential store with expiry

    Writes are idempotent and last-writer-wins. An expired credential reads
    as absent.
    """

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Return the live value stored under name, or None"""

    @abstractmethod
    def set(self, name: str, value: str, options: Optional[CredentialOptions] = None) -> None:
        """Store value under name, replacing any previous value"""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove name; a missing name is not an error"""

    @abstractmethod
    def list_names(self) -> List[str]:
        """Names of all live credentials"""


class MemoryCredentialStore(CredentialStore):
    """In-process credential store"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._credentials: Dict[str, Credential] = {}
        for name, value in (initial or {}).items():
            self.set(name, value)

    def _live(self, name: str) -> Optional[Credential]:
        credential = self._credentials.get(name)
        if credential is None:
            return None
        if credential.is_expired():
            del self._credentials[name]
            return None
        return credential

    def get(self, name: str) -> Optional[str]:
        credential = self._live(name)
        return credential.value if credential else None

    def set(self, name: str, value: str, options: Optional[CredentialOptions] = None) -> None:
        self._credentials[name] = Credential.create(name, value, options)

    def delete(self, name: str) -> None:
        self._credentials.pop(name, None)

    def list_names(self) -> List[str]:
        return [name for name in list(self._credentials) if self._live(name)]


class FileCredentialStore(CredentialStore):
    """JSON file credential store with owner-only file permissions"""

    def __init__(self, credentials_file: Optional[str] = None):
        if credentials_file is None:
            from settings import CREDENTIALS_FILE
            credentials_file = CREDENTIALS_FILE
        self.credentials_path = Path(credentials_file)
        self._ensure_secure_directory()

    def _ensure_secure_directory(self):
        """Create parent directory with secure permissions"""
        parent_dir = self.credentials_path.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            # Set directory permissions to 700 on Unix-like systems
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

    def _load(self) -> Dict[str, Credential]:
        if not self.credentials_path.exists():
            return {}

        try:
            raw = json.loads(self.credentials_path.read_text())
            return {
                name: Credential.from_dict(entry)
                for name, entry in raw.get("credentials", {}).items()
            }
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError, OSError) as e:
            logger.warning(f"Ignoring unreadable credentials file {self.credentials_path}: {e}")
            return {}

    def _save(self, credentials: Dict[str, Credential]):
        data = {"credentials": {name: c.to_dict() for name, c in credentials.items()}}
        self.credentials_path.write_text(json.dumps(data, indent=2))

        # Set file permissions to 600 on Unix-like systems
        if platform.system() != "Windows":
            os.chmod(self.credentials_path, 0o600)

    def get(self, name: str) -> Optional[str]:
        credentials = self._load()
        credential = credentials.get(name)
        if credential is None:
            return None
        if credential.is_expired():
            del credentials[name]
            self._save(credentials)
            return None
        return credential.value

    def set(self, name: str, value: str, options: Optional[CredentialOptions] = None) -> None:
        credentials = self._load()
        credentials[name] = Credential.create(name, value, options)
        self._save(credentials)
        logger.debug(f"Stored credential {name} in {self.credentials_path}")

    def delete(self, name: str) -> None:
        credentials = self._load()
        if credentials.pop(name, None) is not None:
            self._save(credentials)

    def list_names(self) -> List[str]:
        return [name for name, c in self._load().items() if not c.is_expired()]

    @property
    def credentials_file(self) -> Path:
        """Get the credentials file path"""
        return self.credentials_path


AUTH_LIKE_NAMES = frozenset({
    AUTH_TOKEN,
    "authToken",
    "token",
    REFRESH_TOKEN,
    ACCESS_TOKEN,
    "id_token",
    "isOtpVerified",
})
AUTH_LIKE_PATTERN = re.compile(r"token|auth|otp", re.IGNORECASE)


def delete_auth_credentials(store: CredentialStore) -> List[str]:
    """Delete every auth-like credential (logout)

    Returns:
        Names that were deleted
    """
    deleted = []
    for name in store.list_names():
        if name in AUTH_LIKE_NAMES or AUTH_LIKE_PATTERN.search(name):
            store.delete(name)
            deleted.append(name)
    if deleted:
        logger.info(f"Deleted auth credentials: {deleted}")
    return deleted
