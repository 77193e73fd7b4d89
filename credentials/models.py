"""Data models for stored credentials"""

import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

SECONDS_PER_DAY = 24 * 60 * 60

# Well-known credential names
ACCESS_TOKEN = "access_token"
REFRESH_TOKEN = "refresh_token"
AUTH_TOKEN = "auth_token"
REMEMBER_ME = "remember_me"


@dataclass
class CredentialOptions:
    """Options applied when a credential is written

    Attributes:
        days: Lifetime in days, None for a session-only credential
        path: Scope path, kept for parity with cookie semantics
        same_site: One of "lax", "strict" or "none"
        secure: Only send over HTTPS; None lets the writer decide
    """
    days: Optional[float] = None
    path: str = "/"
    same_site: str = "lax"
    secure: Optional[bool] = None

    def expires_at(self, now: Optional[float] = None) -> Optional[float]:
        """Absolute expiry in epoch seconds, or None when session-only"""
        if self.days is None:
            return None
        if now is None:
            now = time.time()
        return now + self.days * SECONDS_PER_DAY


@dataclass
class Credential:
    """A named credential value

    Attributes:
        name: Credential name (e.g. access_token, X-XSRF-TOKEN)
        value: Credential value
        expires_at: Epoch seconds after which the value reads as absent
        path: Scope path
        same_site: SameSite policy
        secure: Whether the credential is HTTPS-only
    """
    name: str
    value: str
    expires_at: Optional[float] = None
    path: str = "/"
    same_site: str = "lax"
    secure: bool = False

    @classmethod
    def create(cls, name: str, value: str, options: Optional[CredentialOptions] = None) -> "Credential":
        options = options or CredentialOptions()
        return cls(
            name=name,
            value=value,
            expires_at=options.expires_at(),
            path=options.path,
            same_site=options.same_site,
            secure=bool(options.secure),
        )

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        if now is None:
            now = time.time()
        return now >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credential":
        return cls(
            name=str(data["name"]),
            value=str(data["value"]),
            expires_at=data.get("expires_at"),
            path=data.get("path", "/"),
            same_site=data.get("same_site", "lax"),
            secure=bool(data.get("secure", False)),
        )
