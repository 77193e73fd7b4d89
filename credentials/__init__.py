"""Credential storage for the admin API client

Provides the cookie-jar-like store the client reads bearer and CSRF tokens
from, with in-memory and JSON-file implementations.
"""

from .models import (
    ACCESS_TOKEN,
    AUTH_TOKEN,
    REFRESH_TOKEN,
    REMEMBER_ME,
    Credential,
    CredentialOptions,
)
from .store import (
    CredentialStore,
    FileCredentialStore,
    MemoryCredentialStore,
    delete_auth_credentials,
)

__all__ = [
    "ACCESS_TOKEN",
    "AUTH_TOKEN",
    "REFRESH_TOKEN",
    "REMEMBER_ME",
    "Credential",
    "CredentialOptions",
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "delete_auth_credentials",
]
