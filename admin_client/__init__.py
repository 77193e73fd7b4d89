"""Authenticated HTTP client for the navigation platform admin backend

Provides bearer/CSRF token attachment, single-flight access token refresh
with one retry per request, and login redirect on session loss.
"""

from .client import AuthenticatedHttpClient, RequestContext, decorate_request
from .csrf import CsrfToken, CsrfTokenFetcher
from .errors import ApiError
from .navigation import MemoryNavigator, Navigator, redirect_to_login
from .parsing import first_string
from .token_refresh import TokenRefresher

__all__ = [
    "AuthenticatedHttpClient",
    "RequestContext",
    "decorate_request",
    "CsrfToken",
    "CsrfTokenFetcher",
    "ApiError",
    "MemoryNavigator",
    "Navigator",
    "redirect_to_login",
    "first_string",
    "TokenRefresher",
]
