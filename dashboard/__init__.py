"""Dashboard helpers built on the admin API client"""

from .models import BackendUser, Page, PermissionEntry
from .pagination import fetch_page, iter_pages
from .permissions import PermissionSet

__all__ = [
    "BackendUser",
    "Page",
    "PermissionEntry",
    "fetch_page",
    "iter_pages",
    "PermissionSet",
]
