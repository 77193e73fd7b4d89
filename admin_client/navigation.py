"""Login redirect support for browser-like hosts"""

import logging
import re
from abc import ABC, abstractmethod
from typing import List

logger = logging.getLogger(__name__)


class Navigator(ABC):
    """Location of a browser-like host

    A client without a navigator runs outside a browser and never redirects.
    """

    @abstractmethod
    def current_path(self) -> str:
        """Path of the current location, e.g. /dashboard"""

    @abstractmethod
    def replace(self, path: str) -> None:
        """Hard-navigate to path, replacing the current history entry"""


class MemoryNavigator(Navigator):
    """Navigator that only records where it was sent"""

    def __init__(self, path: str = "/"):
        self.path = path
        self.history: List[str] = [path]

    def current_path(self) -> str:
        return self.path

    def replace(self, path: str) -> None:
        self.path = path
        self.history[-1] = path


def is_on_page(path: str, page: str) -> bool:
    """True when path is page itself, optionally followed by a query string"""
    return re.search(re.escape(page) + r"($|\?)", path) is not None


def redirect_to_login(navigator: Navigator, login_path: str) -> bool:
    """Send the navigator to the login page unless it is already there

    Returns:
        True if a redirect was issued
    """
    current = navigator.current_path()
    if is_on_page(current, login_path):
        return False
    logger.info(f"Session expired, redirecting from {current} to {login_path}")
    navigator.replace(login_path)
    return True
