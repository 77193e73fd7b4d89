"""CSRF token fetch-once support"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from credentials import CredentialOptions, CredentialStore
from .parsing import CSRF_HEADER_NAME_PATHS, CSRF_TOKEN_PATHS, first_string
from .token_refresh import BareClientFactory

logger = logging.getLogger(__name__)

DEFAULT_CSRF_HEADER = "X-XSRF-TOKEN"


@dataclass
class CsrfToken:
    """A CSRF token and the header it must be sent in

    Attributes:
        token: Token value, None when the server returned none
        header_name: Request header (and credential name) for the token
    """
    token: Optional[str]
    header_name: str


class CsrfTokenFetcher:
    """Fetches the CSRF token at most once at a time

    A fetcher is tied to one base URL; the client builds a fresh one whenever
    its base URL changes.
    """

    def __init__(
        self,
        store: CredentialStore,
        open_client: BareClientFactory,
        csrf_url: str,
        header_name: str = DEFAULT_CSRF_HEADER,
        token_days: float = 1,
        secure: bool = False,
    ):
        self.store = store
        self.open_client = open_client
        self.csrf_url = csrf_url
        self.header_name = header_name
        self.token_days = token_days
        self.secure = secure
        self._task: Optional[asyncio.Task] = None

    async def fetch_once(self) -> Optional[CsrfToken]:
        """Return the cached CSRF token, fetching it when the store has none

        Returns:
            The token, or None when the fetch failed
        """
        existing = self.store.get(self.header_name)
        if existing:
            return CsrfToken(token=existing, header_name=self.header_name)

        if self._task is None:
            self._task = asyncio.create_task(self._fetch())
        return await asyncio.shield(self._task)

    async def _fetch(self) -> Optional[CsrfToken]:
        try:
            async with self.open_client() as client:
                response = await client.get(self.csrf_url)
            response.raise_for_status()

            payload = response.json()
            token = first_string(payload, CSRF_TOKEN_PATHS)
            header_name = first_string(payload, CSRF_HEADER_NAME_PATHS) or self.header_name
            if token:
                self.store.set(
                    header_name,
                    token,
                    CredentialOptions(days=self.token_days, secure=self.secure),
                )
                logger.debug(f"Fetched CSRF token for header {header_name}")
            else:
                logger.warning("CSRF endpoint returned no token")
            return CsrfToken(token=token, header_name=header_name)
        except Exception as e:
            # Requests go out without the header; the server rejects them if it cares
            logger.warning(f"CSRF token fetch failed: {e}")
            return None
        finally:
            self._task = None
