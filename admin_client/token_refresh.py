"""Access token refresh with a single in-flight request"""

import asyncio
import logging
from typing import AsyncContextManager, Callable, Optional

import httpx

from credentials import ACCESS_TOKEN, REFRESH_TOKEN, CredentialOptions, CredentialStore
from .parsing import ACCESS_TOKEN_PATHS, REFRESH_TOKEN_PATHS, first_string

logger = logging.getLogger(__name__)

BareClientFactory = Callable[[], AsyncContextManager[httpx.AsyncClient]]


class TokenRefresher:
    """Refreshes the access token, sharing one request among concurrent callers

    The refresh call goes through a bare client so a 401 from the refresh
    endpoint never re-enters the refresh flow.
    """

    def __init__(
        self,
        store: CredentialStore,
        open_client: BareClientFactory,
        refresh_url: str,
        remember_days: Optional[float] = 365,
        secure: bool = False,
    ):
        """Initialize the refresher

        Args:
            store: Credential store holding refresh_token and receiving new tokens
            open_client: Returns an async context manager yielding a bare httpx client
            refresh_url: Refresh endpoint path
            remember_days: Lifetime of refreshed tokens, None for session-only
            secure: Mark stored tokens HTTPS-only
        """
        self.store = store
        self.open_client = open_client
        self.refresh_url = refresh_url
        self.remember_days = remember_days or None
        self.secure = secure
        self._task: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None

    async def refresh_access_token(self) -> Optional[str]:
        """Get a new access token

        Returns:
            The new access token, or None if none could be obtained
        """
        refresh_token = self.store.get(REFRESH_TOKEN)
        if not refresh_token:
            logger.debug("No refresh token available, skipping refresh")
            return None

        if self._task is None:
            self._task = asyncio.create_task(self._refresh(refresh_token))
        else:
            logger.debug("Joining token refresh already in flight")

        # A cancelled waiter must not cancel the refresh other callers share
        return await asyncio.shield(self._task)

    async def _refresh(self, refresh_token: str) -> Optional[str]:
        try:
            logger.info("Attempting to refresh access token...")
            async with self.open_client() as client:
                response = await client.post(
                    self.refresh_url,
                    headers={"Authorization": f"Bearer {refresh_token}"},
                )

            if not response.is_success:
                logger.error(f"Token refresh failed with status {response.status_code}: {response.text}")
                return None

            payload = response.json()
            access_token = first_string(payload, ACCESS_TOKEN_PATHS)
            new_refresh_token = first_string(payload, REFRESH_TOKEN_PATHS)

            options = CredentialOptions(days=self.remember_days, secure=self.secure)
            if access_token:
                self.store.set(ACCESS_TOKEN, access_token, options)
            if new_refresh_token:
                self.store.set(REFRESH_TOKEN, new_refresh_token, options)

            if access_token:
                logger.info("Successfully refreshed access token")
            else:
                logger.error("Token refresh response did not contain an access token")
            return access_token
        except Exception as e:
            logger.error(f"Token refresh failed with exception: {e}")
            return None
        finally:
            self._task = None
