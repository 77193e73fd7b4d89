"""Authenticated HTTP client for the admin backend

Attaches bearer and CSRF tokens to outgoing requests, refreshes the access
token once when a request is rejected with 401/403, and sends the user back
to the login page when the session cannot be recovered.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from functools import partial
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Set

import httpx

from credentials import (
    ACCESS_TOKEN,
    AUTH_TOKEN,
    REFRESH_TOKEN,
    REMEMBER_ME,
    CredentialStore,
    MemoryCredentialStore,
)
from .csrf import DEFAULT_CSRF_HEADER, CsrfToken, CsrfTokenFetcher
from .errors import ApiError, read_body
from .navigation import Navigator, redirect_to_login
from .token_refresh import TokenRefresher

logger = logging.getLogger(__name__)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
AUTH_FAILURE_STATUSES = frozenset({401, 403})

DEFAULT_REFRESH_URL = "/api/admin/auth/refresh-token"
DEFAULT_CSRF_URL = "/api/auth/csrf"
DEFAULT_LOGIN_PATH = "/login"


@dataclass
class RequestContext:
    """One logical request, kept across its single refresh-triggered retry"""
    method: str
    url: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    params: Optional[Dict[str, Any]] = None
    json: Any = None
    data: Any = None
    files: Any = None
    content: Any = None
    timeout: Any = httpx.USE_CLIENT_DEFAULT
    credentials: Optional[str] = None
    retried: bool = False

    def build_request(self, http: httpx.AsyncClient) -> httpx.Request:
        request = http.build_request(
            self.method,
            self.url,
            headers=self.headers,
            params=self.params,
            json=self.json,
            data=self.data,
            files=self.files,
            content=self.content,
            timeout=self.timeout,
        )
        if self.credentials != "include":
            request.headers.pop("Cookie", None)
        return request


async def decorate_request(api: "AuthenticatedHttpClient", csrf: CsrfTokenFetcher, request: httpx.Request) -> None:
    """Request hook: attach the bearer token and, on unsafe methods, the CSRF token"""
    if "Authorization" not in request.headers:
        token = api.store.get(ACCESS_TOKEN) or api.store.get(AUTH_TOKEN)
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    url = str(request.url)
    if (
        request.method.upper() not in SAFE_METHODS
        and not api.is_token_endpoint(url)
        and api.csrf_header_name not in request.headers
    ):
        token = api.store.get(api.csrf_header_name)
        header_name = api.csrf_header_name
        if not token:
            fetched: Optional[CsrfToken] = await csrf.fetch_once()
            if fetched:
                token, header_name = fetched.token, fetched.header_name
        if token:
            request.headers[header_name] = token

    logger.debug(
        f"{request.method} {url} "
        f"auth={'[REDACTED]' if 'Authorization' in request.headers else 'none'}"
    )


class AuthenticatedHttpClient:
    """HTTP client that keeps the admin session alive

    Usage:
        async with AuthenticatedHttpClient(base_url, store=store) as api:
            users = await api.get("/api/users/get-all", query={"pageNumber": 0})
    """

    def __init__(
        self,
        base_url: str,
        store: Optional[CredentialStore] = None,
        *,
        navigator: Optional[Navigator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        refresh_url: str = DEFAULT_REFRESH_URL,
        csrf_url: str = DEFAULT_CSRF_URL,
        csrf_header_name: str = DEFAULT_CSRF_HEADER,
        remember_days: Optional[float] = 365,
        csrf_token_days: float = 1,
        login_path: str = DEFAULT_LOGIN_PATH,
        timeout: Any = None,
    ):
        """Initialize the client

        Args:
            base_url: Backend base URL; absolute request URLs bypass it
            store: Credential store (defaults to an in-memory store)
            navigator: Browser-like host to redirect on session loss, None outside a browser
            transport: Optional httpx transport shared by all internal clients
            refresh_url: Refresh endpoint path
            csrf_url: CSRF endpoint path
            csrf_header_name: Default CSRF header and credential name
            remember_days: Lifetime of refreshed tokens, None or 0 for session-only
            csrf_token_days: Lifetime of fetched CSRF tokens
            login_path: Redirect target on unrecoverable auth failure
            timeout: httpx timeout for every request
        """
        self.store = store if store is not None else MemoryCredentialStore()
        self.navigator = navigator
        self.refresh_url = refresh_url
        self.csrf_url = csrf_url
        self.csrf_header_name = csrf_header_name
        self.csrf_token_days = csrf_token_days
        self.login_path = login_path
        self.timeout = timeout if timeout is not None else httpx.Timeout(30.0, connect=10.0)
        self._transport = transport
        # Replaced clients that still have requests in flight
        self._retired: List[httpx.AsyncClient] = []
        self._in_flight: Dict[httpx.AsyncClient, int] = {}
        self._closing: Set[asyncio.Task] = set()

        self.base_url = base_url.rstrip("/")
        # Outlives base URL changes so an in-flight refresh is never dropped
        self.refresher = TokenRefresher(
            self.store,
            self._open_bare_client,
            refresh_url,
            remember_days=remember_days,
            secure=self.secure,
        )
        self._http, self.csrf = self._build_http()

    @classmethod
    def from_settings(
        cls,
        store: Optional[CredentialStore] = None,
        navigator: Optional[Navigator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AuthenticatedHttpClient":
        """Build a client configured from settings (environment / .env)"""
        import settings

        return cls(
            settings.API_BASE_URL,
            store,
            navigator=navigator,
            transport=transport,
            refresh_url=settings.REFRESH_URL,
            csrf_url=settings.CSRF_URL,
            csrf_header_name=settings.CSRF_HEADER_NAME,
            remember_days=settings.REMEMBER_DAYS,
            csrf_token_days=settings.CSRF_TOKEN_DAYS,
            login_path=settings.LOGIN_PATH,
            timeout=httpx.Timeout(settings.REQUEST_TIMEOUT, connect=settings.CONNECT_TIMEOUT),
        )

    @property
    def secure(self) -> bool:
        """Credentials are HTTPS-only when the backend is served over HTTPS"""
        return self.base_url.lower().startswith("https:")

    def _build_http(self):
        csrf = CsrfTokenFetcher(
            self.store,
            self._open_bare_client,
            self.csrf_url,
            header_name=self.csrf_header_name,
            token_days=self.csrf_token_days,
            secure=self.secure,
        )
        # Redirects are not followed, the hook only ever sees the requested origin
        http = httpx.AsyncClient(
            base_url=self.base_url,
            transport=self._transport,
            timeout=self.timeout,
            event_hooks={"request": [partial(decorate_request, self, csrf)]},
        )
        return http, csrf

    @asynccontextmanager
    async def _open_bare_client(self) -> AsyncIterator[httpx.AsyncClient]:
        """Client without hooks for the refresh and CSRF endpoints"""
        client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=self._transport,
            timeout=self.timeout,
        )
        try:
            yield client
        finally:
            # An injected transport belongs to the caller
            if self._transport is None:
                await client.aclose()

    def set_base_url(self, url: str) -> None:
        """Point the client at another backend

        Rebuilds the transport client with the same hooks and a clean CSRF
        cache. Requests already in flight finish on the old client, which is
        closed once the last of them completes.
        """
        self.base_url = url.rstrip("/")
        self.refresher.secure = self.secure
        old = self._http
        self._http, self.csrf = self._build_http()
        if self._in_flight.get(old):
            self._retired.append(old)
        else:
            self._close_later(old)
        logger.info(f"Base URL set to {self.base_url}")

    def _close_later(self, http: httpx.AsyncClient) -> None:
        if self._transport is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop yet; closed by the next finished request or aclose()
            self._retired.append(http)
            return
        task = loop.create_task(http.aclose())
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def _close_idle_retired(self) -> None:
        idle = [c for c in self._retired if not self._in_flight.get(c)]
        if not idle:
            return
        self._retired = [c for c in self._retired if self._in_flight.get(c)]
        logger.debug(f"Releasing {len(idle)} retired transport client(s)")
        if self._transport is None:
            for client in idle:
                await client.aclose()

    def is_token_endpoint(self, url: str) -> bool:
        """True for the refresh and CSRF endpoints, which never carry a CSRF header"""
        return self.csrf_url in url or self.refresh_url in url

    async def refresh_access_token(self) -> Optional[str]:
        """Refresh the access token; concurrent callers share one request"""
        return await self.refresher.refresh_access_token()

    async def fetch_csrf_token_once(self) -> Optional[CsrfToken]:
        """Get the CSRF token, fetching it at most once at a time"""
        return await self.csrf.fetch_once()

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        query: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        data: Any = None,
        files: Any = None,
        content: Any = None,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
        credentials: Optional[str] = None,
    ) -> Any:
        """Send a request and return the decoded response body

        Raises:
            ApiError: On transport failure or any non-2xx final response
        """
        context = RequestContext(
            method=method.upper(),
            url=path,
            headers=httpx.Headers(headers or {}),
            params={k: v for k, v in query.items() if v is not None} if query else None,
            json=json,
            data=data,
            files=files,
            content=content,
            timeout=timeout,
            credentials=credentials,
        )
        response = await self._dispatch(context)
        return read_body(response)

    async def _send(self, context: RequestContext) -> httpx.Response:
        http = self._http
        self._in_flight[http] = self._in_flight.get(http, 0) + 1
        try:
            return await http.send(context.build_request(http))
        except httpx.RequestError as e:
            logger.debug(f"{context.method} {context.url} failed: {e}")
            raise ApiError.from_transport_error(e) from e
        finally:
            remaining = self._in_flight[http] - 1
            if remaining:
                self._in_flight[http] = remaining
            else:
                del self._in_flight[http]
                if self._retired:
                    await self._close_idle_retired()

    def _should_attempt_refresh(self, context: RequestContext, status: int) -> bool:
        return (
            status in AUTH_FAILURE_STATUSES
            and not context.retried
            and self.refresh_url not in context.url
        )

    async def _dispatch(self, context: RequestContext) -> httpx.Response:
        response = await self._send(context)
        if response.is_success:
            return response

        if self._should_attempt_refresh(context, response.status_code):
            # At most one refresh-triggered retry per logical request
            context.retried = True
            new_access = await self.refresh_access_token()
            if new_access:
                context.headers["Authorization"] = f"Bearer {new_access}"
                return await self._dispatch(context)
            self._end_session()

        raise ApiError.from_response(response)

    def _end_session(self) -> None:
        """Drop credentials and go to the login page after an unrecoverable auth failure"""
        for name in (ACCESS_TOKEN, REFRESH_TOKEN, AUTH_TOKEN, REMEMBER_ME):
            self.store.delete(name)
        logger.warning("Session could not be refreshed, credentials cleared")
        if self.navigator is not None:
            redirect_to_login(self.navigator, self.login_path)

    async def get(self, path: str, **options) -> Any:
        return await self.request("GET", path, **options)

    async def post(self, path: str, **options) -> Any:
        return await self.request("POST", path, **options)

    async def put(self, path: str, **options) -> Any:
        return await self.request("PUT", path, **options)

    async def patch(self, path: str, **options) -> Any:
        return await self.request("PATCH", path, **options)

    async def delete(self, path: str, **options) -> Any:
        return await self.request("DELETE", path, **options)

    async def aclose(self) -> None:
        """Close the transport clients this instance created"""
        clients = self._retired + [self._http]
        self._retired = []
        if self._closing:
            await asyncio.gather(*self._closing)
        if self._transport is not None:
            return
        for client in clients:
            await client.aclose()

    async def __aenter__(self) -> "AuthenticatedHttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
