import inspect
import math
from typing import Callable, Dict, List, Optional, Tuple

import httpx
from fastapi import FastAPI, Header
from fastapi.responses import JSONResponse

BASE_URL = "http://admin.test"


class FakeBackend:
    """Scripted backend for httpx.MockTransport that records every request"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], Callable] = {}

    def route(self, method: str, path: str, handler: Callable) -> None:
        self.routes[(method.upper(), path)] = handler

    def calls(self, path: str, method: Optional[str] = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.url.path == path and (method is None or r.method == method.upper())
        ]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})
        result = handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result


def build_stub_app(users: List[dict], permissions: List[dict]) -> FastAPI:
    """Minimal admin backend: token refresh, CSRF, users and permissions"""
    app = FastAPI()
    app.state.access_token = "access-2"
    app.state.refresh_token = "refresh-1"
    app.state.csrf_token = "csrf-abc"
    app.state.refresh_calls = 0
    app.state.contact_messages = []

    def authorized(authorization):
        return authorization == f"Bearer {app.state.access_token}"

    def unauthorized():
        return JSONResponse(status_code=401, content={"message": "Token expired"})

    @app.post("/api/admin/auth/refresh-token")
    async def refresh_token(authorization: Optional[str] = Header(None)):
        app.state.refresh_calls += 1
        if authorization != f"Bearer {app.state.refresh_token}":
            return JSONResponse(status_code=401, content={"message": "Invalid refresh token"})
        app.state.refresh_token = "refresh-2"
        return {
            "success": True,
            "data": {"accessToken": app.state.access_token, "refreshToken": app.state.refresh_token},
        }

    @app.get("/api/auth/csrf")
    async def csrf():
        return {"data": {"token": app.state.csrf_token}}

    @app.get("/api/users/get-all")
    async def get_users(pageNumber: int = 0, pageSize: int = 10, authorization: Optional[str] = Header(None)):
        if not authorized(authorization):
            return unauthorized()
        chunk = users[pageNumber * pageSize:(pageNumber + 1) * pageSize]
        total_pages = max(1, math.ceil(len(users) / pageSize))
        return {
            "content": chunk,
            "pageNumber": pageNumber,
            "pageSize": pageSize,
            "totalElements": len(users),
            "totalPages": total_pages,
            "numberOfElements": len(chunk),
            "firstPage": pageNumber == 0,
            "lastPage": pageNumber >= total_pages - 1,
        }

    @app.get("/api/permissions/me")
    async def my_permissions(authorization: Optional[str] = Header(None)):
        if not authorized(authorization):
            return unauthorized()
        return {"success": True, "data": permissions}

    @app.post("/api/contact-us")
    async def contact_us(
        payload: dict,
        authorization: Optional[str] = Header(None),
        x_xsrf_token: Optional[str] = Header(None),
    ):
        if not authorized(authorization):
            return unauthorized()
        if x_xsrf_token != app.state.csrf_token:
            return JSONResponse(status_code=419, content={"message": "CSRF token mismatch"})
        app.state.contact_messages.append(payload)
        return {"success": True, "message": "Query submitted"}

    return app


