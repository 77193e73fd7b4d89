"""Errors raised by the admin API client"""

from typing import Any, Optional

import httpx

from .parsing import MESSAGE_PATHS, first_string


class ApiError(Exception):
    """A failed API call, normalized for display

    Attributes:
        message: Server supplied message, or a generic fallback
        status: HTTP status code, None for transport failures
        data: Raw response body (decoded JSON when possible)
    """

    def __init__(self, message: str, status: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (status={self.status})"

    @property
    def is_auth_error(self) -> bool:
        return self.status in (401, 403)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        """Build an error from a non-2xx response"""
        status = response.status_code
        data = read_body(response)
        # Status codes without a registered reason phrase (e.g. 599) get the short form
        message = (
            first_string(data, MESSAGE_PATHS)
            or (f"Request failed with status code {status}" if response.reason_phrase else None)
            or f"Request failed with {status}"
        )
        return cls(message, status=status, data=data)

    @classmethod
    def from_transport_error(cls, error: httpx.RequestError) -> "ApiError":
        """Build an error for a request that never got a response"""
        detail = str(error) or error.__class__.__name__
        return cls(f"Network error: {detail}", status=None, data=None)


def read_body(response: httpx.Response) -> Any:
    """Decode a response body: JSON when it parses, text otherwise, None when empty"""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
