"""
HTTP client for the LFDC backend.

One ``ApiClient`` is kept per chat: its cookie jar carries the session cookie
the backend sets on login/signup, so every request made through it is
authenticated as that chat's user.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Backend request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiUnavailable(ApiError):
    """Backend could not be reached (network error or timeout)."""


class ApiClient:
    """Pre-configured async client bound to the backend base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url.endswith("/"):
            base_url += "/"
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Sends a request and returns the decoded JSON body.

        Raises:
            ApiUnavailable: transport failure or timeout
            ApiError: any non-2xx response
        """
        # Paths are always relative to the API base
        path = path.lstrip("/")
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.TimeoutException as e:
            logger.error("%s %s timed out", method, path)
            raise ApiUnavailable("Request timed out") from e
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise ApiUnavailable(str(e) or "Network error") from e

        if response.is_error:
            message = _error_message(response)
            logger.error("%s %s -> %s: %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str, json: Any = None) -> Any:
        # cart/remove takes its selector in the DELETE body
        return await self.request("DELETE", path, json=json)

    async def close(self) -> None:
        await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    """Extracts the backend ``message`` field, falling back to the status text."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("message", "error", "detail"):
            if isinstance(data.get(key), str) and data[key]:
                return data[key]
    return response.reason_phrase or f"HTTP {response.status_code}"
