"""Minimal asynchronous REST client."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import aiohttp

from ..errors.internal import HttpStatusError, NetworkError

if TYPE_CHECKING:
    from .interceptor import ReauthInterceptor


def bearer(token: str) -> str:
    return f"Bearer {token}"


@dataclass
class ApiRequest:
    """A request as handed to the interceptor; headers may be rewritten."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] | None = None
    json: Any = None


@dataclass
class ApiResponse:
    """Decoded API response.

    Attributes:
        status: HTTP status code.
        data: Parsed JSON body, raw text when not JSON, or None when empty.
        headers: Response headers.
    """

    status: int
    data: Any
    headers: dict[str, str] = field(default_factory=dict)


async def read_body(resp: aiohttp.ClientResponse) -> Any:
    """Return the JSON body, falling back to text for non-JSON payloads."""
    if resp.status == 204:
        return None
    text = await resp.text()
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


class HttpTransport:
    """Sends :class:`ApiRequest` objects through the interceptor.

    When the interceptor reauthenticates, the refreshed token becomes the
    client's default ``Authorization`` header so later calls do not start
    stale. Per-call header overrides never change the defaults.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        headers: dict[str, str],
        interceptor: ReauthInterceptor,
    ) -> None:
        if not session:
            raise ValueError("aiohttp session required")
        self._session = session
        self.headers = dict(headers)
        self.interceptor = interceptor

    async def execute(self, request: ApiRequest) -> ApiResponse:
        return await self.interceptor.execute(
            self.send, request, on_token=self._adopt_token
        )

    def _adopt_token(self, token: str) -> None:
        self.headers["Authorization"] = bearer(token)

    async def send(self, request: ApiRequest) -> ApiResponse:
        """Issue one HTTP request, raising on non-success status.

        Raises:
            HttpStatusError: Non-success status.
            NetworkError: Transport failure or timeout.
        """
        try:
            async with self._session.request(
                request.method,
                request.url,
                headers=request.headers,
                params=request.params,
                json=request.json,
            ) as resp:
                logging.debug(
                    f"🌐 API response: method={request.method} status={resp.status} url={request.url}"
                )
                body = await read_body(resp)
                if resp.status < 200 or resp.status >= 300:
                    raise HttpStatusError(
                        resp.status,
                        f"{request.method} {request.url} failed with HTTP {resp.status}",
                        body=body,
                    )
                return ApiResponse(resp.status, body, dict(resp.headers))
        except TimeoutError as e:
            raise NetworkError(f"{request.method} {request.url} timed out") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Network error during {request.method} {request.url}: {e}") from e

class RestClient(HttpTransport):
    """REST client bound to a base URL.

    Example:
        >>> resp = await clients.rest.get("/repos/octo/hello/issues", params={"state": "open"})
        >>> resp.data[0]["number"]
        42
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        headers: dict[str, str],
        interceptor: ReauthInterceptor,
    ) -> None:
        super().__init__(session, headers, interceptor)
        self.base_url = base_url.rstrip("/")

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> ApiResponse:
        """Perform a request against ``base_url + path``.

        Raises:
            HttpStatusError: Non-success status (after one reauth retry for 401/403).
            RefreshError: Reauthentication was needed and failed.
        """
        url = path if path.startswith(("http://", "https://")) else f"{self.base_url}/{path.lstrip('/')}"
        request = ApiRequest(
            method.upper(),
            url,
            headers={**self.headers, **(headers or {})},
            params=params,
            json=json,
        )
        return await self.execute(request)

    async def get(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("PATCH", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", path, **kwargs)
