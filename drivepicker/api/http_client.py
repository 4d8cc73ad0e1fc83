"""Authenticated async HTTP client for the indexing API."""

from __future__ import annotations

import httpx
import loguru

from .. import __version__
from ..errors import ApiError

REQUEST_TIMEOUT_SECONDS = 10.0


class HttpClient:
    """Thin wrapper over ``httpx.AsyncClient`` adding bearer auth and error mapping.

    Non-2xx responses raise :class:`ApiError`. Responses with no JSON body
    (204, empty, or another content type) return ``None``.
    """

    def __init__(
        self,
        access_token: str,
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "*/*",
                "User-Agent": f"drivepicker/{__version__}",
                "Content-Type": "application/json",
            },
        )

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json: object = None,
    ) -> object:
        loguru.logger.debug(f"{method} {url}")
        response = await self._client.request(method, url, params=params, json=json)
        if response.is_error:
            raise ApiError(response.status_code, response.reason_phrase, str(response.url), response.text)

        content_type = response.headers.get("content-type", "")
        if response.status_code == 204 or not response.content or "application/json" not in content_type:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["REQUEST_TIMEOUT_SECONDS", "HttpClient"]
