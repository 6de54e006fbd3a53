"""Ignite REST API client."""

from __future__ import annotations

from typing import Any

import httpx
import msgspec

from .errors import IgniteApiError
from .types import IgniteAuthResponse, IgniteMessage, IgniteUser

ME_PATH = "/v1/@me"
AUTH_PATH = "/v1/broadcasting/auth"


def _message_path(channel_id: str) -> str:
    return f"/v1/channels/{channel_id}/messages"


class IgniteRestClient:
    """Thin async wrapper around the Ignite control plane.

    Every failure (transport error, non-2xx status, unexpected body) is
    raised as IgniteApiError.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> IgniteRestClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self, method: str, path: str, *, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            raise IgniteApiError(f"{method} {path} failed: {exc}") from exc
        if response.is_error:
            raise IgniteApiError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response, tp: type[Any]) -> Any:
        try:
            return msgspec.json.decode(response.content, type=tp)
        except msgspec.DecodeError as exc:
            raise IgniteApiError(
                f"unexpected body from {response.request.url.path}: {exc}",
                status_code=response.status_code,
            ) from exc

    async def get_me(self) -> IgniteUser:
        response = await self._request("GET", ME_PATH)
        return self._decode(response, IgniteUser)

    async def broadcasting_auth(self, channel_name: str, socket_id: str) -> str:
        """Sign a private channel subscription, returning the ``auth`` token."""
        response = await self._request(
            "POST",
            AUTH_PATH,
            json={"channel_name": channel_name, "socket_id": socket_id},
        )
        data: IgniteAuthResponse = self._decode(response, IgniteAuthResponse)
        if not data.auth:
            raise IgniteApiError("No auth token returned from Ignite")
        return data.auth

    async def send_message(self, channel_id: str, content: str) -> IgniteMessage:
        response = await self._request(
            "POST", _message_path(channel_id), json={"content": content}
        )
        return self._decode(response, IgniteMessage)
