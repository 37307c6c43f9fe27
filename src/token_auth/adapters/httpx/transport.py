from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from ...domain.exceptions import TransportError
from ...domain.ports import Transport

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Accept": "application/json"}


class HttpxTransport(Transport):
    """
    Async transport built on httpx.

    - POSTs JSON bodies with `Accept: application/json`
    - raises TransportError on network failures and non-2xx responses
    - owns its AsyncClient unless one is injected
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or "",
            timeout=timeout,
            verify=verify_ssl,
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def send(self, url: str, body: Mapping[str, Any]) -> Mapping[str, Any]:
        try:
            resp = await self._client.post(url, json=dict(body), headers=JSON_HEADERS)
        except httpx.RequestError as exc:
            logger.debug("POST %s failed before a response arrived: %s", url, exc)
            raise TransportError(f"Request to {url} failed: {exc}", response_text=str(exc)) from exc

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"{e.response.status_code} {e.response.reason_phrase}",
                status_code=e.response.status_code,
                response_json=_json_or_none(e.response),
                response_text=e.response.text,
            ) from e

        payload = _json_or_none(resp)
        if not isinstance(payload, dict):
            raise TransportError(
                f"Expected a JSON object from {url}",
                status_code=resp.status_code,
                response_text=resp.text,
            )
        return payload


def _json_or_none(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None
