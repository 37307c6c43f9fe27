from __future__ import annotations

from typing import Protocol, Mapping, Any


class TokenDecoder(Protocol):
    """
    Port for decoding a bearer token into claims.

    Implementations live in the adapters layer (e.g. the unverified JWT
    payload decoder).
    """

    def decode(self, token: str) -> Mapping[str, Any]:
        """
        Decode the given token's payload.

        Raises:
          - MalformedTokenError
        """
        ...


class Transport(Protocol):
    """
    Port for the HTTP collaborator.

    Always POST, JSON encoded body, `Accept: application/json`, JSON response.
    """

    async def send(self, url: str, body: Mapping[str, Any]) -> Mapping[str, Any]:
        """
        Send `body` to `url` and return the decoded JSON response.

        Raises:
          - TransportError on network failure or non-2xx status
        """
        ...
