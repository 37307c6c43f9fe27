from __future__ import annotations

from typing import Generator

import httpx

from ..common.authenticator import TokenAuthenticator


class SessionBearerAuth(httpx.Auth):
    """
    httpx auth flow that sends the authenticator's current bearer token.

    The token is read per request, so a background refresh is picked up
    without rebuilding the client.

        auth = SessionBearerAuth(authenticator)
        async with httpx.AsyncClient(auth=auth) as client:
            await client.get("https://api.example.com/me")
    """

    def __init__(self, authenticator: TokenAuthenticator) -> None:
        self._authenticator = authenticator

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers.update(self._authenticator.authorization_header())
        yield request
