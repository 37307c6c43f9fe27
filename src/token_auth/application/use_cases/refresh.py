from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from .authenticate import INSECURE_TRANSPORT_WARNING
from ..scheduler import RefreshScheduler
from ...adapters.jwt.decoder import token_data_from_response
from ...config.settings import TokenAuthSettings
from ...domain.entities import TokenData
from ...domain.exceptions import RefreshFailedError, TransportError
from ...domain.ports import TokenDecoder, Transport
from ...utils.urls import is_secure_url

logger = logging.getLogger(__name__)

# The refresh endpoint always receives the token under this key
REFRESH_TOKEN_FIELD = "token"


@dataclass(slots=True)
class RefreshResult:
    response: Mapping[str, Any]
    token_data: TokenData


@dataclass(slots=True)
class RefreshTokenUseCase:
    """
    Application use case:
    - POST {"token": <token>} to the refresh endpoint
    - decode the new token (falling back to the previous token / TTL)
    - re-arm the scheduler from "now" with the new TTL

    A failed refresh is logged and raised; nothing is re-armed.
    """

    settings: TokenAuthSettings
    transport: Transport
    token_decoder: TokenDecoder
    scheduler: RefreshScheduler
    clock: Callable[[], float] = field(default=time.time)

    async def execute(self, expires_in: Optional[float], token: str) -> RefreshResult:
        """
        Raises:
            RefreshFailedError
            MalformedTokenError
        """
        url = self.settings.server_token_refresh_endpoint
        if not is_secure_url(url, self.settings.base_url):
            logger.warning(INSECURE_TRANSPORT_WARNING)

        try:
            response = await self.transport.send(url, {REFRESH_TOKEN_FIELD: token})
        except TransportError as exc:
            logger.warning(
                "Access token could not be refreshed - server responded with %s.", exc
            )
            raise RefreshFailedError(f"Token refresh failed: {exc}", payload=exc.payload) from exc

        token_data = token_data_from_response(
            response,
            decoder=self.token_decoder,
            token_property_name=self.settings.token_property_name,
            token_expire_field_name=self.settings.token_expire_field_name,
            now=self.clock,
            fallback_token=token,
        )
        if token_data.expires_in is None:
            token_data.expires_in = expires_in

        # no expires_at: the scheduler recomputes it from now
        self.scheduler.schedule(token_data.expires_in, None, token_data.token)

        logger.info("Access token refreshed")
        return RefreshResult(response=response, token_data=token_data)
