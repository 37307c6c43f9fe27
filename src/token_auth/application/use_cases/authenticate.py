from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping

from ..scheduler import RefreshScheduler
from ...adapters.jwt.decoder import token_data_from_response
from ...config.settings import TokenAuthSettings
from ...domain.constants import PASSWORD_FIELD
from ...domain.entities import SessionProperties
from ...domain.exceptions import ServerRejectedError, TransportError
from ...domain.ports import TokenDecoder, Transport
from ...domain.value_objects import Credentials
from ...utils.urls import is_secure_url

logger = logging.getLogger(__name__)

INSECURE_TRANSPORT_WARNING = (
    "Credentials are transmitted via an insecure connection - use HTTPS to keep them secure."
)


@dataclass(slots=True)
class AuthenticateCredentialsUseCase:
    """
    Application use case:
    - POST credentials to the token endpoint via the Transport port
    - decode the returned token via the TokenDecoder port
    - arm the refresh scheduler for the token's expiry

    Resolves with the server response, which becomes the session properties.
    """

    settings: TokenAuthSettings
    transport: Transport
    token_decoder: TokenDecoder
    scheduler: RefreshScheduler
    clock: Callable[[], float] = field(default=time.time)

    async def execute(self, credentials: Credentials | Mapping[str, Any]) -> SessionProperties:
        """
        Exchange credentials for a token.

        Raises:
            ServerRejectedError
            MalformedTokenError
        """
        if not isinstance(credentials, Credentials):
            credentials = Credentials.from_mapping(credentials)

        url = self.settings.server_token_endpoint
        if not is_secure_url(url, self.settings.base_url):
            logger.warning(INSECURE_TRANSPORT_WARNING)

        data = self.get_authenticate_data(credentials)
        try:
            response = await self.transport.send(url, data)
        except TransportError as exc:
            raise ServerRejectedError(exc.payload, status_code=exc.status_code) from exc

        token_data = token_data_from_response(
            response,
            decoder=self.token_decoder,
            token_property_name=self.settings.token_property_name,
            token_expire_field_name=self.settings.token_expire_field_name,
            now=self.clock,
        )
        self.scheduler.schedule(token_data.expires_in, token_data.expires_at, token_data.token)

        logger.info("Authenticated %r against %s", credentials.identification, url)
        return self.get_response_data(response)

    def get_authenticate_data(self, credentials: Credentials) -> Dict[str, Any]:
        """Request body: identification under the configured field name, plus password."""
        return {
            self.settings.identification_field: credentials.identification,
            PASSWORD_FIELD: credentials.password,
        }

    def get_response_data(self, response: Mapping[str, Any]) -> SessionProperties:
        """What the session stores; the full response unless overridden."""
        return dict(response)
