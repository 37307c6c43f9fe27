from __future__ import annotations

import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

import httpx

from ...adapters.httpx.transport import HttpxTransport
from ...adapters.jwt.decoder import UnverifiedJWTDecoder, token_data_from_response
from ...application.scheduler import RefreshScheduler
from ...application.use_cases.authenticate import AuthenticateCredentialsUseCase
from ...application.use_cases.refresh import RefreshTokenUseCase
from ...application.use_cases.restore import RestoreSessionUseCase
from ...config.settings import TokenAuthSettings
from ...domain.entities import SessionProperties, is_empty
from ...domain.exceptions import RefreshFailedError
from ...domain.ports import TokenDecoder, Transport
from ...domain.value_objects import Credentials, ScheduledRefresh

logger = logging.getLogger(__name__)

SessionCallback = Callable[[SessionProperties], Union[None, Awaitable[None]]]


class TokenAuthenticator:
    """
    Framework-agnostic session authenticator facade.

    Session hosts call restore / authenticate / invalidate and await them;
    the token refresh cycle runs on its own once a session has an expiring
    token. `session` always holds the latest properties, and
    `on_session_refreshed` is called whenever a refresh replaces them so the
    host can persist the new token.
    """

    def __init__(
        self,
        settings: TokenAuthSettings,
        transport: Transport,
        *,
        token_decoder: Optional[TokenDecoder] = None,
        clock: Callable[[], float] = time.time,
        on_session_refreshed: Optional[SessionCallback] = None,
    ) -> None:
        self.settings = settings
        self.transport = transport
        self.token_decoder = token_decoder or UnverifiedJWTDecoder()
        self.on_session_refreshed = on_session_refreshed
        self._clock = clock
        self._session: Optional[SessionProperties] = None

        self.scheduler = RefreshScheduler(
            refresh_access_tokens=settings.refresh_access_tokens,
            refresh_ratio=settings.refresh_ratio,
            inert=settings.inert_timers,
            clock=clock,
        )
        self.scheduler.bind(self.refresh_access_token)

        self.restore_use_case = RestoreSessionUseCase(
            token_property_name=settings.token_property_name,
        )
        self.authenticate_use_case = AuthenticateCredentialsUseCase(
            settings=settings,
            transport=transport,
            token_decoder=self.token_decoder,
            scheduler=self.scheduler,
            clock=clock,
        )
        self.refresh_use_case = RefreshTokenUseCase(
            settings=settings,
            transport=transport,
            token_decoder=self.token_decoder,
            scheduler=self.scheduler,
            clock=clock,
        )

    async def __aenter__(self) -> "TokenAuthenticator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.scheduler.aclose()
        close = getattr(self.transport, "close", None)
        if close is not None:
            await close()

    # --- Session state ----------------------------------------------------

    @property
    def session(self) -> Optional[SessionProperties]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def token(self) -> Optional[str]:
        if self._session is None:
            return None
        return self._session.get(self.settings.token_property_name) or None

    def authorization_header(self) -> dict[str, str]:
        """`Authorization: Bearer <token>` for the current session, or {}."""
        token = self.token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    # --- Core operations --------------------------------------------------

    async def restore(self, properties: Mapping[str, Any]) -> SessionProperties:
        """Raises EmptySessionError when the properties hold no token."""
        restored = self.restore_use_case.execute(properties)
        # the previous session's refresh cycle must not touch this one
        self.scheduler.stop()
        self._session = restored
        return restored

    async def authenticate(self, credentials: Credentials | Mapping[str, Any]) -> SessionProperties:
        """Raises ServerRejectedError / MalformedTokenError."""
        self.scheduler.stop()
        session = await self.authenticate_use_case.execute(credentials)
        self._session = session
        return session

    async def invalidate(self, properties: Optional[Mapping[str, Any]] = None) -> None:
        """Always succeeds. Cancels any armed refresh and forgets the session."""
        self.scheduler.stop()
        self._session = None

    async def refresh_access_token(self, expires_in: Optional[float], token: str) -> Mapping[str, Any]:
        """
        Run one refresh cycle and return the raw refresh response.

        Only the current session's token can be refreshed; a refresh that
        lands after the session was replaced or invalidated changes nothing.

        Raises RefreshFailedError / MalformedTokenError.
        """
        if self._session is not None and token != self.token:
            logger.warning("Refusing to refresh a token that no longer belongs to the session")
            raise RefreshFailedError("Token is not the current session token")

        with self.scheduler.guard():
            result = await self.refresh_use_case.execute(expires_in, token)
            if self.scheduler.superseded or self._session is None or token != self.token:
                return result.response

            session = dict(self._session)
            session.update(result.response)
            session[self.settings.token_property_name] = result.token_data.token
            self._session = session

        if self.on_session_refreshed is not None:
            outcome = self.on_session_refreshed(session)
            if inspect.isawaitable(outcome):
                await outcome
        return result.response

    def resume_refresh(self, properties: Optional[Mapping[str, Any]] = None) -> Optional[ScheduledRefresh]:
        """
        Arm the refresh cycle for a restored session.

        Restore itself never schedules anything; call this when a restored
        session should be kept alive as well.
        """
        properties = properties if properties is not None else self._session
        if not properties or is_empty(properties.get(self.settings.token_property_name)):
            return None
        token_data = token_data_from_response(
            properties,
            decoder=self.token_decoder,
            token_property_name=self.settings.token_property_name,
            token_expire_field_name=self.settings.token_expire_field_name,
            now=self._clock,
        )
        return self.scheduler.schedule(token_data.expires_in, token_data.expires_at, token_data.token)


def create_token_authenticator(
        settings: Optional[TokenAuthSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[Transport] = None,
        clock: Callable[[], float] = time.time,
        on_session_refreshed: Optional[SessionCallback] = None,
) -> TokenAuthenticator:
    """
    High-level factory: settings -> TokenAuthenticator.

    - builds an HttpxTransport (unless a transport is given)
    - wires the scheduler and the restore / authenticate / refresh use cases
    """
    settings = settings or TokenAuthSettings()
    if transport is None:
        transport = HttpxTransport(
            base_url=settings.base_url,
            timeout=settings.timeout,
            verify_ssl=settings.verify_ssl,
            client=client,
        )
    return TokenAuthenticator(
        settings,
        transport,
        clock=clock,
        on_session_refreshed=on_session_refreshed,
    )
