"""
token_auth

Asyncio token-based session authenticator: exchanges credentials for a
bearer token, restores persisted sessions and keeps the token refreshed
ahead of its expiry.
"""

__version__ = "0.1.0"

from .config.settings import TokenAuthSettings
from .config.env import settings_from_env
from .domain.entities import SessionProperties, TokenData
from .domain.exceptions import (
    TokenAuthError,
    ConfigurationError,
    TransportError,
    AuthenticationError,
    EmptySessionError,
    ServerRejectedError,
    MalformedTokenError,
    RefreshFailedError,
)
from .domain.value_objects import Credentials, ScheduledRefresh
from .domain.ports import TokenDecoder, Transport

from .application.scheduler import RefreshScheduler
from .application.use_cases.restore import RestoreSessionUseCase
from .application.use_cases.authenticate import AuthenticateCredentialsUseCase
from .application.use_cases.refresh import RefreshTokenUseCase

from .adapters.jwt.decoder import UnverifiedJWTDecoder
from .adapters.httpx.transport import HttpxTransport

from .integrations.common.authenticator import TokenAuthenticator, create_token_authenticator
from .utils.urls import is_secure_url

__all__ = [
    "__version__",
    # config
    "TokenAuthSettings",
    "settings_from_env",
    # domain core
    "SessionProperties",
    "TokenData",
    "Credentials",
    "ScheduledRefresh",
    "TokenDecoder",
    "Transport",
    # exceptions
    "TokenAuthError",
    "ConfigurationError",
    "TransportError",
    "AuthenticationError",
    "EmptySessionError",
    "ServerRejectedError",
    "MalformedTokenError",
    "RefreshFailedError",
    # application
    "RefreshScheduler",
    "RestoreSessionUseCase",
    "AuthenticateCredentialsUseCase",
    "RefreshTokenUseCase",
    # adapters
    "UnverifiedJWTDecoder",
    "HttpxTransport",
    # facade
    "TokenAuthenticator",
    "create_token_authenticator",
    "is_secure_url",
]
