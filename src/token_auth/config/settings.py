from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..domain.constants import (
    DEFAULT_IDENTIFICATION_FIELD,
    DEFAULT_REFRESH_ENDPOINT,
    DEFAULT_REFRESH_RATIO,
    DEFAULT_TOKEN_ENDPOINT,
    DEFAULT_TOKEN_EXPIRE_FIELD_NAME,
    DEFAULT_TOKEN_PROPERTY_NAME,
)
from ..domain.exceptions import ConfigurationError


@dataclass(frozen=True, slots=True)
class TokenAuthSettings:
    """
    Token authenticator configuration.

    Fixed at construction; host code decides how to build it (env, config
    file, etc.).
    """
    server_token_endpoint: str = DEFAULT_TOKEN_ENDPOINT
    server_token_refresh_endpoint: str = DEFAULT_REFRESH_ENDPOINT
    identification_field: str = DEFAULT_IDENTIFICATION_FIELD
    token_property_name: str = DEFAULT_TOKEN_PROPERTY_NAME
    token_expire_field_name: str = DEFAULT_TOKEN_EXPIRE_FIELD_NAME
    refresh_access_tokens: bool = True

    # Refresh fires after this fraction of the token's TTL has elapsed
    refresh_ratio: float = DEFAULT_REFRESH_RATIO

    # Record scheduled refreshes without creating real timers (test suites)
    inert_timers: bool = False

    # Transport wiring
    base_url: Optional[str] = None
    timeout: float = 30.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        if not 0 < self.refresh_ratio <= 1:
            raise ConfigurationError(
                f"refresh_ratio must be in (0, 1], got {self.refresh_ratio!r}"
            )
        for name in ("identification_field", "token_property_name", "token_expire_field_name"):
            if not getattr(self, name):
                raise ConfigurationError(f"{name} must not be empty")
