"""
token_auth.config

- TokenAuthSettings: immutable authenticator configuration.
- settings_from_env: build settings from TOKEN_AUTH_* environment variables.
"""

from __future__ import annotations

from .env import settings_from_env
from .settings import TokenAuthSettings

__all__ = [
    "TokenAuthSettings",
    "settings_from_env",
]
