from __future__ import annotations

import os
from typing import Any

from .settings import TokenAuthSettings
from ..domain.exceptions import ConfigurationError

ENV_PREFIX = "TOKEN_AUTH_"


def settings_from_env(**overrides: Any) -> TokenAuthSettings:
    """
    Build TokenAuthSettings from TOKEN_AUTH_* environment variables.

    Unset variables keep the dataclass defaults; keyword overrides win over
    the environment.
    """
    def _raw(key: str) -> str | None:
        raw = os.getenv(ENV_PREFIX + key)
        if raw is None or not raw.strip():
            return None
        return raw.strip()

    def _bool(key: str) -> bool | None:
        raw = _raw(key)
        if raw is None:
            return None
        return raw.lower() in {"1", "true", "yes", "on"}

    def _float(key: str) -> float | None:
        raw = _raw(key)
        if raw is None:
            return None
        try:
            return float(raw)
        except ValueError as exc:
            raise ConfigurationError(f"{ENV_PREFIX}{key} must be a number, got {raw!r}") from exc

    values: dict[str, Any] = {
        "server_token_endpoint": _raw("SERVER_TOKEN_ENDPOINT"),
        "server_token_refresh_endpoint": _raw("SERVER_TOKEN_REFRESH_ENDPOINT"),
        "identification_field": _raw("IDENTIFICATION_FIELD"),
        "token_property_name": _raw("TOKEN_PROPERTY_NAME"),
        "token_expire_field_name": _raw("TOKEN_EXPIRE_FIELD_NAME"),
        "refresh_access_tokens": _bool("REFRESH_ACCESS_TOKENS"),
        "refresh_ratio": _float("REFRESH_RATIO"),
        "inert_timers": _bool("INERT_TIMERS"),
        "base_url": _raw("BASE_URL"),
        "timeout": _float("TIMEOUT"),
        "verify_ssl": _bool("VERIFY_SSL"),
    }
    kwargs = {k: v for k, v in values.items() if v is not None}
    kwargs.update(overrides)
    return TokenAuthSettings(**kwargs)
