# src/token_auth/domain/value_objects.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True, slots=True)
class Credentials:
    """
    User supplied identification + password.

    The identification is sent under whatever field name the settings
    configure (``username`` by default).
    """
    identification: str
    password: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Credentials":
        missing = [k for k in ("identification", "password") if k not in data]
        if missing:
            raise ValueError(f"Missing credential fields: {', '.join(missing)}")
        return cls(identification=data["identification"], password=data["password"])

    def __repr__(self) -> str:
        return f"Credentials(identification={self.identification!r}, password='***')"


@dataclass(frozen=True, slots=True)
class ScheduledRefresh:
    """
    The single pending refresh.

    - wait_ms:    delay before the refresh call fires
    - expires_in: TTL in seconds handed to the refresh call
    - expires_at: absolute expiry, epoch milliseconds
    - token:      token that will be exchanged
    """
    wait_ms: int
    expires_in: Optional[float]
    expires_at: int
    token: str

    @property
    def wait_seconds(self) -> float:
        return self.wait_ms / 1000
