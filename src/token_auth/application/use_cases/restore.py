from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ...domain.entities import SessionProperties, has_token
from ...domain.exceptions import EmptySessionError


@dataclass(slots=True)
class RestoreSessionUseCase:
    """
    Application use case: accept persisted session properties when they
    still carry a token. No network calls, no timers.
    """

    token_property_name: str

    def execute(self, properties: Mapping[str, Any] | None) -> SessionProperties:
        """
        Raises:
            EmptySessionError if the token field is missing or empty
        """
        if not properties or not has_token(properties, self.token_property_name):
            raise EmptySessionError(
                f"Session has no {self.token_property_name!r} to restore"
            )
        return dict(properties)
