from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

SessionProperties = Dict[str, Any]


def is_empty(value: Any) -> bool:
    """True for None and for any sized value of length 0 ("", [], {})."""
    if value is None:
        return True
    try:
        return len(value) == 0
    except TypeError:
        return False


def has_token(properties: Mapping[str, Any], token_property_name: str) -> bool:
    return not is_empty(properties.get(token_property_name))


@dataclass(slots=True)
class TokenData:
    """
    A bearer token together with what was decoded from it.
    """
    token: str
    claims: Mapping[str, Any] = field(default_factory=dict)

    # Seconds remaining when the token was decoded
    expires_in: Optional[float] = None
    # Absolute expiry, epoch milliseconds
    expires_at: Optional[int] = None

    @property
    def expiring(self) -> bool:
        return self.expires_at is not None
