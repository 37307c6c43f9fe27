from enum import Enum

DEFAULT_TOKEN_ENDPOINT = "/api-token-auth/"
DEFAULT_REFRESH_ENDPOINT = "/api-token-refresh/"
DEFAULT_IDENTIFICATION_FIELD = "username"
DEFAULT_TOKEN_PROPERTY_NAME = "token"
DEFAULT_TOKEN_EXPIRE_FIELD_NAME = "exp"
DEFAULT_REFRESH_RATIO = 0.9

PASSWORD_FIELD = "password"


class RefreshOutcome(Enum):
    REFRESHED = "refreshed"
    FAILED = "failed"
    CANCELLED = "cancelled"
