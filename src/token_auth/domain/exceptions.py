from typing import Any, Optional


class TokenAuthError(Exception):
    """Base class for everything raised by token_auth."""
    pass


class ConfigurationError(TokenAuthError):
    """Raised when settings are missing or invalid."""
    pass


class TransportError(TokenAuthError):
    """
    Raised by a transport when a request could not be completed.

    Carries whatever the server sent back so callers can surface it.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        response_json: Any = None,
        response_text: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_json = response_json
        self.response_text = response_text

    @property
    def payload(self) -> Any:
        """Structured error body if the server sent one, else the raw text."""
        if self.response_json is not None:
            return self.response_json
        return self.response_text


class AuthenticationError(TokenAuthError):
    """Raised when authentication fails."""
    pass


class EmptySessionError(AuthenticationError):
    """Raised when session properties carry no usable token."""
    pass


class ServerRejectedError(AuthenticationError):
    """Raised when the server rejects a credential exchange."""

    def __init__(self, payload: Any, status_code: Optional[int] = None) -> None:
        super().__init__(f"Server rejected credentials: {payload!r}")
        self.payload = payload
        self.status_code = status_code


class MalformedTokenError(AuthenticationError):
    """Raised when a token payload cannot be decoded."""
    pass


class RefreshFailedError(AuthenticationError):
    """Raised when the token refresh call fails."""

    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload
