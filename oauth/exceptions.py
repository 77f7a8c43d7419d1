"""OAuth login exceptions."""

from typing import Optional

from errors import ErrorKind, TodoistCLIError


class OAuthError(TodoistCLIError):
    """Base exception for OAuth login failures."""

    pass


class CallbackError(OAuthError):
    """Raised when the local callback listener ends without an authorization code."""

    cause: str = "LISTENER_FAILURE"


class StateMismatchError(CallbackError):
    """Raised when the redirect carries a state other than the one we generated."""

    kind = ErrorKind.SECURITY
    cause = "STATE_MISMATCH"


class ProviderError(CallbackError):
    """Raised when the authorization server redirects back with an error."""

    kind = ErrorKind.PROVIDER_ERROR
    cause = "PROVIDER_ERROR"

    def __init__(self, error: str, error_description: Optional[str] = None):
        self.error = error
        self.error_description = error_description
        message = f"Authorization server returned an error: {error}"
        if error_description:
            message = f"{message} ({error_description})"
        super().__init__(message)


class MissingParametersError(CallbackError):
    """Raised when the redirect lacks the code or state parameter."""

    kind = ErrorKind.PROVIDER_ERROR
    cause = "MISSING_PARAMETERS"


class CallbackTimeoutError(CallbackError):
    """Raised when no redirect arrives before the deadline."""

    kind = ErrorKind.TIMEOUT
    cause = "CALLBACK_TIMEOUT"

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"OAuth callback timed out after {timeout:g} seconds")


class ListenerError(CallbackError):
    """Raised when the callback listener cannot bind or fails internally."""

    kind = ErrorKind.TRANSPORT_ERROR
    cause = "LISTENER_FAILURE"


class TokenExchangeError(OAuthError):
    """Raised when the token endpoint does not return an access token."""

    kind = ErrorKind.TRANSPORT_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
