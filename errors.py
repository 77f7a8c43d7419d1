"""Error taxonomy shared by the OAuth login flow and the sync client"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced to the command layer"""

    # Possible cross-site request forgery; never downgrade to a generic error
    SECURITY = "SECURITY"
    TIMEOUT = "TIMEOUT"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    BATCH_ERROR = "BATCH_ERROR"
    COMMAND_ERROR = "COMMAND_ERROR"
    AUTH_REQUIRED = "AUTH_REQUIRED"


class TodoistCLIError(Exception):
    """Base exception for every failure td reports to the user"""

    kind: ErrorKind = ErrorKind.TRANSPORT_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthenticationRequiredError(TodoistCLIError):
    """Raised when a command needs a token and none is stored"""

    kind = ErrorKind.AUTH_REQUIRED
