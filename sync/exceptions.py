"""Sync command protocol exceptions."""

from typing import Any, List, Optional, Tuple

from errors import ErrorKind, TodoistCLIError


class SyncError(TodoistCLIError):
    """Base exception for sync endpoint failures."""

    pass


class SyncTransportError(SyncError):
    """Raised when the sync endpoint cannot be reached or answers with a non-success status."""

    kind = ErrorKind.TRANSPORT_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SyncBatchError(SyncError):
    """Raised when the service rejects the whole batch before running any command."""

    kind = ErrorKind.BATCH_ERROR

    def __init__(self, message: str, error_code: Optional[int] = None):
        self.error_code = error_code
        super().__init__(message)


class SyncCommandError(SyncError):
    """Raised when at least one command in a batch failed.

    ``command_uuid``, ``command_type`` and ``error_code`` describe the first
    failing command in submission order; ``failures`` holds every
    (uuid, CommandFailure) pair.
    """

    kind = ErrorKind.COMMAND_ERROR

    def __init__(
        self,
        message: str,
        command_uuid: str,
        command_type: str,
        error_code: Optional[int] = None,
        failures: Optional[List[Tuple[str, Any]]] = None,
    ):
        self.command_uuid = command_uuid
        self.command_type = command_type
        self.error_code = error_code
        self.failures = failures or []
        super().__init__(message)
