"""Todoist sync command protocol"""

from .client import SyncClient
from .exceptions import SyncBatchError, SyncCommandError, SyncError, SyncTransportError
from .models import (
    CommandFailure,
    CommandOk,
    CommandStatus,
    SyncBatchResponse,
    SyncCommand,
    generate_uuid,
    parse_command_status,
    serialize_commands,
)

__all__ = [
    "SyncClient",
    "SyncError",
    "SyncTransportError",
    "SyncBatchError",
    "SyncCommandError",
    "SyncCommand",
    "SyncBatchResponse",
    "CommandOk",
    "CommandFailure",
    "CommandStatus",
    "generate_uuid",
    "parse_command_status",
    "serialize_commands",
]
