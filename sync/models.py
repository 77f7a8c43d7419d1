"""Data models for the Todoist sync command protocol"""

import json
import logging
import uuid as uuid_lib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
_ERROR_KEYS = frozenset({"error", "error_code", "error_tag"})


def generate_uuid() -> str:
    """New idempotency key / temp id (random UUID4)"""
    return str(uuid_lib.uuid4())


@dataclass(frozen=True)
class SyncCommand:
    """A single typed mutation submitted in a sync batch

    Attributes:
        type: Command name, e.g. "reminder_add"
        args: Command-specific parameters
        uuid: Idempotency key, fresh for every command instance
        temp_id: Client-chosen placeholder id for create-type commands
    """
    type: str
    args: Dict[str, Any] = field(default_factory=dict)
    uuid: str = field(default_factory=generate_uuid)
    temp_id: Optional[str] = None

    @classmethod
    def create(cls, type: str, args: Dict[str, Any]) -> "SyncCommand":
        """Build a create-type command with a fresh temp id"""
        return cls(type=type, args=args, temp_id=generate_uuid())

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "uuid": self.uuid, "args": self.args}
        if self.temp_id is not None:
            data["temp_id"] = self.temp_id
        return data


def serialize_commands(commands: List[SyncCommand]) -> str:
    """JSON array for the ``commands`` form field"""
    return json.dumps([command.to_dict() for command in commands], separators=(",", ":"))


@dataclass(frozen=True)
class CommandOk:
    """Command accepted by the service"""
    ok: bool = True


@dataclass(frozen=True)
class CommandFailure:
    """Command rejected by the service

    Attributes:
        error: Service-provided message
        error_code: Numeric error code, when given
        error_tag: Symbolic error tag, when given
        http_code: HTTP-equivalent status, when given
    """
    error: str
    error_code: Optional[int] = None
    error_tag: Optional[str] = None
    http_code: Optional[int] = None
    ok: bool = False


CommandStatus = Union[CommandOk, CommandFailure]


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_command_status(raw: Any) -> CommandStatus:
    """Interpret one ``sync_status`` entry

    The service reports success as the literal "ok" and failure as an object
    carrying ``error`` (and usually ``error_code``).
    """
    if raw == STATUS_OK:
        return CommandOk()
    if isinstance(raw, dict):
        if not _ERROR_KEYS.intersection(raw):
            # Commands that act on several ids answer with a per-id mapping
            for value in raw.values():
                status = parse_command_status(value)
                if isinstance(status, CommandFailure):
                    return status
            return CommandOk()
        return CommandFailure(
            error=str(raw.get("error") or raw.get("error_tag") or "Unknown error"),
            error_code=_as_int(raw.get("error_code")),
            error_tag=raw.get("error_tag"),
            http_code=_as_int(raw.get("http_code")),
        )
    return CommandFailure(error=f"Unrecognised command status: {raw!r}")


@dataclass
class SyncBatchResponse:
    """Parsed response to a sync batch

    Attributes:
        sync_status: Command uuid -> CommandOk | CommandFailure
        temp_id_mapping: Client temp id -> server-assigned id
        payload: The full JSON body (resource arrays, sync token, ...)
    """
    sync_status: Dict[str, CommandStatus] = field(default_factory=dict)
    temp_id_mapping: Dict[str, str] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SyncBatchResponse":
        raw_status = payload.get("sync_status") or {}
        raw_mapping = payload.get("temp_id_mapping") or {}
        return cls(
            sync_status={key: parse_command_status(value) for key, value in raw_status.items()},
            temp_id_mapping={str(key): str(value) for key, value in raw_mapping.items()},
            payload=payload,
        )

    def status_for(self, command: SyncCommand) -> Optional[CommandStatus]:
        return self.sync_status.get(command.uuid)

    def resolve_id(self, temp_id: str) -> str:
        """Server id for a temp id

        Some command types leave the mapping out and keep the client-chosen id
        verbatim, so the temp id itself is returned in that case.
        """
        real_id = self.temp_id_mapping.get(temp_id)
        if real_id is None:
            logger.debug(f"temp id {temp_id} missing from temp_id_mapping, using it as the id")
            return temp_id
        return real_id

    def resolve_command_id(self, command: SyncCommand) -> str:
        if command.temp_id is None:
            raise ValueError(f"Command {command.type} has no temp_id to resolve")
        return self.resolve_id(command.temp_id)
