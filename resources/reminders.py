"""Task reminders via the sync API"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from sync import SyncClient, SyncCommand

logger = logging.getLogger(__name__)


class ReminderDue(BaseModel):
    """Absolute due date of a reminder"""
    date: str
    timezone: Optional[str] = None
    is_recurring: Optional[bool] = None
    string: Optional[str] = None
    lang: Optional[str] = None


class Reminder(BaseModel):
    """Reminder attached to a task"""
    id: str
    item_id: str
    type: str = "absolute"
    due: Optional[ReminderDue] = None
    minute_offset: Optional[int] = None
    is_deleted: bool = False


def parse_reminder(data: Dict[str, Any]) -> Reminder:
    return Reminder(
        id=str(data["id"]),
        item_id=str(data.get("item_id", "")),
        type=str(data.get("type") or "absolute"),
        due=ReminderDue(**data["due"]) if isinstance(data.get("due"), dict) else None,
        minute_offset=data.get("minute_offset"),
        is_deleted=bool(data.get("is_deleted")),
    )


def _reminder_args(minute_offset: Optional[int], due: Optional[ReminderDue]) -> Dict[str, Any]:
    args: Dict[str, Any] = {}
    if minute_offset is not None:
        args["minute_offset"] = minute_offset
    if due is not None:
        args["due"] = due.model_dump(exclude_none=True)
    return args


async def fetch_reminders(client: SyncClient) -> List[Reminder]:
    """All live reminders of the user"""
    data = await client.read(["reminders"])
    reminders = [parse_reminder(item) for item in data.get("reminders") or []]
    return [reminder for reminder in reminders if not reminder.is_deleted]


async def get_task_reminders(client: SyncClient, task_id: str) -> List[Reminder]:
    reminders = await fetch_reminders(client)
    return [reminder for reminder in reminders if reminder.item_id == task_id]


async def add_reminder(
    client: SyncClient,
    task_id: str,
    minute_offset: Optional[int] = None,
    due: Optional[ReminderDue] = None,
) -> str:
    """Create an absolute reminder for a task

    Args:
        task_id: Task the reminder belongs to
        minute_offset: Minutes before the task's due time
        due: Absolute reminder time (alternative to minute_offset)

    Returns:
        Server-assigned reminder id
    """
    if minute_offset is None and due is None:
        raise ValueError("Either minute_offset or due is required")

    command = SyncCommand.create(
        "reminder_add",
        {"item_id": task_id, "type": "absolute", **_reminder_args(minute_offset, due)},
    )
    response = await client.execute([command])
    reminder_id = response.resolve_command_id(command)
    logger.info(f"Added reminder {reminder_id} to task {task_id}")
    return reminder_id


async def update_reminder(
    client: SyncClient,
    reminder_id: str,
    minute_offset: Optional[int] = None,
    due: Optional[ReminderDue] = None,
) -> None:
    args = _reminder_args(minute_offset, due)
    if not args:
        raise ValueError("No reminder changes to apply")
    await client.execute([SyncCommand("reminder_update", {"id": reminder_id, **args})])


async def delete_reminder(client: SyncClient, reminder_id: str) -> None:
    await client.execute([SyncCommand("reminder_delete", {"id": reminder_id})])
