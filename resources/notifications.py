"""Live notifications and sharing invitations via the legacy sync API"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from sync import SyncClient, SyncCommand


class NotificationUser(BaseModel):
    id: str
    name: str = ""
    email: str = ""


class NotificationProject(BaseModel):
    id: str
    name: str = ""


class NotificationTask(BaseModel):
    id: str
    content: str = ""


class Notification(BaseModel):
    """Live notification (assignments, shares, karma goals, billing...)"""
    id: str
    type: str
    is_unread: bool = False
    is_deleted: bool = False
    created_at: str = ""
    from_user: Optional[NotificationUser] = None
    project: Optional[NotificationProject] = None
    task: Optional[NotificationTask] = None
    invitation_id: Optional[str] = None
    invitation_secret: Optional[str] = None


def parse_notification(data: Dict[str, Any]) -> Notification:
    from_user = None
    if data.get("from_uid"):
        user_data = data.get("from_user") or {}
        from_user = NotificationUser(
            id=str(data["from_uid"]),
            name=str(user_data.get("full_name") or user_data.get("name") or ""),
            email=str(user_data.get("email") or ""),
        )

    project = None
    if data.get("project_id"):
        project = NotificationProject(id=str(data["project_id"]), name=str(data.get("project_name") or ""))

    task = None
    if data.get("item_id"):
        task = NotificationTask(id=str(data["item_id"]), content=str(data.get("item_content") or ""))

    return Notification(
        id=str(data["id"]),
        type=str(data.get("notification_type") or data.get("type") or "unknown"),
        is_unread=bool(data.get("is_unread")),
        is_deleted=bool(data.get("is_deleted")),
        created_at=str(data.get("created_at") or data.get("created") or ""),
        from_user=from_user,
        project=project,
        task=task,
        invitation_id=str(data["invitation_id"]) if data.get("invitation_id") else None,
        invitation_secret=str(data["invitation_secret"]) if data.get("invitation_secret") else None,
    )


def _created_sort_key(notification: Notification) -> datetime:
    try:
        created = datetime.fromisoformat(notification.created_at.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created


async def fetch_notifications(client: SyncClient) -> List[Notification]:
    """Live notifications, newest first"""
    data = await client.read(["live_notifications"])
    notifications = [parse_notification(item) for item in data.get("live_notifications") or []]
    live = [n for n in notifications if not n.is_deleted]
    live.sort(key=_created_sort_key, reverse=True)
    return live


async def mark_read(client: SyncClient, notification_id: str) -> None:
    await client.execute([SyncCommand("live_notifications_mark_read", {"ids": [notification_id]})])


async def mark_unread(client: SyncClient, notification_id: str) -> None:
    await client.execute([SyncCommand("live_notifications_mark_unread", {"ids": [notification_id]})])


async def mark_all_read(client: SyncClient) -> None:
    await client.execute([SyncCommand("live_notifications_mark_read_all", {})])


def _invitation_args(invitation_id: str, secret: str) -> Dict[str, Any]:
    return {"invitation_id": int(invitation_id), "invitation_secret": secret}


async def accept_invitation(client: SyncClient, invitation_id: str, secret: str) -> None:
    await client.execute([SyncCommand("accept_invitation", _invitation_args(invitation_id, secret))])


async def reject_invitation(client: SyncClient, invitation_id: str, secret: str) -> None:
    await client.execute([SyncCommand("reject_invitation", _invitation_args(invitation_id, secret))])
