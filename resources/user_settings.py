"""User profile and notification settings via the sync API"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from sync import SyncClient, SyncCommand

# Settings that live on the user object; the rest belong to user_settings
USER_FIELDS = ("timezone", "time_format", "date_format", "start_day", "theme", "auto_reminder", "next_week", "start_page")
SETTINGS_FIELDS = (
    "reminder_push",
    "reminder_desktop",
    "reminder_email",
    "completed_sound_desktop",
    "completed_sound_mobile",
)


class UserSettings(BaseModel):
    timezone: str = "UTC"
    time_format: int = 0  # 0=24h, 1=12h
    date_format: int = 0  # 0=DD-MM-YYYY, 1=MM-DD-YYYY
    start_day: int = 1  # 1=Mon .. 7=Sun
    theme: int = 0
    auto_reminder: int = 0  # minutes before due
    next_week: int = 1
    start_page: str = "today"
    reminder_push: bool = True
    reminder_desktop: bool = True
    reminder_email: bool = False
    completed_sound_desktop: bool = True
    completed_sound_mobile: bool = True


class UserProfile(BaseModel):
    id: str
    email: str = ""
    full_name: str = ""


def _timezone(user: Dict[str, Any]) -> str:
    tz = user.get("tz_info")
    if isinstance(tz, dict) and tz.get("timezone"):
        return str(tz["timezone"])
    return str(user.get("timezone") or "UTC")


def parse_user_settings(user: Dict[str, Any], settings: Dict[str, Any]) -> UserSettings:
    return UserSettings(
        timezone=_timezone(user),
        time_format=int(user.get("time_format") or 0),
        date_format=int(user.get("date_format") or 0),
        start_day=int(user.get("start_day") or 1),
        theme=int(user.get("theme_id") or user.get("theme") or 0),
        auto_reminder=int(user.get("auto_reminder") or 0),
        next_week=int(user.get("next_week") or 1),
        start_page=str(user.get("start_page") or "today"),
        reminder_push=bool(settings.get("reminder_push", True)),
        reminder_desktop=bool(settings.get("reminder_desktop", True)),
        reminder_email=bool(settings.get("reminder_email", False)),
        completed_sound_desktop=bool(settings.get("completed_sound_desktop", True)),
        completed_sound_mobile=bool(settings.get("completed_sound_mobile", True)),
    )


async def fetch_user(client: SyncClient) -> UserProfile:
    data = await client.read(["user"])
    user = data.get("user") or {}
    return UserProfile(
        id=str(user.get("id", "")),
        email=str(user.get("email") or ""),
        full_name=str(user.get("full_name") or ""),
    )


async def fetch_user_settings(client: SyncClient) -> UserSettings:
    data = await client.read(["user", "user_settings"])
    return parse_user_settings(data.get("user") or {}, data.get("user_settings") or {})


def build_settings_commands(changes: Dict[str, Any]) -> List[SyncCommand]:
    """Split setting changes into user_update / user_settings_update commands"""
    unknown = set(changes) - set(USER_FIELDS) - set(SETTINGS_FIELDS)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

    commands = []
    user_args = {key: changes[key] for key in USER_FIELDS if changes.get(key) is not None}
    if "theme" in user_args:
        user_args["theme_id"] = str(user_args.pop("theme"))
    if user_args:
        commands.append(SyncCommand("user_update", user_args))

    settings_args = {key: changes[key] for key in SETTINGS_FIELDS if changes.get(key) is not None}
    if settings_args:
        commands.append(SyncCommand("user_settings_update", settings_args))

    return commands


async def update_user_settings(client: SyncClient, **changes: Optional[Any]) -> None:
    """Apply setting changes in one batch (up to two commands)"""
    commands = build_settings_commands(changes)
    if not commands:
        raise ValueError("No settings to update")
    await client.execute(commands)
