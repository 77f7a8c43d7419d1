"""Todoist resources managed through sync commands"""

from . import filters, goals, notifications, reminders, tasks, user_settings

__all__ = [
    "filters",
    "goals",
    "notifications",
    "reminders",
    "tasks",
    "user_settings",
]
