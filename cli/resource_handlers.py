"""Handlers for reminder, filter, notification, goals, settings and task commands"""

import logging

from rich.table import Table

from cli.context import CommandContext
from cli.output import print_json, render
from resources import filters, goals, notifications, reminders, tasks, user_settings

logger = logging.getLogger(__name__)


# Reminders

def _reminder_due(args):
    return reminders.ReminderDue(date=args.at) if getattr(args, "at", None) else None


def _reminder_when(reminder: reminders.Reminder) -> str:
    if reminder.due is not None:
        return reminder.due.string or reminder.due.date
    if reminder.minute_offset is not None:
        return f"{reminder.minute_offset} min before due"
    return ""


async def reminder_list(ctx: CommandContext, args, console):
    items = await reminders.get_task_reminders(ctx.sync, args.task_id)
    render(
        console, args, items,
        title=f"Reminders for task {args.task_id}",
        columns=("ID", "When"),
        row=lambda r: (r.id, _reminder_when(r)),
        empty_message="No reminders",
    )


async def reminder_add(ctx: CommandContext, args, console):
    reminder_id = await reminders.add_reminder(
        ctx.sync, args.task_id, minute_offset=args.minutes, due=_reminder_due(args)
    )
    console.print(f"[green]✓ Added reminder[/green] {reminder_id}")


async def reminder_update(ctx: CommandContext, args, console):
    await reminders.update_reminder(
        ctx.sync, args.reminder_id, minute_offset=args.minutes, due=_reminder_due(args)
    )
    console.print(f"[green]✓ Updated reminder[/green] {args.reminder_id}")


async def reminder_delete(ctx: CommandContext, args, console):
    await reminders.delete_reminder(ctx.sync, args.reminder_id)
    console.print(f"[green]✓ Deleted reminder[/green] {args.reminder_id}")


# Filters

async def filter_list(ctx: CommandContext, args, console):
    items = await filters.fetch_filters(ctx.legacy_sync)
    render(
        console, args, items,
        title="Filters",
        columns=("ID", "Name", "Query", "Favorite"),
        row=lambda f: (f.id, f.name, f.query, "★" if f.is_favorite else ""),
        empty_message="No filters",
    )


async def filter_add(ctx: CommandContext, args, console):
    created = await filters.add_filter(
        ctx.legacy_sync, args.name, args.query, color=args.color, is_favorite=args.favorite
    )
    console.print(f"[green]✓ Added filter[/green] {created.name} ({created.id})")


async def filter_update(ctx: CommandContext, args, console):
    await filters.update_filter(
        ctx.legacy_sync,
        args.filter_id,
        name=args.name,
        query=args.query,
        color=args.color,
        is_favorite=args.favorite,
    )
    console.print(f"[green]✓ Updated filter[/green] {args.filter_id}")


async def filter_delete(ctx: CommandContext, args, console):
    await filters.delete_filter(ctx.legacy_sync, args.filter_id)
    console.print(f"[green]✓ Deleted filter[/green] {args.filter_id}")


# Notifications

def _notification_summary(notification: notifications.Notification) -> str:
    parts = []
    if notification.from_user is not None:
        parts.append(notification.from_user.name or notification.from_user.email)
    if notification.project is not None:
        parts.append(notification.project.name)
    if notification.task is not None:
        parts.append(notification.task.content)
    return " · ".join(part for part in parts if part)


async def notification_list(ctx: CommandContext, args, console):
    items = await notifications.fetch_notifications(ctx.legacy_sync)
    if args.unread:
        items = [n for n in items if n.is_unread]
    render(
        console, args, items,
        title="Notifications",
        columns=("ID", "Type", "Unread", "Created", "Details"),
        row=lambda n: (n.id, n.type, "●" if n.is_unread else "", n.created_at, _notification_summary(n)),
        empty_message="No notifications",
    )


async def notification_read(ctx: CommandContext, args, console):
    await notifications.mark_read(ctx.legacy_sync, args.notification_id)
    console.print(f"[green]✓ Marked read[/green] {args.notification_id}")


async def notification_unread(ctx: CommandContext, args, console):
    await notifications.mark_unread(ctx.legacy_sync, args.notification_id)
    console.print(f"[green]✓ Marked unread[/green] {args.notification_id}")


async def notification_read_all(ctx: CommandContext, args, console):
    await notifications.mark_all_read(ctx.legacy_sync)
    console.print("[green]✓ Marked all notifications read[/green]")


async def _find_invitation(ctx: CommandContext, notification_id: str) -> notifications.Notification:
    for notification in await notifications.fetch_notifications(ctx.legacy_sync):
        if notification.id == notification_id:
            if not notification.invitation_id or not notification.invitation_secret:
                raise ValueError(f"Notification {notification_id} is not an invitation")
            return notification
    raise ValueError(f"Notification not found: {notification_id}")


async def notification_accept(ctx: CommandContext, args, console):
    invitation = await _find_invitation(ctx, args.notification_id)
    await notifications.accept_invitation(
        ctx.legacy_sync, invitation.invitation_id, invitation.invitation_secret
    )
    console.print("[green]✓ Invitation accepted[/green]")


async def notification_reject(ctx: CommandContext, args, console):
    invitation = await _find_invitation(ctx, args.notification_id)
    await notifications.reject_invitation(
        ctx.legacy_sync, invitation.invitation_id, invitation.invitation_secret
    )
    console.print("[green]✓ Invitation rejected[/green]")


# Goals

async def goals_show(ctx: CommandContext, args, console):
    stats = await goals.fetch_productivity_stats(ctx.http_client, ctx.token)
    if getattr(args, "json", False):
        print_json(console, stats)
        return

    current = stats.goals
    today = stats.days_items[0].total_completed if stats.days_items else 0
    this_week = stats.week_items[0].total_completed if stats.week_items else 0

    table = Table(title="Productivity")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Karma", f"{stats.karma:g} ({stats.karma_trend})")
    table.add_row("Completed total", str(stats.completed_count))
    table.add_row("Today", f"{today}/{current.daily_goal}")
    table.add_row("This week", f"{this_week}/{current.weekly_goal}")
    table.add_row("Daily streak", f"{current.current_daily_streak.count} (max {current.max_daily_streak.count})")
    table.add_row("Weekly streak", f"{current.current_weekly_streak.count} (max {current.max_weekly_streak.count})")
    table.add_row("Vacation mode", "on" if current.vacation_mode else "off")
    table.add_row("Karma", "disabled" if current.karma_disabled else "enabled")
    console.print(table)


async def goals_set(ctx: CommandContext, args, console):
    karma_disabled = None if args.karma is None else not args.karma
    await goals.update_goals(
        ctx.sync,
        daily_goal=args.daily,
        weekly_goal=args.weekly,
        vacation_mode=args.vacation,
        karma_disabled=karma_disabled,
    )
    console.print("[green]✓ Goals updated[/green]")


# Settings

SETTING_FLAGS = user_settings.USER_FIELDS + user_settings.SETTINGS_FIELDS


async def settings_view(ctx: CommandContext, args, console):
    current = await user_settings.fetch_user_settings(ctx.sync)
    if getattr(args, "json", False):
        print_json(console, current)
        return

    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in current.model_dump().items():
        table.add_row(name, str(value))
    console.print(table)


async def settings_update(ctx: CommandContext, args, console):
    changes = {name: getattr(args, name, None) for name in SETTING_FLAGS}
    await user_settings.update_user_settings(ctx.sync, **changes)
    console.print("[green]✓ Settings updated[/green]")


# Tasks

async def task_complete_forever(ctx: CommandContext, args, console):
    await tasks.complete_task_forever(ctx.sync, args.task_id)
    console.print(f"[green]✓ Completed task[/green] {args.task_id} [dim](recurrence ended)[/dim]")
