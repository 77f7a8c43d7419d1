"""CLI entry point and argument parsing"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from cli import auth_handlers, resource_handlers
from cli.context import CommandContext
from cli.debug_setup import setup_console
from errors import ErrorKind, TodoistCLIError
from sync import SyncCommandError

logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_SECURITY = 2
EXIT_TIMEOUT = 3
EXIT_INTERRUPTED = 130

ERROR_LABELS = {
    ErrorKind.SECURITY: "Security error",
    ErrorKind.TIMEOUT: "Timed out",
    ErrorKind.PROVIDER_ERROR: "Authorization failed",
    ErrorKind.TRANSPORT_ERROR: "Connection error",
    ErrorKind.BATCH_ERROR: "Request rejected",
    ErrorKind.COMMAND_ERROR: "Command failed",
    ErrorKind.AUTH_REQUIRED: "Not logged in",
}


def _add_output_flags(parser: argparse.ArgumentParser):
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--json", action="store_true", help="Print JSON")
    group.add_argument("--ndjson", action="store_true", help="Print one JSON object per line")


def _add_reminder_time(parser: argparse.ArgumentParser, required: bool):
    group = parser.add_mutually_exclusive_group(required=required)
    group.add_argument("--minutes", type=int, default=None, help="Minutes before the task is due")
    group.add_argument("--at", default=None, help="Absolute time (ISO 8601)")


def _add_auth_commands(subparsers):
    auth = subparsers.add_parser("auth", help="Manage authentication")
    auth_sub = auth.add_subparsers(dest="auth_command", required=True)

    auth_sub.add_parser("login", help="Log in through the browser (OAuth)").set_defaults(
        handler=auth_handlers.login)

    token = auth_sub.add_parser("token", help="Save a personal API token")
    token.add_argument("token", help="API token from Todoist settings > Integrations")
    token.set_defaults(handler=auth_handlers.save_token)

    status = auth_sub.add_parser("status", help="Show the logged-in account")
    status.add_argument("--json", action="store_true", help="Print JSON")
    status.set_defaults(handler=auth_handlers.status)

    auth_sub.add_parser("logout", help="Remove the stored token").set_defaults(
        handler=auth_handlers.logout)

    subparsers.add_parser("login", help="Alias for `auth login`").set_defaults(
        handler=auth_handlers.login)


def _add_reminder_commands(subparsers):
    reminder = subparsers.add_parser("reminder", help="Manage task reminders")
    sub = reminder.add_subparsers(dest="reminder_command", required=True)

    list_cmd = sub.add_parser("list", help="List reminders of a task")
    list_cmd.add_argument("task_id")
    _add_output_flags(list_cmd)
    list_cmd.set_defaults(handler=resource_handlers.reminder_list)

    add = sub.add_parser("add", help="Add a reminder to a task")
    add.add_argument("task_id")
    _add_reminder_time(add, required=True)
    add.set_defaults(handler=resource_handlers.reminder_add)

    update = sub.add_parser("update", help="Change when a reminder fires")
    update.add_argument("reminder_id")
    _add_reminder_time(update, required=True)
    update.set_defaults(handler=resource_handlers.reminder_update)

    delete = sub.add_parser("delete", help="Delete a reminder")
    delete.add_argument("reminder_id")
    delete.set_defaults(handler=resource_handlers.reminder_delete)


def _add_filter_commands(subparsers):
    filter_parser = subparsers.add_parser("filter", help="Manage saved filters")
    sub = filter_parser.add_subparsers(dest="filter_command", required=True)

    list_cmd = sub.add_parser("list", help="List filters")
    _add_output_flags(list_cmd)
    list_cmd.set_defaults(handler=resource_handlers.filter_list)

    add = sub.add_parser("add", help="Create a filter")
    add.add_argument("name")
    add.add_argument("query")
    add.add_argument("--color", default=None)
    add.add_argument("--favorite", action=argparse.BooleanOptionalAction, default=None)
    add.set_defaults(handler=resource_handlers.filter_add)

    update = sub.add_parser("update", help="Change a filter")
    update.add_argument("filter_id")
    update.add_argument("--name", default=None)
    update.add_argument("--query", default=None)
    update.add_argument("--color", default=None)
    update.add_argument("--favorite", action=argparse.BooleanOptionalAction, default=None)
    update.set_defaults(handler=resource_handlers.filter_update)

    delete = sub.add_parser("delete", help="Delete a filter")
    delete.add_argument("filter_id")
    delete.set_defaults(handler=resource_handlers.filter_delete)


def _add_notification_commands(subparsers):
    notification = subparsers.add_parser("notification", help="Read and act on notifications")
    sub = notification.add_subparsers(dest="notification_command", required=True)

    list_cmd = sub.add_parser("list", help="List notifications")
    list_cmd.add_argument("--unread", action="store_true", help="Only unread notifications")
    _add_output_flags(list_cmd)
    list_cmd.set_defaults(handler=resource_handlers.notification_list)

    for name, handler, help_text in (
        ("read", resource_handlers.notification_read, "Mark a notification read"),
        ("unread", resource_handlers.notification_unread, "Mark a notification unread"),
        ("accept", resource_handlers.notification_accept, "Accept a sharing invitation"),
        ("reject", resource_handlers.notification_reject, "Reject a sharing invitation"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("notification_id")
        cmd.set_defaults(handler=handler)

    sub.add_parser("read-all", help="Mark every notification read").set_defaults(
        handler=resource_handlers.notification_read_all)


def _add_goals_commands(subparsers):
    goals = subparsers.add_parser("goals", help="Productivity goals and karma")
    sub = goals.add_subparsers(dest="goals_command", required=True)

    show = sub.add_parser("show", help="Show karma, streaks and goals")
    show.add_argument("--json", action="store_true", help="Print JSON")
    show.set_defaults(handler=resource_handlers.goals_show)

    set_cmd = sub.add_parser("set", help="Change goals")
    set_cmd.add_argument("--daily", type=int, default=None, help="Daily task goal")
    set_cmd.add_argument("--weekly", type=int, default=None, help="Weekly task goal")
    set_cmd.add_argument("--vacation", action=argparse.BooleanOptionalAction, default=None)
    set_cmd.add_argument("--karma", action=argparse.BooleanOptionalAction, default=None)
    set_cmd.set_defaults(handler=resource_handlers.goals_set)


def _add_settings_commands(subparsers):
    settings_parser = subparsers.add_parser("settings", help="Account settings")
    sub = settings_parser.add_subparsers(dest="settings_command", required=True)

    view = sub.add_parser("view", help="Show settings")
    view.add_argument("--json", action="store_true", help="Print JSON")
    view.set_defaults(handler=resource_handlers.settings_view)

    update = sub.add_parser("update", help="Change settings")
    update.add_argument("--timezone", default=None)
    update.add_argument("--time-format", dest="time_format", type=int, choices=(0, 1), default=None,
                        help="0 for 24h, 1 for 12h")
    update.add_argument("--date-format", dest="date_format", type=int, choices=(0, 1), default=None,
                        help="0 for DD-MM-YYYY, 1 for MM-DD-YYYY")
    update.add_argument("--start-day", dest="start_day", type=int, choices=range(1, 8), default=None,
                        help="First day of the week (1=Monday)")
    update.add_argument("--theme", type=int, default=None)
    update.add_argument("--auto-reminder", dest="auto_reminder", type=int, default=None,
                        help="Default reminder, minutes before due")
    update.add_argument("--next-week", dest="next_week", type=int, choices=range(1, 8), default=None)
    update.add_argument("--start-page", dest="start_page", default=None)
    for flag in ("reminder-push", "reminder-desktop", "reminder-email",
                 "completed-sound-desktop", "completed-sound-mobile"):
        update.add_argument(f"--{flag}", dest=flag.replace("-", "_"),
                            action=argparse.BooleanOptionalAction, default=None)
    update.set_defaults(handler=resource_handlers.settings_update)


def _add_task_commands(subparsers):
    task = subparsers.add_parser("task", help="Task operations")
    sub = task.add_subparsers(dest="task_command", required=True)

    complete = sub.add_parser("complete-forever", help="Complete a task and end its recurrence")
    complete.add_argument("task_id")
    complete.set_defaults(handler=resource_handlers.task_complete_forever)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="td", description="Todoist command-line client")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_auth_commands(subparsers)
    _add_reminder_commands(subparsers)
    _add_filter_commands(subparsers)
    _add_notification_commands(subparsers)
    _add_goals_commands(subparsers)
    _add_settings_commands(subparsers)
    _add_task_commands(subparsers)
    return parser


def exit_code_for(error: TodoistCLIError) -> int:
    if error.kind == ErrorKind.SECURITY:
        return EXIT_SECURITY
    if error.kind == ErrorKind.TIMEOUT:
        return EXIT_TIMEOUT
    return EXIT_ERROR


def report_error(console: Console, error: TodoistCLIError):
    label = ERROR_LABELS.get(error.kind, "Error")
    console.print(f"[red]{label}:[/red] {escape(error.message)}", highlight=False)

    if isinstance(error, SyncCommandError):
        console.print(f"[dim]Command {error.command_type} ({error.command_uuid})[/dim]")
    if error.kind == ErrorKind.SECURITY:
        console.print("[yellow]The login was aborted and nothing was saved. Run `td auth login` again.[/yellow]")


async def _dispatch(args, ctx: CommandContext, console: Console):
    try:
        await args.handler(ctx, args, console)
    finally:
        await ctx.aclose()


def run(argv: Optional[List[str]] = None, ctx: Optional[CommandContext] = None,
        console: Optional[Console] = None) -> int:
    """Parse arguments, run one command and return the process exit code"""
    args = build_parser().parse_args(argv)

    if console is None:
        console = setup_console(args.debug)
    ctx = ctx or CommandContext()
    logger.debug(f"Running command: {args.command}")

    try:
        asyncio.run(_dispatch(args, ctx, console))
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled[/yellow]")
        return EXIT_INTERRUPTED
    except TodoistCLIError as e:
        logger.debug(f"{type(e).__name__} ({e.kind.value}): {e.message}")
        report_error(console, e)
        return exit_code_for(e)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        return EXIT_ERROR
    except Exception as e:
        console.print(f"\n[red]Fatal error:[/red] {escape(str(e))}", highlight=False)
        if args.debug:
            import traceback
            traceback.print_exc()
        return EXIT_ERROR

    return 0


def main():
    """Entry point for the CLI"""
    sys.exit(run())


if __name__ == "__main__":
    main()
