"""Tests for the resource modules built on sync commands."""

import json

import httpx
import pytest

from resources import filters, goals, notifications, reminders, tasks, user_settings
from sync import SyncBatchError, SyncTransportError
from tests.conftest import FakeSyncServer, all_ok


def _reading(payload):
    """Responder answering reads with ``payload`` and accepting every command"""

    def responder(form):
        if "commands" in form:
            return all_ok(form)
        return 200, payload

    return responder


def _mapping_temp_ids(real_ids):
    """Responder that maps each temp id to the next id in ``real_ids``"""
    ids = iter(real_ids)

    def responder(form):
        commands = json.loads(form["commands"])
        return 200, {
            "sync_status": {cmd["uuid"]: "ok" for cmd in commands},
            "temp_id_mapping": {cmd["temp_id"]: next(ids) for cmd in commands if "temp_id" in cmd},
        }

    return responder


class TestReminders:
    @pytest.mark.asyncio
    async def test_add_with_minute_offset_resolves_id(self):
        server = FakeSyncServer(_mapping_temp_ids(["9988"]))
        reminder_id = await reminders.add_reminder(server.client(), "task-1", minute_offset=30)

        assert reminder_id == "9988"
        command = server.commands[0]
        assert command["type"] == "reminder_add"
        assert command["args"] == {"item_id": "task-1", "type": "absolute", "minute_offset": 30}
        assert command["temp_id"]

    @pytest.mark.asyncio
    async def test_add_falls_back_to_temp_id(self, ok_server):
        reminder_id = await reminders.add_reminder(
            ok_server.client(), "task-1", due=reminders.ReminderDue(date="2026-01-01T09:00:00")
        )
        assert reminder_id == ok_server.commands[0]["temp_id"]
        assert ok_server.commands[0]["args"]["due"] == {"date": "2026-01-01T09:00:00"}

    @pytest.mark.asyncio
    async def test_add_requires_time(self, ok_server):
        with pytest.raises(ValueError):
            await reminders.add_reminder(ok_server.client(), "task-1")
        assert ok_server.requests == []

    @pytest.mark.asyncio
    async def test_task_reminders_skip_deleted_and_other_tasks(self):
        server = FakeSyncServer(_reading({"reminders": [
            {"id": "1", "item_id": "task-1", "minute_offset": 15},
            {"id": "2", "item_id": "task-1", "minute_offset": 60, "is_deleted": True},
            {"id": "3", "item_id": "task-2", "minute_offset": 5},
        ]}))

        found = await reminders.get_task_reminders(server.client(), "task-1")
        assert [r.id for r in found] == ["1"]

    @pytest.mark.asyncio
    async def test_update_and_delete(self, ok_server):
        client = ok_server.client()
        await reminders.update_reminder(client, "7", minute_offset=10)
        await reminders.delete_reminder(client, "7")

        assert [(c["type"], c["args"]) for c in ok_server.commands] == [
            ("reminder_update", {"id": "7", "minute_offset": 10}),
            ("reminder_delete", {"id": "7"}),
        ]

    @pytest.mark.asyncio
    async def test_update_without_changes(self, ok_server):
        with pytest.raises(ValueError):
            await reminders.update_reminder(ok_server.client(), "7")


class TestFilters:
    @pytest.mark.asyncio
    async def test_fetch_sorted_and_live(self):
        server = FakeSyncServer(_reading({"filters": [
            {"id": "b", "name": "Later", "query": "p4", "item_order": 2},
            {"id": "a", "name": "Today", "query": "today", "item_order": 1, "is_favorite": True},
            {"id": "c", "name": "Gone", "query": "p1", "item_order": 0, "is_deleted": True},
        ]}))

        found = await filters.fetch_filters(server.client())
        assert [f.id for f in found] == ["a", "b"]
        assert found[0].is_favorite

    @pytest.mark.asyncio
    async def test_add_returns_resolved_filter(self):
        server = FakeSyncServer(_mapping_temp_ids(["4242"]))
        created = await filters.add_filter(server.client(), "Work", "#Work & today", color="red")

        assert created.id == "4242"
        assert created.query == "#Work & today"
        assert server.commands[0]["args"] == {"name": "Work", "query": "#Work & today", "color": "red"}

    @pytest.mark.asyncio
    async def test_update_only_sends_changes(self, ok_server):
        await filters.update_filter(ok_server.client(), "4242", is_favorite=False)
        assert ok_server.commands[0]["args"] == {"id": "4242", "is_favorite": False}

    @pytest.mark.asyncio
    async def test_update_without_changes(self, ok_server):
        with pytest.raises(ValueError):
            await filters.update_filter(ok_server.client(), "4242")


class TestNotifications:
    @pytest.mark.asyncio
    async def test_fetch_newest_first(self):
        server = FakeSyncServer(_reading({"live_notifications": [
            {"id": "1", "notification_type": "note_added", "created_at": "2026-01-01T10:00:00Z"},
            {"id": "2", "notification_type": "share_invitation_sent", "created_at": "2026-02-01T10:00:00Z",
             "is_unread": True, "from_uid": "77", "from_user": {"full_name": "Sam"},
             "invitation_id": 555, "invitation_secret": "s3cret"},
            {"id": "3", "notification_type": "item_assigned", "created_at": "2026-03-01T10:00:00Z",
             "is_deleted": True},
        ]}))

        found = await notifications.fetch_notifications(server.client())
        assert [n.id for n in found] == ["2", "1"]
        assert found[0].from_user.name == "Sam"
        assert found[0].invitation_id == "555"

    @pytest.mark.asyncio
    async def test_mark_read_and_unread(self, ok_server):
        client = ok_server.client()
        await notifications.mark_read(client, "9")
        await notifications.mark_unread(client, "9")
        await notifications.mark_all_read(client)

        assert [(c["type"], c["args"]) for c in ok_server.commands] == [
            ("live_notifications_mark_read", {"ids": ["9"]}),
            ("live_notifications_mark_unread", {"ids": ["9"]}),
            ("live_notifications_mark_read_all", {}),
        ]

    @pytest.mark.asyncio
    async def test_invitation_id_sent_as_int(self, ok_server):
        await notifications.accept_invitation(ok_server.client(), "555", "s3cret")
        await notifications.reject_invitation(ok_server.client(), "556", "other")

        assert ok_server.commands[0]["type"] == "accept_invitation"
        assert ok_server.commands[0]["args"] == {"invitation_id": 555, "invitation_secret": "s3cret"}
        assert ok_server.commands[1]["type"] == "reject_invitation"
        assert ok_server.commands[1]["args"]["invitation_id"] == 556


STATS = {
    "karma": 5234.0,
    "karma_trend": "up",
    "completed_count": 812,
    "days_items": [{"date": "2026-10-17", "total_completed": 3}],
    "week_items": [{"from": "2026-10-12", "to": "2026-10-18", "total_completed": 14}],
    "goals": {
        "daily_goal": 5,
        "weekly_goal": 25,
        "current_daily_streak": {"count": 4, "start": "2026-10-14", "end": "2026-10-17"},
        "max_daily_streak": {"count": 30, "start": "2026-01-01", "end": "2026-01-30"},
        "vacation_mode": 0,
        "karma_disabled": 0,
        "ignore_days": [6, 7],
    },
}


class TestGoals:
    @pytest.mark.asyncio
    async def test_fetch_stats(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=STATS)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            stats = await goals.fetch_productivity_stats(client, "tok-1234567", url="https://stats.test/")

        assert seen[0].headers["Authorization"] == "Bearer tok-1234567"
        assert stats.karma == 5234.0
        assert stats.goals.daily_goal == 5
        assert stats.goals.current_daily_streak.count == 4
        assert stats.goals.current_weekly_streak.count == 0
        assert stats.week_items[0].from_date == "2026-10-12"

    @pytest.mark.asyncio
    async def test_fetch_stats_http_error(self):
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(401))) as client:
            with pytest.raises(SyncTransportError) as exc_info:
                await goals.fetch_productivity_stats(client, "tok-1234567", url="https://stats.test/")
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_fetch_stats_error_body(self):
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json={"error": "Forbidden"}))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(SyncBatchError):
                await goals.fetch_productivity_stats(client, "tok-1234567", url="https://stats.test/")

    @pytest.mark.asyncio
    async def test_update_goals_sends_flags_as_ints(self, ok_server):
        await goals.update_goals(ok_server.client(), daily_goal=8, vacation_mode=True, karma_disabled=False)
        assert ok_server.commands[0]["type"] == "update_goals"
        assert ok_server.commands[0]["args"] == {"daily_goal": 8, "vacation_mode": 1, "karma_disabled": 0}

    @pytest.mark.asyncio
    async def test_update_goals_without_changes(self, ok_server):
        with pytest.raises(ValueError, match="No goals to update"):
            await goals.update_goals(ok_server.client())


class TestUserSettings:
    @pytest.mark.asyncio
    async def test_fetch_settings(self):
        server = FakeSyncServer(_reading({
            "user": {"id": 1, "tz_info": {"timezone": "Europe/Oslo"}, "time_format": 1, "start_day": 7,
                     "theme_id": "3"},
            "user_settings": {"reminder_push": False},
        }))

        current = await user_settings.fetch_user_settings(server.client())
        assert current.timezone == "Europe/Oslo"
        assert current.time_format == 1
        assert current.start_day == 7
        assert current.theme == 3
        assert current.reminder_push is False
        assert current.reminder_desktop is True

    @pytest.mark.asyncio
    async def test_fetch_user(self):
        server = FakeSyncServer(_reading({"user": {"id": 12345, "email": "sam@example.com", "full_name": "Sam"}}))
        user = await user_settings.fetch_user(server.client())
        assert user.id == "12345"
        assert user.email == "sam@example.com"

    def test_changes_split_into_two_commands(self):
        commands = user_settings.build_settings_commands(
            {"timezone": "UTC", "theme": 2, "reminder_email": True, "start_day": None}
        )
        assert [(c.type, c.args) for c in commands] == [
            ("user_update", {"timezone": "UTC", "theme_id": "2"}),
            ("user_settings_update", {"reminder_email": True}),
        ]

    def test_unknown_setting(self):
        with pytest.raises(ValueError, match="Unknown settings"):
            user_settings.build_settings_commands({"colour": "blue"})

    @pytest.mark.asyncio
    async def test_update_sends_one_batch(self, ok_server):
        await user_settings.update_user_settings(ok_server.client(), time_format=1, reminder_push=False)
        assert len(ok_server.requests) == 1
        assert [c["type"] for c in ok_server.commands] == ["user_update", "user_settings_update"]

    @pytest.mark.asyncio
    async def test_update_without_changes(self, ok_server):
        with pytest.raises(ValueError, match="No settings to update"):
            await user_settings.update_user_settings(ok_server.client(), timezone=None)
        assert ok_server.requests == []


class TestTasks:
    @pytest.mark.asyncio
    async def test_complete_forever(self, ok_server):
        await tasks.complete_task_forever(ok_server.client(), "123")
        assert ok_server.commands[0]["type"] == "item_complete"
        assert ok_server.commands[0]["args"] == {"id": "123"}
