"""Productivity stats and karma goals"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

import settings
from sync import SyncClient, SyncCommand
from sync.exceptions import SyncBatchError, SyncTransportError

logger = logging.getLogger(__name__)


class Streak(BaseModel):
    count: int = 0
    start: str = ""
    end: str = ""


class Goals(BaseModel):
    daily_goal: int = 0
    weekly_goal: int = 0
    current_daily_streak: Streak = Field(default_factory=Streak)
    current_weekly_streak: Streak = Field(default_factory=Streak)
    max_daily_streak: Streak = Field(default_factory=Streak)
    max_weekly_streak: Streak = Field(default_factory=Streak)
    vacation_mode: bool = False
    karma_disabled: bool = False
    ignore_days: List[int] = Field(default_factory=list)


class DayStats(BaseModel):
    date: str
    total_completed: int = 0


class WeekStats(BaseModel):
    from_date: str = Field(alias="from")
    to_date: str = Field(alias="to")
    total_completed: int = 0


class ProductivityStats(BaseModel):
    karma: float = 0
    karma_trend: str = "none"
    karma_last_update: float = 0
    completed_count: int = 0
    days_items: List[DayStats] = Field(default_factory=list)
    week_items: List[WeekStats] = Field(default_factory=list)
    goals: Goals = Field(default_factory=Goals)


def _streak(value: Any) -> Streak:
    if not isinstance(value, dict):
        return Streak()
    return Streak(
        count=int(value.get("count") or 0),
        start=str(value.get("start") or ""),
        end=str(value.get("end") or ""),
    )


def parse_productivity_stats(data: Dict[str, Any]) -> ProductivityStats:
    goals = data.get("goals") or {}
    return ProductivityStats(
        karma=float(data.get("karma") or 0),
        karma_trend=str(data.get("karma_trend") or "none"),
        karma_last_update=float(data.get("karma_last_update") or 0),
        completed_count=int(data.get("completed_count") or 0),
        days_items=[DayStats(**item) for item in data.get("days_items") or []],
        week_items=[WeekStats(**item) for item in data.get("week_items") or []],
        goals=Goals(
            daily_goal=int(goals.get("daily_goal") or 0),
            weekly_goal=int(goals.get("weekly_goal") or 0),
            current_daily_streak=_streak(goals.get("current_daily_streak")),
            current_weekly_streak=_streak(goals.get("current_weekly_streak")),
            max_daily_streak=_streak(goals.get("max_daily_streak")),
            max_weekly_streak=_streak(goals.get("max_weekly_streak")),
            vacation_mode=bool(goals.get("vacation_mode")),
            karma_disabled=bool(goals.get("karma_disabled")),
            ignore_days=list(goals.get("ignore_days") or []),
        ),
    )


async def fetch_productivity_stats(
    http_client: httpx.AsyncClient,
    token: str,
    url: str = settings.STATS_URL,
) -> ProductivityStats:
    """Karma, completion history and goal streaks

    Raises:
        SyncTransportError: Network failure or non-2xx status
        SyncBatchError: The body carries an error
    """
    try:
        response = await http_client.get(url, headers={"Authorization": f"Bearer {token}"})
    except httpx.RequestError as e:
        raise SyncTransportError(f"Failed to fetch productivity stats: {e}") from e

    if not response.is_success:
        raise SyncTransportError(
            f"Failed to fetch productivity stats: {response.status_code}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as e:
        raise SyncTransportError("Productivity stats returned an invalid JSON body") from e

    if isinstance(data, dict) and data.get("error"):
        raise SyncBatchError(f"Productivity stats API error: {data['error']}")

    return parse_productivity_stats(data)


async def update_goals(
    client: SyncClient,
    daily_goal: Optional[int] = None,
    weekly_goal: Optional[int] = None,
    vacation_mode: Optional[bool] = None,
    karma_disabled: Optional[bool] = None,
    ignore_days: Optional[List[int]] = None,
) -> None:
    """Change karma goals; flags are sent as 0/1"""
    args: Dict[str, Any] = {}
    if daily_goal is not None:
        args["daily_goal"] = daily_goal
    if weekly_goal is not None:
        args["weekly_goal"] = weekly_goal
    if vacation_mode is not None:
        args["vacation_mode"] = 1 if vacation_mode else 0
    if karma_disabled is not None:
        args["karma_disabled"] = 1 if karma_disabled else 0
    if ignore_days is not None:
        args["ignore_days"] = ignore_days

    if not args:
        raise ValueError("No goals to update")

    await client.execute([SyncCommand("update_goals", args)])
    logger.info(f"Updated goals: {sorted(args)}")
