"""Change-window construction from weekly rule templates.

Each rule describes one weekly window relative to the season start:

    start = season_start + (week - 1) * 7 days + start_day_of_week, at start_time
    end   = season_start + (week - 1) * 7 days + end_day_of_week,   at end_time

Times are HH:MM in UTC. Windows are named "Week N".

Usage:
    from encore.models.windows import build_change_windows, default_rules

    windows = build_change_windows(season_start, default_rules("Live"))
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Union

from pydantic import BaseModel, Field, field_validator

from encore.config import DEFAULT_WINDOW_RULES, UNLIMITED_CHANGES
from encore.data.schemas import ChangeWindow, SeasonType


class ChangeWindowRule(BaseModel):
    """Weekly window template."""

    week: int = Field(ge=1)
    start_day_of_week: int = Field(ge=0, le=6)
    end_day_of_week: int = Field(ge=0, le=6)
    start_time: str = "00:00"
    end_time: str = "23:59"
    changes: int = Field(ge=UNLIMITED_CHANGES)

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        time.fromisoformat(value)
        return value


def default_rules(season_type: Union[SeasonType, str]) -> List[ChangeWindowRule]:
    """Default rule templates for a season type."""
    key = SeasonType(season_type).value
    return [ChangeWindowRule.model_validate(r) for r in DEFAULT_WINDOW_RULES[key]]


def _at(day: date, hhmm: str) -> datetime:
    return datetime.combine(day, time.fromisoformat(hhmm), tzinfo=timezone.utc)


def build_change_windows(
    season_start: Union[date, datetime],
    rules: Iterable[ChangeWindowRule],
) -> List[ChangeWindow]:
    """Materialize rule templates into dated windows, ordered by start."""
    start_day = season_start.date() if isinstance(season_start, datetime) else season_start

    windows = []
    for rule in rules:
        week_start = start_day + timedelta(days=(rule.week - 1) * 7)
        windows.append(ChangeWindow(
            name=f"Week {rule.week}",
            start=_at(week_start + timedelta(days=rule.start_day_of_week), rule.start_time),
            end=_at(week_start + timedelta(days=rule.end_day_of_week), rule.end_time),
            allowed_changes=rule.changes,
        ))
    return sorted(windows, key=lambda w: w.start)
