"""Tests for change-window construction."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from encore.data.schemas import SeasonType
from encore.models import ChangeWindowRule, build_change_windows, default_rules


class TestBuildChangeWindows:
    def test_week_offsets(self):
        rules = [
            ChangeWindowRule(week=2, start_day_of_week=0, end_day_of_week=1,
                             start_time="06:00", end_time="22:30", changes=3),
        ]
        [window] = build_change_windows(date(2025, 6, 2), rules)

        assert window.name == "Week 2"
        assert window.start == datetime(2025, 6, 9, 6, 0, tzinfo=timezone.utc)
        assert window.end == datetime(2025, 6, 10, 22, 30, tzinfo=timezone.utc)
        assert window.allowed_changes == 3

    def test_sorted_by_start(self):
        rules = [
            ChangeWindowRule(week=3, start_day_of_week=0, end_day_of_week=1, changes=1),
            ChangeWindowRule(week=1, start_day_of_week=0, end_day_of_week=6, changes=-1),
        ]
        windows = build_change_windows(datetime(2025, 6, 2, 15, tzinfo=timezone.utc), rules)
        assert [w.name for w in windows] == ["Week 1", "Week 3"]
        assert windows[0].is_unlimited

    def test_bad_time_rejected(self):
        with pytest.raises(ValidationError):
            ChangeWindowRule(week=1, start_day_of_week=0, end_day_of_week=1,
                             start_time="25:99", changes=1)


class TestDefaultRules:
    def test_live_first_week_unlimited(self):
        rules = default_rules(SeasonType.LIVE)
        assert rules[0].week == 1
        assert rules[0].changes == -1
        assert all(r.changes >= 1 for r in rules[1:])

    def test_off_season_accepts_string(self):
        assert [r.week for r in default_rules("OffSeason")] == [1, 2, 4, 6]
