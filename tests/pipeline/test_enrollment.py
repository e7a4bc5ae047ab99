"""Tests for season creation, joining, and roster edits."""

from datetime import datetime, timedelta, timezone

import pytest

from encore.data.schemas import EntryStatus, SeasonStatus, SeasonType
from encore.errors import (
    DuplicateEntryError,
    DuplicateNameError,
    EntryNotFoundError,
    InvalidRosterError,
    LockedRosterError,
    SeasonNotFoundError,
)
from encore.pipeline import (
    create_season,
    edit_roster,
    entry_status_for,
    join_season,
    validate_roster,
)

START = datetime(2025, 6, 2, tzinfo=timezone.utc)
WEEK_1 = START + timedelta(days=2)
WEEK_2 = START + timedelta(days=7, hours=12)


class TestCreateSeason:
    def test_default_windows_from_type(self, store):
        season = create_season("Summer Tour", "Live", START, START + timedelta(days=70), store=store)

        assert season.id.startswith("live-")
        assert season.status == SeasonStatus.PENDING
        names = [w.name for w in season.rules.change_windows]
        assert names == [f"Week {i}" for i in range(1, 7)]
        assert season.rules.change_windows[0].is_unlimited
        assert store.get_season(season.id) == season

    def test_naive_start_rejected(self, store):
        with pytest.raises(ValueError):
            create_season("Summer Tour", "Live", datetime(2025, 6, 2), datetime(2025, 8, 9), store=store)
        assert store.list_seasons() == []

    def test_off_season_needs_year(self, store):
        with pytest.raises(ValueError):
            create_season("Classic", SeasonType.OFF_SEASON, START, START + timedelta(days=30), store=store)


class TestJoinSeason:
    """Entry status and name uniqueness at join time."""

    def test_early_join_is_competitive(self, store, season):
        entry = join_season(season.id, "u1", "  Blue Thunder ", now=START + timedelta(hours=23), store=store)
        assert entry.status == EntryStatus.COMPETITIVE
        assert entry.display_name == "Blue Thunder"
        assert store.get_entry(season.id, "u1").roster.assigned_ids() == []

    def test_late_join_is_soundsport(self, store, season):
        entry = join_season(season.id, "u1", "Blue Thunder", now=START + timedelta(hours=25), store=store)
        assert entry.status == EntryStatus.SOUNDSPORT

    def test_active_season_join_is_soundsport(self, store, season):
        store.update_season_status(season.id, SeasonStatus.ACTIVE)
        assert entry_status_for(store.get_season(season.id), START) == EntryStatus.SOUNDSPORT

    def test_blank_name_rejected(self, store, season):
        with pytest.raises(ValueError):
            join_season(season.id, "u1", "   ", now=START, store=store)

    def test_duplicate_name_rejected(self, store, season):
        join_season(season.id, "u1", "Blue Thunder", now=START, store=store)
        with pytest.raises(DuplicateNameError):
            join_season(season.id, "u2", "Blue Thunder ", now=START, store=store)

    def test_duplicate_user_rejected(self, store, season):
        join_season(season.id, "u1", "Blue Thunder", now=START, store=store)
        with pytest.raises(DuplicateEntryError):
            join_season(season.id, "u1", "Red Storm", now=START, store=store)

    def test_unknown_season(self, store):
        with pytest.raises(SeasonNotFoundError):
            join_season("nope", "u1", "Blue Thunder", now=START, store=store)


class TestEditRoster:
    """Edits combine the lock check, pool check, and point cap."""

    @pytest.fixture
    def joined(self, store, season, pool):
        return join_season(season.id, "u1", "Blue Thunder", now=START, store=store)

    def test_assign_in_unlimited_window(self, store, season, joined):
        entry = edit_roster(season.id, "u1", "Color Guard", "corps-1", now=WEEK_1, store=store)

        assert entry.roster.get("Color Guard") == "corps-1"
        stored = store.get_entry(season.id, "u1")
        assert stored.roster.get("Color Guard") == "corps-1"
        assert stored.changes_used == {}

    def test_point_cap_enforced(self, store, season, joined):
        captions = ["General Effect 1", "General Effect 2", "Visual Proficiency",
                    "Visual Analysis", "Color Guard", "Music Brass"]
        # corps-1..6 cost 25+24+23+22+21+20 = 135
        for i, caption in enumerate(captions, start=1):
            edit_roster(season.id, "u1", caption, f"corps-{i}", now=WEEK_1, store=store)

        with pytest.raises(InvalidRosterError):
            edit_roster(season.id, "u1", "Music Analysis", "corps-7", now=WEEK_1, store=store)

        stored = store.get_entry(season.id, "u1")
        assert stored.roster.get("Music Analysis") is None
        assert len(stored.roster.assigned_ids()) == 6

    def test_unknown_entity_rejected(self, store, season, joined):
        with pytest.raises(InvalidRosterError):
            edit_roster(season.id, "u1", "Color Guard", "corps-99", now=WEEK_1, store=store)

    def test_unknown_caption_rejected(self, store, season, joined):
        with pytest.raises(InvalidRosterError):
            edit_roster(season.id, "u1", "Drum Major", "corps-1", now=WEEK_1, store=store)

    def test_clearing_a_caption(self, store, season, joined):
        edit_roster(season.id, "u1", "Color Guard", "corps-1", now=WEEK_1, store=store)
        entry = edit_roster(season.id, "u1", "Color Guard", None, now=WEEK_1, store=store)
        assert entry.roster.get("Color Guard") is None

    def test_quota_never_exceeded(self, store, season, joined):
        edit_roster(season.id, "u1", "Color Guard", "corps-1", now=WEEK_2, store=store)
        edit_roster(season.id, "u1", "Color Guard", "corps-2", now=WEEK_2, store=store)

        with pytest.raises(LockedRosterError) as exc_info:
            edit_roster(season.id, "u1", "Color Guard", "corps-3", now=WEEK_2, store=store)

        assert exc_info.value.window == "Week 2"
        stored = store.get_entry(season.id, "u1")
        assert stored.changes_used == {"Week 2": 2}
        assert stored.roster.get("Color Guard") == "corps-2"

    def test_rejected_edit_does_not_use_quota(self, store, season, joined):
        with pytest.raises(InvalidRosterError):
            edit_roster(season.id, "u1", "Color Guard", "corps-99", now=WEEK_2, store=store)
        assert store.get_entry(season.id, "u1").changes_used == {}

    def test_corps_leaving_pool_does_not_block_other_edits(self, store, season, joined, entity_factory):
        edit_roster(season.id, "u1", "Color Guard", "corps-1", now=WEEK_1, store=store)
        retired = entity_factory(1)[0].model_copy(update={"live": False})
        store.add_entities([retired])

        entry = edit_roster(season.id, "u1", "Music Brass", "corps-2", now=WEEK_1, store=store)
        assert entry.roster.get("Color Guard") == "corps-1"

        entry = edit_roster(season.id, "u1", "Color Guard", None, now=WEEK_1, store=store)
        assert entry.roster.assigned_ids() == ["corps-2"]

    def test_retired_corps_cannot_be_drafted(self, store, season, joined, entity_factory):
        store.add_entities([entity_factory(1)[0].model_copy(update={"live": False})])
        with pytest.raises(InvalidRosterError):
            edit_roster(season.id, "u1", "Color Guard", "corps-1", now=WEEK_1, store=store)

    def test_locked_between_windows(self, store, season, joined):
        with pytest.raises(LockedRosterError):
            edit_roster(season.id, "u1", "Color Guard", "corps-1",
                        now=START + timedelta(days=20), store=store)

    def test_not_joined(self, store, season, pool):
        with pytest.raises(EntryNotFoundError):
            edit_roster(season.id, "ghost", "Color Guard", "corps-1", now=WEEK_1, store=store)


class TestValidateRoster:
    def test_returns_cost(self, entity_factory):
        from encore.data.schemas import Roster

        pool = {e.id: e for e in entity_factory(25)}
        roster = Roster().assign("Color Guard", "corps-1").assign("Music Brass", "corps-25")
        assert validate_roster(roster, pool, 150) == 26

    def test_default_checks_every_assignment(self, entity_factory):
        from encore.data.schemas import Roster

        pool = {e.id: e for e in entity_factory(3)}
        roster = Roster().assign("Color Guard", "gone").assign("Music Brass", "corps-1")
        with pytest.raises(InvalidRosterError):
            validate_roster(roster, pool, 150)
        assert validate_roster(roster, pool, 150, check_ids=["corps-1"]) == 25
