"""Tests for SeasonStore, DataReader and SeasonDatabaseManager."""

import sqlite3
from datetime import datetime, timezone

import pytest

from encore.data import DataReader, SeasonStore
from encore.data.schemas import (
    ChampionshipStage,
    ChangeWindow,
    Entry,
    EntryStatus,
    ParticipantScore,
    Roster,
    Season,
    SeasonStatus,
    SeasonType,
    ShowResult,
)
from encore.errors import (
    DuplicateEntryError,
    DuplicateNameError,
    DuplicateResultError,
    EntryNotFoundError,
    SeasonNotFoundError,
)


def _result(result_id, season_id="live-2025", total=50.0):
    return ShowResult(
        id=result_id,
        season_id=season_id,
        scores={"u1": ParticipantScore(total=total, status=EntryStatus.COMPETITIVE)},
        created_at=datetime(2025, 6, 10, tzinfo=timezone.utc),
    )


def _entry(user_id, display_name, season_id="live-2025"):
    return Entry(
        user_id=user_id,
        season_id=season_id,
        display_name=display_name,
        status=EntryStatus.COMPETITIVE,
    )


class TestSchemaInit:
    """Database file and tables are created on first use."""

    def test_tables_created(self, store):
        conn = sqlite3.connect(store.db_path)
        try:
            names = {
                row[0] for row in
                conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            }
        finally:
            conn.close()
        assert {"seasons", "entities", "entries", "show_results"} <= names

    def test_reader_requires_existing_database(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DataReader(str(tmp_path / "missing.sqlite"))


class TestSeasons:
    """Season round trip and stage compare-and-swap."""

    def test_round_trip(self, store, season):
        loaded = store.get_season(season.id)
        assert loaded == season
        assert loaded.rules.change_windows[0].name == "Week 1"
        assert loaded.championship_stage == ChampionshipStage.REGULAR
        assert loaded.status == SeasonStatus.PENDING

    def test_missing_season_raises(self, store):
        with pytest.raises(SeasonNotFoundError):
            store.get_season("nope")

    def test_off_season_requires_year(self):
        with pytest.raises(ValueError):
            Season(
                id="off",
                name="Classic",
                type=SeasonType.OFF_SEASON,
                start_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
                end_date=datetime(2025, 2, 1, tzinfo=timezone.utc),
            )

    def test_naive_dates_rejected(self):
        with pytest.raises(ValueError):
            Season(
                id="naive",
                name="Naive",
                start_date=datetime(2025, 6, 2),
                end_date=datetime(2025, 8, 9),
            )

    def test_naive_window_rejected(self):
        with pytest.raises(ValueError):
            ChangeWindow(
                name="Week 1",
                start=datetime(2025, 6, 2),
                end=datetime(2025, 6, 8),
                allowed_changes=-1,
            )

    def test_stage_cas_succeeds_from_expected(self, store, season):
        assert store.update_season_stage(
            season.id, ChampionshipStage.PRELIMS, ChampionshipStage.REGULAR
        )
        assert store.get_season(season.id).championship_stage == ChampionshipStage.PRELIMS

    def test_stage_cas_fails_on_mismatch(self, store, season):
        moved = store.update_season_stage(
            season.id, ChampionshipStage.FINALS, ChampionshipStage.SEMIFINALS
        )
        assert moved is False
        assert store.get_season(season.id).championship_stage == ChampionshipStage.REGULAR


class TestEntities:
    """Entity pools per season type."""

    def test_live_pool_sorted_by_placement(self, store, season, entity_factory):
        store.add_entities(reversed(entity_factory(5)))
        pool = store.list_entities(season)
        assert [e.id for e in pool] == [f"corps-{i}" for i in range(1, 6)]
        assert all(e.live for e in pool)

    def test_off_season_pool_uses_historical_year(self, store, entity_factory):
        store.add_entities(entity_factory(3))
        store.add_entities(entity_factory(4, live=False, year=2019, prefix="c19"))
        store.add_entities(entity_factory(2, live=False, year=2018, prefix="c18"))
        off = store.add_season(Season(
            id="off-2019",
            name="Classic 2019",
            type=SeasonType.OFF_SEASON,
            historical_year=2019,
            start_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
            end_date=datetime(2025, 2, 1, tzinfo=timezone.utc),
        ))
        assert [e.id for e in store.list_entities(off)] == [f"c19-{i}" for i in range(1, 5)]

    def test_get_entity(self, store, entity_factory):
        store.add_entities(entity_factory(2))
        assert store.get_entity("corps-2").placement == 2
        assert store.get_entity("corps-9") is None


class TestEntries:
    """Entry persistence and uniqueness."""

    def test_roster_and_counters_round_trip(self, store, season):
        store.add_entry(_entry("u1", "Blue Thunder"))
        entry = store.get_entry(season.id, "u1")
        updated = entry.model_copy(update={
            "roster": Roster().assign("Color Guard", "corps-3"),
            "changes_used": {"Week 2": 1},
        })
        store.save_roster(updated)

        loaded = store.get_entry(season.id, "u1")
        assert loaded.roster.get("Color Guard") == "corps-3"
        assert loaded.roster.get("Music Brass") is None
        assert loaded.changes_used == {"Week 2": 1}

    def test_duplicate_user_rejected(self, store, season):
        store.add_entry(_entry("u1", "Blue Thunder"))
        with pytest.raises(DuplicateEntryError):
            store.add_entry(_entry("u1", "Other Name"))

    def test_duplicate_display_name_rejected(self, store, season):
        store.add_entry(_entry("u1", "Blue Thunder"))
        with pytest.raises(DuplicateNameError):
            store.add_entry(_entry("u2", "Blue Thunder"))
        assert store.is_display_name_taken(season.id, "Blue Thunder")
        assert not store.is_display_name_taken(season.id, "Red Storm")

    def test_missing_entry_raises(self, store, season):
        with pytest.raises(EntryNotFoundError):
            store.get_entry(season.id, "ghost")

    def test_participants_ordered_by_user(self, store, season):
        store.add_entry(_entry("u2", "B"))
        store.add_entry(_entry("u1", "A"))
        assert [e.user_id for e in store.list_participants(season.id)] == ["u1", "u2"]


class TestShowResults:
    """Append-only show archive."""

    def test_put_and_get(self, store, season):
        store.put_show_result(season.id, "prelims", _result("prelims"))
        loaded = store.get_show_result(season.id, "prelims")
        assert loaded.scores["u1"].total == 50.0
        assert loaded.scores["u1"].status == EntryStatus.COMPETITIVE

    def test_missing_result_is_none(self, store, season):
        assert store.get_show_result(season.id, "finals") is None

    def test_duplicate_id_never_overwrites(self, store, season):
        store.put_show_result(season.id, "prelims", _result("prelims", total=50.0))
        with pytest.raises(DuplicateResultError):
            store.put_show_result(season.id, "prelims", _result("prelims", total=99.0))
        assert store.get_show_result(season.id, "prelims").scores["u1"].total == 50.0

    def test_stage_id_must_match_result(self, store, season):
        with pytest.raises(ValueError):
            store.put_show_result(season.id, "finals", _result("prelims"))


class TestTransaction:
    """Writes inside a failed transaction roll back together."""

    def test_rollback_on_error(self, store, season):
        with pytest.raises(RuntimeError):
            with store.transaction() as conn:
                store.put_show_result(season.id, "prelims", _result("prelims"), conn=conn)
                store.update_season_stage(
                    season.id, ChampionshipStage.PRELIMS, ChampionshipStage.REGULAR, conn=conn
                )
                raise RuntimeError("boom")

        assert store.get_show_result(season.id, "prelims") is None
        assert store.get_season(season.id).championship_stage == ChampionshipStage.REGULAR

    def test_original_error_kept_when_sqlite_already_rolled_back(self, store, season):
        with pytest.raises(RuntimeError, match="disk full"):
            with store.transaction() as conn:
                store.put_show_result(season.id, "prelims", _result("prelims"), conn=conn)
                # Stands in for SQLite aborting the transaction on its own
                conn.execute("ROLLBACK")
                raise RuntimeError("disk full")

        assert store.get_show_result(season.id, "prelims") is None
