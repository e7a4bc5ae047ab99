"""Pytest fixtures/config for Encore tests."""

import os
import sys
from datetime import datetime, timedelta, timezone

import pytest


def pytest_sessionstart(session) -> None:  # type: ignore[unused-argument]
    repo_root = os.path.dirname(os.path.dirname(__file__))
    src_path = os.path.join(repo_root, "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


SEASON_START = datetime(2025, 6, 2, tzinfo=timezone.utc)


class ZeroRNG:
    """Random source that never perturbs scores."""

    def uniform(self, low, high):
        return 0.0


def make_entities(count, live=True, year=None, prefix="corps"):
    from encore.data.schemas import Entity

    return [
        Entity(
            id=f"{prefix}-{i}",
            name=f"Corps {i}",
            placement=i,
            point_cost=max(1, 26 - i),
            year=year,
            live=live,
        )
        for i in range(1, count + 1)
    ]


@pytest.fixture
def zero_rng():
    return ZeroRNG()


@pytest.fixture
def entity_factory():
    return make_entities


@pytest.fixture
def store(tmp_path):
    from encore.data import SeasonStore

    return SeasonStore(str(tmp_path / "encore.sqlite"))


@pytest.fixture
def windows():
    from encore.data.schemas import ChangeWindow

    return [
        ChangeWindow(
            name="Week 1",
            start=SEASON_START,
            end=SEASON_START + timedelta(days=6, hours=23, minutes=59),
            allowed_changes=-1,
        ),
        ChangeWindow(
            name="Week 2",
            start=SEASON_START + timedelta(days=7),
            end=SEASON_START + timedelta(days=8, hours=23, minutes=59),
            allowed_changes=2,
        ),
    ]


@pytest.fixture
def season(store, windows):
    from encore.data.schemas import SeasonType
    from encore.pipeline import create_season

    return create_season(
        "Summer Tour",
        SeasonType.LIVE,
        SEASON_START,
        SEASON_START + timedelta(days=70),
        change_windows=windows,
        season_id="live-2025",
        store=store,
    )


@pytest.fixture
def pool(store):
    entities = make_entities(25)
    store.add_entities(entities)
    return entities


def _populate(store, season_id, competitive=0, soundsport=0, pool_size=25):
    """Add entries with one corps per roster; returns the user ids."""
    from encore.data.schemas import Entry, EntryStatus, Roster

    user_ids = []
    groups = [("c", competitive, EntryStatus.COMPETITIVE), ("s", soundsport, EntryStatus.SOUNDSPORT)]
    for prefix, count, status in groups:
        for i in range(count):
            user_id = f"{prefix}{i:02d}"
            entity_id = f"corps-{i % pool_size + 1}"
            roster = Roster()
            for caption in ("General Effect 1", "Visual Proficiency", "Music Brass"):
                roster = roster.assign(caption, entity_id)
            store.add_entry(Entry(
                user_id=user_id,
                season_id=season_id,
                display_name=f"Corps Fan {user_id}",
                status=status,
                roster=roster,
            ))
            user_ids.append(user_id)
    return user_ids


@pytest.fixture
def populate():
    return _populate


@pytest.fixture
def fixed_clock():
    moment = datetime(2025, 6, 10, 19, 0, tzinfo=timezone.utc)
    return lambda: moment
