"""Season store - the document-store facade used by the lifecycle controller.

Combines DataReader (reads) and SeasonDatabaseManager (writes) behind the
storage operations the controller depends on:

    list_participants(season_id) -> [Entry]
    get_entity(id) -> Entity
    get_show_result(season_id, stage_id) -> ShowResult | None
    put_show_result(season_id, stage_id, result)     (atomic, append-only)
    update_season_stage(season_id, new, expected)    (compare-and-swap)

Every method accepts an optional connection so a caller holding a
transaction() can run several of them atomically.

Key Classes:
    SeasonStore - Facade over reader and database manager

Usage:
    from encore.data import SeasonStore

    store = SeasonStore("storage/encore.sqlite")
    with store.transaction() as conn:
        season = store.get_season("s1", conn=conn)
        store.put_show_result(season.id, "prelims", result, conn=conn)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from encore.config import DEFAULT_DB_PATH
from encore.data.db_manager import SeasonDatabaseManager
from encore.data.reader import DataReader
from encore.data.schemas import (
    ChampionshipStage,
    Entity,
    Entry,
    Season,
    SeasonStatus,
    ShowResult,
)
from encore.errors import EntryNotFoundError, SeasonNotFoundError

logger = logging.getLogger(__name__)


class SeasonStore:
    """Storage facade for seasons, entries, entities, and show results.

    Example:
        store = SeasonStore()
        entries = store.list_participants("s1")
    """

    def __init__(self, db_path: Optional[str] = None):
        """Initialize store; creates the database schema if needed.

        Args:
            db_path: Path to SQLite database. Uses default if not specified.
        """
        self.db_path = Path(db_path or DEFAULT_DB_PATH)
        self.db = SeasonDatabaseManager(str(self.db_path))
        self.reader = DataReader(str(self.db_path))

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Write transaction; see SeasonDatabaseManager.transaction()."""
        with self.db.transaction() as conn:
            yield conn

    # === Seasons ===

    def get_season(self, season_id: str, conn: Optional[sqlite3.Connection] = None) -> Season:
        """Get a season.

        Raises:
            SeasonNotFoundError: No season with this id.
        """
        season = self.reader.get_season(season_id, conn=conn)
        if season is None:
            raise SeasonNotFoundError(f"Season not found: {season_id}", {"season_id": season_id})
        return season

    def list_seasons(self) -> List[Season]:
        return self.reader.list_seasons()

    def add_season(self, season: Season) -> Season:
        """Persist a new season."""
        with self.transaction() as conn:
            self.db.insert_season(conn, season)
        logger.info(f"Created season {season.id} ({season.name})")
        return season

    def update_season_stage(
        self,
        season_id: str,
        new_stage: ChampionshipStage,
        expected_stage: ChampionshipStage,
        conn: Optional[sqlite3.Connection] = None,
    ) -> bool:
        """Conditionally advance championship_stage (compare-and-swap)."""
        if conn is not None:
            return self.db.update_season_stage(conn, season_id, new_stage, expected_stage)
        with self.transaction() as own:
            return self.db.update_season_stage(own, season_id, new_stage, expected_stage)

    def update_season_status(
        self,
        season_id: str,
        status: SeasonStatus,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        if conn is not None:
            self.db.update_season_status(conn, season_id, status)
            return
        with self.transaction() as own:
            self.db.update_season_status(own, season_id, status)

    # === Entities ===

    def get_entity(self, entity_id: str, conn: Optional[sqlite3.Connection] = None) -> Optional[Entity]:
        return self.reader.get_entity(entity_id, conn=conn)

    def list_entities(self, season: Season, conn: Optional[sqlite3.Connection] = None) -> List[Entity]:
        return self.reader.list_entities(season, conn=conn)

    def add_entities(self, entities: Iterable[Entity]) -> int:
        with self.transaction() as conn:
            return self.db.upsert_entities(conn, entities)

    # === Entries ===

    def list_participants(self, season_id: str, conn: Optional[sqlite3.Connection] = None) -> List[Entry]:
        return self.reader.list_participants(season_id, conn=conn)

    def get_entry(
        self,
        season_id: str,
        user_id: str,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Entry:
        """Get a participant's entry.

        Raises:
            EntryNotFoundError: User has not joined the season.
        """
        entry = self.reader.get_entry(season_id, user_id, conn=conn)
        if entry is None:
            raise EntryNotFoundError(
                f"No entry for user {user_id} in season {season_id}",
                {"season_id": season_id, "user_id": user_id},
            )
        return entry

    def add_entry(self, entry: Entry, conn: Optional[sqlite3.Connection] = None) -> Entry:
        if conn is not None:
            self.db.insert_entry(conn, entry)
            return entry
        with self.transaction() as own:
            self.db.insert_entry(own, entry)
        return entry

    def save_roster(self, entry: Entry, conn: Optional[sqlite3.Connection] = None) -> Entry:
        """Persist roster and change counters together."""
        if conn is not None:
            self.db.update_entry_roster(conn, entry)
            return entry
        with self.transaction() as own:
            self.db.update_entry_roster(own, entry)
        return entry

    def is_display_name_taken(
        self,
        season_id: str,
        display_name: str,
        conn: Optional[sqlite3.Connection] = None,
    ) -> bool:
        return self.reader.is_display_name_taken(season_id, display_name, conn=conn)

    # === Show results ===

    def get_show_result(
        self,
        season_id: str,
        stage_id: str,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Optional[ShowResult]:
        return self.reader.get_show_result(season_id, stage_id, conn=conn)

    def list_show_results(self, season_id: str) -> List[ShowResult]:
        return self.reader.list_show_results(season_id)

    def put_show_result(
        self,
        season_id: str,
        stage_id: str,
        result: ShowResult,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        """Append a result; all participant scores land in a single write.

        Raises:
            ValueError: stage_id/season_id disagree with the result.
            DuplicateResultError: stage_id already stored for the season.
        """
        if result.id != stage_id or result.season_id != season_id:
            raise ValueError(
                f"Result {result.season_id}/{result.id} does not match {season_id}/{stage_id}"
            )
        if conn is not None:
            self.db.insert_show_result(conn, result)
            return
        with self.transaction() as own:
            self.db.insert_show_result(own, result)
