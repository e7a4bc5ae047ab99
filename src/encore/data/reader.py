"""Read-only access layer for the season SQLite database.

Provides DataReader for querying seasons, entities, entries, and archived
show results. All methods are read-only. Every method accepts an optional
open connection so reads can join a write transaction held by the caller.

Key Methods:
    query() - Execute raw SQL and return list of dicts
    get_season() - Season aggregate by id
    list_entities() - The season's ranked entity pool
    list_participants() - Entries of a season
    get_show_result() - One archived result by id

Usage:
    from encore.data import DataReader

    reader = DataReader()
    season = reader.get_season("live_2025-26")
    entries = reader.list_participants(season.id)
"""

from __future__ import annotations

import json
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from encore.config import DB_TIMEOUT_SECONDS, DEFAULT_DB_PATH
from encore.data import queries as Q
from encore.data.schemas import (
    Entity,
    Entry,
    Season,
    SeasonType,
    ShowResult,
)


def _dict_factory(cursor, row):
    mapping = {}
    for idx, col in enumerate(cursor.description):
        mapping[col[0]] = row[idx]
    return mapping


class DataReader:
    """Lightweight SQLite client for season data access."""

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = str(db_path or DEFAULT_DB_PATH)
        if not os.path.exists(self.db_path):
            raise FileNotFoundError(f"Database not found: {self.db_path}")

    @contextmanager
    def _conn(self, conn: Optional[sqlite3.Connection] = None) -> Iterator[sqlite3.Connection]:
        if conn is not None:
            yield conn
            return
        own = sqlite3.connect(self.db_path, timeout=DB_TIMEOUT_SECONDS)
        try:
            yield own
        finally:
            own.close()

    def query(
        self,
        sql: str,
        params: tuple = (),
        conn: Optional[sqlite3.Connection] = None,
    ) -> List[Dict[str, Any]]:
        """Execute raw SQL and return list of dicts."""
        with self._conn(conn) as c:
            cur = c.execute(sql, params)
            return [_dict_factory(cur, row) for row in cur.fetchall()]

    # -------------------------------------------------------------------------
    # Seasons
    # -------------------------------------------------------------------------

    def get_season(
        self, season_id: str, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Season]:
        """Get season by ID."""
        rows = self.query(Q.SEASON_BY_ID, (season_id,), conn)
        return _season_from_row(rows[0]) if rows else None

    def list_seasons(self) -> List[Season]:
        """Get all seasons ordered by start date."""
        return [_season_from_row(r) for r in self.query(Q.SEASONS_ALL)]

    # -------------------------------------------------------------------------
    # Entities
    # -------------------------------------------------------------------------

    def get_entity(
        self, entity_id: str, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Entity]:
        """Get entity by ID."""
        rows = self.query(Q.ENTITY_BY_ID, (entity_id,), conn)
        return Entity.model_validate(rows[0]) if rows else None

    def list_entities(
        self, season: Season, conn: Optional[sqlite3.Connection] = None
    ) -> List[Entity]:
        """Get the season's entity pool, best placement first.

        Live seasons draft from live corps; off-seasons from the corps of
        their historical year.
        """
        if season.type == SeasonType.LIVE:
            rows = self.query(Q.ENTITIES_LIVE, (), conn)
        else:
            rows = self.query(Q.ENTITIES_BY_YEAR, (season.historical_year,), conn)
        return [Entity.model_validate(r) for r in rows]

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def get_entry(
        self,
        season_id: str,
        user_id: str,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Optional[Entry]:
        """Get one participant's entry."""
        rows = self.query(Q.ENTRY_BY_USER, (season_id, user_id), conn)
        return _entry_from_row(rows[0]) if rows else None

    def list_participants(
        self, season_id: str, conn: Optional[sqlite3.Connection] = None
    ) -> List[Entry]:
        """Get all entries of a season, ordered by user id."""
        rows = self.query(Q.ENTRIES_BY_SEASON, (season_id,), conn)
        return [_entry_from_row(r) for r in rows]

    def is_display_name_taken(
        self,
        season_id: str,
        display_name: str,
        conn: Optional[sqlite3.Connection] = None,
    ) -> bool:
        """Check if a display name is already used in the season."""
        return bool(self.query(Q.ENTRY_BY_DISPLAY_NAME, (season_id, display_name), conn))

    # -------------------------------------------------------------------------
    # Show results
    # -------------------------------------------------------------------------

    def get_show_result(
        self,
        season_id: str,
        result_id: str,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Optional[ShowResult]:
        """Get one archived show result."""
        rows = self.query(Q.RESULT_BY_ID, (season_id, result_id), conn)
        return _result_from_row(rows[0]) if rows else None

    def list_show_results(
        self, season_id: str, conn: Optional[sqlite3.Connection] = None
    ) -> List[ShowResult]:
        """Get all archived results of a season in creation order."""
        rows = self.query(Q.RESULTS_BY_SEASON, (season_id,), conn)
        return [_result_from_row(r) for r in rows]


# -----------------------------------------------------------------------------
# Row conversion
# -----------------------------------------------------------------------------

def _season_from_row(row: Dict[str, Any]) -> Season:
    data = dict(row)
    data["rules"] = json.loads(data["rules"])
    return Season.model_validate(data)


def _entry_from_row(row: Dict[str, Any]) -> Entry:
    data = dict(row)
    data["roster"] = json.loads(data["roster"])
    data["changes_used"] = json.loads(data["changes_used"])
    return Entry.model_validate(data)


def _result_from_row(row: Dict[str, Any]) -> ShowResult:
    return ShowResult.model_validate({
        "id": row["result_id"],
        "season_id": row["season_id"],
        "scores": json.loads(row["scores"]),
        "created_at": row["created_at"],
    })
