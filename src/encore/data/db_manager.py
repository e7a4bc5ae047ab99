"""Database manager for season data storage.

Handles all SQLite write operations including:
- Schema initialization
- Season, entity, and entry writes
- Append-only show result archive
- Conditional (compare-and-swap) championship stage updates

Write methods take an open connection so callers compose several writes
into one transaction (see transaction()).

Key Classes:
    SeasonDatabaseManager - Database operations for season data

Usage:
    from encore.data.db_manager import SeasonDatabaseManager

    db = SeasonDatabaseManager()
    with db.transaction() as conn:
        db.insert_show_result(conn, result)
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from encore.config import DB_TIMEOUT_SECONDS, DEFAULT_DB_PATH
from encore.data import queries as Q
from encore.data.schemas import (
    ChampionshipStage,
    Entity,
    Entry,
    Season,
    SeasonStatus,
    ShowResult,
    schema_to_create_table,
)
from encore.errors import DuplicateEntryError, DuplicateNameError, DuplicateResultError

logger = logging.getLogger(__name__)


class SeasonDatabaseManager:
    """Manages SQLite database for season data storage."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = Path(db_path or DEFAULT_DB_PATH)
        self._init_database()

    def _init_database(self) -> None:
        """Create database schema if it doesn't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path, timeout=DB_TIMEOUT_SECONDS)
        try:
            cursor = conn.cursor()
            cursor.execute(Q.CREATE_SEASONS)
            cursor.execute(schema_to_create_table("entities", Entity))
            cursor.execute(Q.CREATE_ENTRIES)
            cursor.execute(Q.CREATE_SHOW_RESULTS)
            for sql in Q.CREATE_INDEXES:
                cursor.execute(sql)
            conn.commit()
        finally:
            conn.close()
        logger.info(f"Database initialized: {self.db_path}")

    def get_connection(self) -> sqlite3.Connection:
        """Get a database connection in autocommit mode.

        Transactions are opened explicitly by transaction().
        """
        return sqlite3.connect(
            self.db_path, timeout=DB_TIMEOUT_SECONDS, isolation_level=None
        )

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Open a write transaction, committed on success and rolled back on error.

        BEGIN IMMEDIATE takes the write lock up front, so a read-check-write
        sequence inside the block cannot interleave with another writer.
        """
        conn = self.get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                # SQLite may already have rolled back (SQLITE_FULL, I/O errors)
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Seasons
    # -------------------------------------------------------------------------

    def insert_season(self, conn: sqlite3.Connection, season: Season) -> None:
        """Insert a new season row."""
        conn.execute(Q.INSERT_SEASON, (
            season.id,
            season.name,
            season.type.value,
            season.historical_year,
            season.start_date.isoformat(),
            season.end_date.isoformat(),
            season.status.value,
            season.championship_stage.value,
            season.rules.model_dump_json(),
        ))

    def update_season_stage(
        self,
        conn: sqlite3.Connection,
        season_id: str,
        new_stage: ChampionshipStage,
        expected_stage: ChampionshipStage,
    ) -> bool:
        """Move championship_stage from expected_stage to new_stage.

        Returns:
            True if the row was updated, False if the stored stage was
            not expected_stage (another transition won).
        """
        cur = conn.execute(
            Q.UPDATE_SEASON_STAGE,
            (new_stage.value, season_id, expected_stage.value),
        )
        return cur.rowcount == 1

    def update_season_status(
        self, conn: sqlite3.Connection, season_id: str, status: SeasonStatus
    ) -> None:
        """Set season status."""
        conn.execute(Q.UPDATE_SEASON_STATUS, (status.value, season_id))

    # -------------------------------------------------------------------------
    # Entities
    # -------------------------------------------------------------------------

    def upsert_entities(self, conn: sqlite3.Connection, entities: Iterable[Entity]) -> int:
        """Bulk insert/replace entity reference rows."""
        columns = list(Entity.model_fields)
        rows: List[tuple] = [
            tuple(int(v) if isinstance(v, bool) else v for v in e.model_dump().values())
            for e in entities
        ]
        if not rows:
            return 0
        placeholders = ", ".join("?" * len(columns))
        cols = ", ".join(columns)
        conn.executemany(
            f"INSERT OR REPLACE INTO entities ({cols}) VALUES ({placeholders})",
            rows,
        )
        logger.info(f"Stored {len(rows)} entities")
        return len(rows)

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def insert_entry(self, conn: sqlite3.Connection, entry: Entry) -> None:
        """Insert a new entry.

        Raises:
            DuplicateEntryError: User already joined the season.
            DuplicateNameError: Display name already taken in the season.
        """
        try:
            conn.execute(Q.INSERT_ENTRY, (
                entry.season_id,
                entry.user_id,
                entry.display_name,
                entry.status.value,
                entry.roster.model_dump_json(by_alias=True),
                json.dumps(entry.changes_used),
                entry.joined_at.isoformat() if entry.joined_at else None,
            ))
        except sqlite3.IntegrityError as e:
            context = {"season_id": entry.season_id, "user_id": entry.user_id}
            if "display_name" in str(e):
                raise DuplicateNameError(
                    f"Display name '{entry.display_name}' is already taken in this season.",
                    context,
                ) from e
            raise DuplicateEntryError(
                f"User {entry.user_id} already joined season {entry.season_id}.",
                context,
            ) from e

    def update_entry_roster(self, conn: sqlite3.Connection, entry: Entry) -> None:
        """Write roster and change counters in one statement."""
        conn.execute(Q.UPDATE_ENTRY_ROSTER, (
            entry.roster.model_dump_json(by_alias=True),
            json.dumps(entry.changes_used),
            entry.season_id,
            entry.user_id,
        ))

    # -------------------------------------------------------------------------
    # Show results
    # -------------------------------------------------------------------------

    def insert_show_result(self, conn: sqlite3.Connection, result: ShowResult) -> None:
        """Append a show result; existing ids are never overwritten.

        Raises:
            DuplicateResultError: A result with this id already exists.
        """
        scores = {
            user_id: score.model_dump(mode="json")
            for user_id, score in result.scores.items()
        }
        try:
            conn.execute(Q.INSERT_RESULT, (
                result.season_id,
                result.id,
                json.dumps(scores),
                result.created_at.isoformat(),
            ))
        except sqlite3.IntegrityError as e:
            raise DuplicateResultError(
                f"Result '{result.id}' already exists for season {result.season_id}.",
                {"season_id": result.season_id, "result_id": result.id},
            ) from e
        logger.info(f"Stored result {result.id} ({len(scores)} scores) for {result.season_id}")
