"""Data module - storage access and schemas.

Public API:
    SeasonStore - Document-store facade used by the lifecycle controller
    DataReader - Read-only SQLite access
    SeasonDatabaseManager - SQLite schema and write operations
    Season, Entry, Entity, ShowResult, etc. - Pydantic models
"""

from encore.data.reader import DataReader
from encore.data.db_manager import SeasonDatabaseManager
from encore.data.store import SeasonStore
from encore.data.schemas import (
    ChampionshipStage,
    ChangeWindow,
    Entity,
    Entry,
    EntryStatus,
    ParticipantScore,
    Rating,
    Roster,
    Season,
    SeasonRules,
    SeasonStatus,
    SeasonType,
    ShowResult,
)

__all__ = [
    "DataReader",
    "SeasonDatabaseManager",
    "SeasonStore",
    "ChampionshipStage",
    "ChangeWindow",
    "Entity",
    "Entry",
    "EntryStatus",
    "ParticipantScore",
    "Rating",
    "Roster",
    "Season",
    "SeasonRules",
    "SeasonStatus",
    "SeasonType",
    "ShowResult",
]
