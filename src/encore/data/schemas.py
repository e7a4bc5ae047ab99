"""Pydantic schemas for season, roster and result records.

Defines the records the lifecycle controller reads and writes, plus the
helpers that derive SQLite table definitions from them.

Models:
    Season - Season aggregate with rules and championship stage
    ChangeWindow - Time-boxed roster edit window with a change quota
    Roster - Fixed-shape record of the 8 captions -> entity id
    Entry - A participant's per-season roster record
    Entity - Draftable corps with placement and point cost
    ParticipantScore - One participant's score in one show
    ShowResult - Immutable record of a show's or stage's scores

Usage:
    from encore.data.schemas import Season, Roster

    season = Season.model_validate(row)
    roster = Roster().assign("Color Guard", "corps-7")
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, get_args, get_origin

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator

from encore.config import (
    CAPTION_NAMES,
    DEFAULT_MAX_POINTS,
    REGULAR_SHOW_PREFIX,
    UNLIMITED_CHANGES,
)
from encore.errors import InvalidRosterError


# Type mapping from Python types to SQLite types
PYTHON_TO_SQLITE: Dict[Type, str] = {
    int: "INTEGER",
    float: "REAL",
    str: "TEXT",
    bool: "INTEGER",
}


def pydantic_to_sqlite_column(field_name: str, field_info: Any) -> str:
    """Convert a Pydantic field to SQLite column definition.

    Args:
        field_name: Name of the field
        field_info: Pydantic FieldInfo object

    Returns:
        SQLite column definition string
    """
    annotation = field_info.annotation

    # Optional is Union[X, None]
    if get_origin(annotation) is not None:
        args = get_args(annotation)
        if type(None) in args:
            annotation = next(a for a in args if a is not type(None))

    sqlite_type = PYTHON_TO_SQLITE.get(annotation, "TEXT")

    if field_name == "id":
        return f"{field_name} {sqlite_type} PRIMARY KEY"

    return f"{field_name} {sqlite_type}"


def schema_to_create_table(
    table_name: str,
    schema: Type[BaseModel],
    extra_columns: Optional[List[str]] = None,
) -> str:
    """Generate CREATE TABLE SQL from Pydantic schema.

    Args:
        table_name: Name of the SQL table
        schema: Pydantic model class
        extra_columns: Additional column definitions not in schema

    Returns:
        CREATE TABLE IF NOT EXISTS SQL statement
    """
    columns = [
        pydantic_to_sqlite_column(name, info)
        for name, info in schema.model_fields.items()
    ]
    if extra_columns:
        columns.extend(extra_columns)

    columns_sql = ",\n                ".join(columns)
    return f"""
            CREATE TABLE IF NOT EXISTS {table_name} (
                {columns_sql}
            )
        """


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class SeasonType(str, Enum):
    LIVE = "Live"
    OFF_SEASON = "OffSeason"


class SeasonStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETE = "complete"


class ChampionshipStage(str, Enum):
    """Championship stages in their fixed order.

    The str mixin allows direct comparison with raw stage strings stored
    in the database (e.g., ``row["championship_stage"] == ChampionshipStage.PRELIMS``).
    """

    REGULAR = "regular"
    PRELIMS = "prelims"
    SEMIFINALS = "semifinals"
    FINALS = "finals"
    COMPLETE = "complete"


class EntryStatus(str, Enum):
    COMPETITIVE = "competitive"
    SOUNDSPORT = "soundsport"


class Rating(str, Enum):
    """Soundsport rating tiers (I is best)."""

    I = "I"
    II = "II"
    III = "III"
    UNRATED = "Unrated"


# -----------------------------------------------------------------------------
# Season
# -----------------------------------------------------------------------------

class ChangeWindow(BaseModel):
    """Roster edit window. allowed_changes == -1 means unlimited."""

    name: str
    start: AwareDatetime
    end: AwareDatetime
    allowed_changes: int = Field(ge=UNLIMITED_CHANGES)

    @model_validator(mode="after")
    def _check_bounds(self) -> "ChangeWindow":
        if self.end < self.start:
            raise ValueError(f"Window {self.name} ends before it starts")
        return self

    @property
    def is_unlimited(self) -> bool:
        return self.allowed_changes == UNLIMITED_CHANGES

    def contains(self, now: datetime) -> bool:
        """Check if now falls inside [start, end], both ends inclusive."""
        return self.start <= now <= self.end


class SeasonRules(BaseModel):
    change_windows: List[ChangeWindow] = Field(default_factory=list)
    max_points: int = Field(default=DEFAULT_MAX_POINTS, ge=0)


class Season(BaseModel):
    """Season aggregate passed explicitly into every operation."""

    id: str
    name: str
    type: SeasonType = SeasonType.LIVE
    historical_year: Optional[int] = None
    start_date: AwareDatetime
    end_date: AwareDatetime
    status: SeasonStatus = SeasonStatus.PENDING
    championship_stage: ChampionshipStage = ChampionshipStage.REGULAR
    rules: SeasonRules = Field(default_factory=SeasonRules)

    @model_validator(mode="after")
    def _check_type(self) -> "Season":
        if self.type == SeasonType.OFF_SEASON and self.historical_year is None:
            raise ValueError("Off-season requires historical_year")
        if self.end_date < self.start_date:
            raise ValueError("Season ends before it starts")
        return self


# -----------------------------------------------------------------------------
# Roster / Entry
# -----------------------------------------------------------------------------

class Roster(BaseModel):
    """One entity id (or None) per caption.

    Field aliases are the caption display names, so dumping with
    ``by_alias=True`` yields the stored {caption name: entity id} mapping.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    general_effect_1: Optional[str] = Field(None, alias="General Effect 1")
    general_effect_2: Optional[str] = Field(None, alias="General Effect 2")
    visual_proficiency: Optional[str] = Field(None, alias="Visual Proficiency")
    visual_analysis: Optional[str] = Field(None, alias="Visual Analysis")
    color_guard: Optional[str] = Field(None, alias="Color Guard")
    music_brass: Optional[str] = Field(None, alias="Music Brass")
    music_analysis: Optional[str] = Field(None, alias="Music Analysis")
    music_percussion: Optional[str] = Field(None, alias="Music Percussion")

    def get(self, caption: str) -> Optional[str]:
        """Get the entity id assigned to a caption."""
        return getattr(self, _caption_field(caption))

    def assign(self, caption: str, entity_id: Optional[str]) -> "Roster":
        """Return a copy with caption set to entity_id (None clears it)."""
        return self.model_copy(update={_caption_field(caption): entity_id})

    def items(self) -> Iterator[Tuple[str, Optional[str]]]:
        """Yield (caption name, entity id) in caption order."""
        for caption in CAPTION_NAMES:
            yield caption, self.get(caption)

    def assigned_ids(self) -> List[str]:
        """Entity ids of assigned captions (duplicates kept)."""
        return [entity_id for _, entity_id in self.items() if entity_id]


def _caption_field(caption: str) -> str:
    field = CAPTION_FIELDS.get(caption)
    if field is None:
        raise InvalidRosterError(f"Unknown caption: {caption}", {"caption": caption})
    return field


# Caption name -> Roster field name
CAPTION_FIELDS: Dict[str, str] = {
    info.alias: name for name, info in Roster.model_fields.items()
}


class Entry(BaseModel):
    """A participant's roster record for one season."""

    user_id: str
    season_id: str
    display_name: str
    status: EntryStatus
    roster: Roster = Field(default_factory=Roster)
    changes_used: Dict[str, int] = Field(default_factory=dict)
    joined_at: Optional[datetime] = None


class Entity(BaseModel):
    """Draftable corps. placement 1 is the best finish."""

    id: str
    name: str
    placement: int = Field(ge=1)
    point_cost: int = Field(ge=0)
    year: Optional[int] = None
    live: bool = False


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------

class ParticipantScore(BaseModel):
    """One participant's score in one show."""

    total: float
    status: EntryStatus
    rating: Optional[Rating] = None
    display_name: Optional[str] = None
    ge: float = 0.0
    visual: float = 0.0
    music: float = 0.0


class ShowResult(BaseModel):
    """Immutable record of one show or championship stage."""

    model_config = ConfigDict(frozen=True)

    id: str
    season_id: str
    scores: Dict[str, ParticipantScore] = Field(default_factory=dict)
    created_at: datetime

    @property
    def is_regular(self) -> bool:
        return self.id.startswith(REGULAR_SHOW_PREFIX)

    def competitive_scores(self) -> Dict[str, ParticipantScore]:
        """Scores of competitive participants only."""
        return {
            user_id: score
            for user_id, score in self.scores.items()
            if score.status == EntryStatus.COMPETITIVE
        }
