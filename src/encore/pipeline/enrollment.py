"""Season setup, joining, and roster edits.

Join Rule:
    A participant joining while the season is pending and within 24 hours
    of its start date is competitive; everyone else is soundsport. The
    status is fixed at join time.

Roster Rule:
    Edits go through RosterLockPolicy, reference an entity from the
    season's pool, and keep the roster's total point cost within
    rules.max_points. The lock check, validation, and the roster+counter
    write share one transaction.

Usage:
    from encore.pipeline.enrollment import create_season, join_season, edit_roster

    season = create_season("Summer Tour", SeasonType.LIVE, start, end, store=store)
    entry = join_season(season.id, "u1", "Blue Thunder", store=store)
    entry = edit_roster(season.id, "u1", "Color Guard", "corps-4", store=store)
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

from encore.config import DEFAULT_MAX_POINTS, EARLY_JOIN_WINDOW
from encore.data.schemas import (
    ChangeWindow,
    Entity,
    Entry,
    EntryStatus,
    Roster,
    Season,
    SeasonRules,
    SeasonStatus,
    SeasonType,
)
from encore.data.store import SeasonStore
from encore.errors import DuplicateNameError, InvalidRosterError
from encore.models.roster_lock import RosterLockPolicy
from encore.models.windows import ChangeWindowRule, build_change_windows, default_rules

logger = logging.getLogger(__name__)


def create_season(
    name: str,
    season_type: Union[SeasonType, str],
    start_date: datetime,
    end_date: datetime,
    historical_year: Optional[int] = None,
    window_rules: Optional[Iterable[ChangeWindowRule]] = None,
    change_windows: Optional[List[ChangeWindow]] = None,
    max_points: int = DEFAULT_MAX_POINTS,
    season_id: Optional[str] = None,
    store: Optional[SeasonStore] = None,
) -> Season:
    """Create a pending season in the regular stage.

    Args:
        name: Season display name
        season_type: Live or OffSeason
        start_date: Season start (windows are built from its date)
        end_date: Season end
        historical_year: Corps year drafted from (required for OffSeason)
        window_rules: Weekly window templates (default: per season type)
        change_windows: Explicit windows; overrides window_rules
        max_points: Roster point cap
        season_id: Explicit id (default: generated)
        store: Optional SeasonStore instance (for testing)
    """
    if store is None:
        store = SeasonStore()

    season_type = SeasonType(season_type)
    if change_windows is None:
        rules = list(window_rules) if window_rules is not None else default_rules(season_type)
        change_windows = build_change_windows(start_date, rules)

    season = Season(
        id=season_id or f"{season_type.value.lower()}-{uuid.uuid4().hex[:12]}",
        name=name.strip(),
        type=season_type,
        historical_year=historical_year,
        start_date=start_date,
        end_date=end_date,
        status=SeasonStatus.PENDING,
        rules=SeasonRules(change_windows=change_windows, max_points=max_points),
    )
    return store.add_season(season)


def entry_status_for(season: Season, now: datetime) -> EntryStatus:
    """Competitive for early joiners of a pending season, soundsport otherwise."""
    if season.status == SeasonStatus.PENDING and now < season.start_date + EARLY_JOIN_WINDOW:
        return EntryStatus.COMPETITIVE
    return EntryStatus.SOUNDSPORT


def join_season(
    season_id: str,
    user_id: str,
    display_name: str,
    now: Optional[datetime] = None,
    store: Optional[SeasonStore] = None,
) -> Entry:
    """Create a participant's entry with an empty roster.

    Raises:
        ValueError: Blank display name.
        DuplicateNameError: Name already used in this season.
        DuplicateEntryError: User already joined.
        SeasonNotFoundError: Unknown season.
    """
    if store is None:
        store = SeasonStore()
    now = now or datetime.now(timezone.utc)

    display_name = display_name.strip()
    if not display_name:
        raise ValueError("Display name is required")

    with store.transaction() as conn:
        season = store.get_season(season_id, conn=conn)
        if store.is_display_name_taken(season_id, display_name, conn=conn):
            raise DuplicateNameError(
                f"Display name '{display_name}' is already taken in this season.",
                {"season_id": season_id, "user_id": user_id},
            )
        entry = Entry(
            user_id=user_id,
            season_id=season_id,
            display_name=display_name,
            status=entry_status_for(season, now),
            roster=Roster(),
            joined_at=now,
        )
        store.add_entry(entry, conn=conn)

    logger.info(f"User {user_id} joined {season_id} as {entry.status.value} ({display_name})")
    return entry


def roster_cost(roster: Roster, pool: Dict[str, Entity]) -> int:
    """Total point cost of assigned captions (entities outside pool cost 0)."""
    return sum(pool[eid].point_cost for eid in roster.assigned_ids() if eid in pool)


def validate_roster(
    roster: Roster,
    pool: Dict[str, Entity],
    max_points: int,
    check_ids: Optional[Iterable[str]] = None,
) -> int:
    """Check assignments are in the pool and the point cap holds.

    Args:
        roster: Roster to validate
        pool: The season's entity pool by id
        max_points: Point cap over the whole roster
        check_ids: Entity ids that must be in the pool (default: every
            assigned id). Corps that have since left the pool cost 0.

    Returns:
        Total point cost of the roster.

    Raises:
        InvalidRosterError: Unknown entity or cap exceeded.
    """
    if check_ids is None:
        check_ids = roster.assigned_ids()
    unknown = sorted({eid for eid in check_ids if eid not in pool})
    if unknown:
        raise InvalidRosterError(
            f"Entities not draftable this season: {unknown}",
            {"entity_ids": unknown},
        )
    cost = roster_cost(roster, pool)
    if cost > max_points:
        raise InvalidRosterError(
            f"Roster costs {cost} points; the cap is {max_points}.",
            {"cost": cost, "max_points": max_points},
        )
    return cost


def edit_roster(
    season_id: str,
    user_id: str,
    caption: str,
    entity_id: Optional[str],
    now: Optional[datetime] = None,
    store: Optional[SeasonStore] = None,
    policy: Optional[RosterLockPolicy] = None,
) -> Entry:
    """Assign (or clear, with entity_id=None) one caption of a roster.

    Raises:
        LockedRosterError: No open window or quota used up.
        InvalidRosterError: Unknown caption/entity or point cap exceeded.
        EntryNotFoundError: User has not joined.
    """
    if store is None:
        store = SeasonStore()
    policy = policy or RosterLockPolicy()
    now = now or datetime.now(timezone.utc)

    with store.transaction() as conn:
        season = store.get_season(season_id, conn=conn)
        entry = store.get_entry(season_id, user_id, conn=conn)
        updated = policy.apply_change(season, entry, caption, entity_id, now)

        pool = {e.id: e for e in store.list_entities(season, conn=conn)}
        cost = validate_roster(
            updated.roster, pool, season.rules.max_points,
            check_ids=[entity_id] if entity_id else [],
        )
        store.save_roster(updated, conn=conn)

    logger.info(
        f"User {user_id} set {caption} -> {entity_id} in {season_id} "
        f"({cost}/{season.rules.max_points} pts)"
    )
    return updated
