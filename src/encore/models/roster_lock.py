"""Roster lock policy for change windows.

Decision Rule:
    A roster is editable only while `now` falls inside a change window
    ([start, end], inclusive) whose quota is not used up. Unlimited windows
    (allowed_changes == -1) never run out.

    Overlapping windows pick the earliest-starting match (list order on ties).

Key Classes:
    LockStatus - Result of a lock check with the user-facing message
    RosterLockPolicy - can_edit() / apply_change()

Usage:
    from encore.models import RosterLockPolicy

    policy = RosterLockPolicy()
    status = policy.can_edit(season, entry, now)
    if not status.locked:
        entry = policy.apply_change(season, entry, "Color Guard", "corps-3", now)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from encore.data.schemas import ChangeWindow, Entry, Season
from encore.errors import LockedRosterError

LOCKED_MESSAGE = "Roster is locked."


@dataclass(frozen=True)
class LockStatus:
    """Outcome of a lock check.

    Attributes:
        locked: True if the roster cannot be edited now.
        active_window: The window containing now, if any.
        remaining: Changes left in a finite window (None if unlimited or no window).
        message: Lock reason / quota summary for display.
    """

    locked: bool
    active_window: Optional[ChangeWindow] = None
    remaining: Optional[int] = None
    message: str = LOCKED_MESSAGE


class RosterLockPolicy:
    """Decides whether a participant may edit their roster right now."""

    def find_active_window(self, season: Season, now: datetime) -> Optional[ChangeWindow]:
        """Earliest-starting window containing now, or None."""
        matches = [w for w in season.rules.change_windows if w.contains(now)]
        if not matches:
            return None
        # min() is stable: equal starts keep list order
        return min(matches, key=lambda w: w.start)

    def can_edit(self, season: Season, entry: Entry, now: datetime) -> LockStatus:
        window = self.find_active_window(season, now)
        if window is None:
            return LockStatus(locked=True)

        if window.is_unlimited:
            return LockStatus(
                locked=False,
                active_window=window,
                message=f"{window.name}: Unlimited changes remaining.",
            )

        used = entry.changes_used.get(window.name, 0)
        remaining = window.allowed_changes - used
        return LockStatus(
            locked=remaining <= 0,
            active_window=window,
            remaining=remaining,
            message=f"{window.name}: {max(remaining, 0)} of {window.allowed_changes} changes remaining.",
        )

    def apply_change(
        self,
        season: Season,
        entry: Entry,
        caption: str,
        entity_id: Optional[str],
        now: datetime,
    ) -> Entry:
        """Return the entry with caption reassigned and the window counter bumped.

        Roster and counter change together in the returned Entry; the store
        writes both in one statement.

        Raises:
            LockedRosterError: No open window, or its quota is used up.
        """
        status = self.can_edit(season, entry, now)
        if status.locked:
            window_name = status.active_window.name if status.active_window else None
            raise LockedRosterError(
                status.message,
                window=window_name,
                context={"season_id": season.id, "user_id": entry.user_id},
            )

        window = status.active_window
        changes_used = dict(entry.changes_used)
        if not window.is_unlimited:
            changes_used[window.name] = changes_used.get(window.name, 0) + 1

        return entry.model_copy(update={
            "roster": entry.roster.assign(caption, entity_id),
            "changes_used": changes_used,
        })
