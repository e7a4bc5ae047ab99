"""Exception hierarchy for the season lifecycle.

Exception Hierarchy:
    EncoreError (base)
    ├── LockedRosterError
    ├── InvalidRosterError
    ├── DuplicateNameError
    ├── DuplicateEntryError
    ├── StagePrerequisiteError
    ├── StageTransitionError
    ├── DuplicateResultError
    ├── SeasonNotFoundError
    └── EntryNotFoundError

All exceptions carry:
- error_code: Stable identifier for programmatic handling
- context: Relevant context (season_id, user_id, stage, window, ...)

Storage failures (sqlite3.Error) are NOT wrapped; they propagate as-is.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class EncoreError(Exception):
    """Base exception for all season lifecycle errors.

    Attributes:
        message: Human-readable error message
        error_code: Unique error code (e.g., "ROSTER_001")
        context: Additional context for logging and acknowledgments
    """

    error_code = "ENCORE_000"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for acknowledgments and logs."""
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": dict(self.context),
        }


# -----------------------------------------------------------------------------
# Roster errors
# -----------------------------------------------------------------------------

class LockedRosterError(EncoreError):
    """Roster edit attempted outside an open, non-exhausted change window."""

    error_code = "ROSTER_001"

    def __init__(
        self,
        reason: str,
        window: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.reason = reason
        self.window = window
        ctx = {"window": window, **(context or {})}
        super().__init__(reason, ctx)


class InvalidRosterError(EncoreError):
    """Roster assignment references an unknown entity or exceeds the point cap."""

    error_code = "ROSTER_002"


class DuplicateNameError(EncoreError):
    """Display name already taken by another participant in the season."""

    error_code = "JOIN_001"


class DuplicateEntryError(EncoreError):
    """User already holds an entry for the season."""

    error_code = "JOIN_002"


# -----------------------------------------------------------------------------
# Stage errors
# -----------------------------------------------------------------------------

class StagePrerequisiteError(EncoreError):
    """Stage run is missing the result of the stage before it."""

    error_code = "STAGE_001"

    def __init__(self, stage: str, missing: str, season_id: Optional[str] = None):
        self.stage = stage
        self.missing = missing
        super().__init__(
            f"{missing.capitalize()} must be run before {stage.capitalize()}.",
            {"season_id": season_id, "stage": stage, "missing": missing},
        )


class StageTransitionError(EncoreError):
    """Operation is not valid for the season's current championship stage."""

    error_code = "STAGE_002"

    def __init__(self, current: str, requested: str, season_id: Optional[str] = None):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Invalid stage transition: {current} -> {requested}",
            {"season_id": season_id, "current": current, "requested": requested},
        )


class DuplicateResultError(EncoreError):
    """Show result id already exists for the season (results are append-only)."""

    error_code = "STAGE_003"


# -----------------------------------------------------------------------------
# Lookup errors
# -----------------------------------------------------------------------------

class SeasonNotFoundError(EncoreError, LookupError):
    """No season with the given id."""

    error_code = "LOOKUP_001"


class EntryNotFoundError(EncoreError, LookupError):
    """No entry for the given user in the season."""

    error_code = "LOOKUP_002"
