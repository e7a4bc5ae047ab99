"""Season lifecycle pipeline.

Components:
    SeasonStateMachine - Show runs and championship stage progression
    AdminService - Named admin operations returning acknowledgments
    create_season / join_season / edit_roster - Season setup and roster edits

Usage:
    from encore.pipeline import AdminService, SeasonStateMachine

    admin = AdminService(SeasonStateMachine(store))
    admin.dispatch("run_regular_show", "s1")
"""

from encore.pipeline.season_machine import (
    SeasonStateMachine,
    TRANSITIONS,
    next_stage,
    validate_transition,
)
from encore.pipeline.admin import AdminAck, AdminService, OPERATIONS
from encore.pipeline.enrollment import (
    create_season,
    edit_roster,
    entry_status_for,
    join_season,
    validate_roster,
)

__all__ = [
    "SeasonStateMachine",
    "TRANSITIONS",
    "next_stage",
    "validate_transition",
    "AdminAck",
    "AdminService",
    "OPERATIONS",
    "create_season",
    "edit_roster",
    "entry_status_for",
    "join_season",
    "validate_roster",
]
