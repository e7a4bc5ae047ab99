"""Season rule models.

Pure components over supplied data; nothing here touches storage.

Public API:
    RosterLockPolicy, LockStatus - Change-window roster locking
    ScoringEngine - Per-show caption scoring with injected randomness
    TierClassifier - Soundsport I/II/III ratings
    MatchupScheduler, Matchup, LeagueRecord - Weekly head-to-head pairing
    calculate_standings, soundsport_ratings, top_competitors - Result tables
    build_change_windows, default_rules, ChangeWindowRule - Window templates
"""

from encore.models.roster_lock import LockStatus, RosterLockPolicy
from encore.models.scoring import ScoringEngine
from encore.models.tiers import TierClassifier
from encore.models.matchups import LeagueRecord, Matchup, MatchupScheduler
from encore.models.standings import calculate_standings, soundsport_ratings, top_competitors
from encore.models.windows import ChangeWindowRule, build_change_windows, default_rules

__all__ = [
    "LockStatus",
    "RosterLockPolicy",
    "ScoringEngine",
    "TierClassifier",
    "LeagueRecord",
    "Matchup",
    "MatchupScheduler",
    "calculate_standings",
    "soundsport_ratings",
    "top_competitors",
    "ChangeWindowRule",
    "build_change_windows",
    "default_rules",
]
