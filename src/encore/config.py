"""Centralized configuration for Encore.

All paths, scoring constants, and season rules in one place.
Environment variables can override defaults.

Path Constants:
    PROJECT_ROOT - Root directory of the project
    STORAGE_DIR - Storage for the season database
    DEFAULT_DB_PATH - SQLite database (overridable via ENCORE_DB_PATH)

Scoring Constants:
    CAPTIONS - Caption name -> (weight, group) for the 8 fixed captions
    PERTURBATION_RATIO - Upper bound of per-caption randomness as a share of weight

Championship Constants:
    SEMIFINALS_CUTOFF - Competitive participants advancing from prelims
    FINALS_CUTOFF - Competitive participants advancing from semifinals

Environment Variables:
    ENCORE_DB_PATH - Override default database path
    ENCORE_DB_TIMEOUT - SQLite busy timeout in seconds
    ENCORE_SEED - Seed for the scoring RNG (unset = unseeded)
"""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Dict, List, Optional

# Project root (src/encore/config.py -> encore -> src -> project_root)
PROJECT_ROOT = Path(__file__).parent.parent.parent
STORAGE_DIR = PROJECT_ROOT / "storage"

DEFAULT_DB_PATH = os.environ.get(
    "ENCORE_DB_PATH",
    str(STORAGE_DIR / "encore.sqlite")
)

DB_TIMEOUT_SECONDS = float(os.environ.get("ENCORE_DB_TIMEOUT", "5.0"))


def get_default_seed() -> Optional[int]:
    """Read the scoring seed from the environment.

    Returns None when ENCORE_SEED is unset or blank, which leaves the
    scoring RNG unseeded.
    """
    raw = os.environ.get("ENCORE_SEED", "").strip()
    return int(raw) if raw else None


DEFAULT_SEED = get_default_seed()

# Caption groups
GROUP_GE = "GE"
GROUP_VISUAL = "Visual"
GROUP_MUSIC = "Music"
CAPTION_GROUPS = [GROUP_GE, GROUP_VISUAL, GROUP_MUSIC]

# Caption name -> {weight, group}. Order is the roster display order.
CAPTIONS: Dict[str, Dict] = {
    "General Effect 1": {"weight": 20, "group": GROUP_GE},
    "General Effect 2": {"weight": 20, "group": GROUP_GE},
    "Visual Proficiency": {"weight": 20, "group": GROUP_VISUAL},
    "Visual Analysis": {"weight": 20, "group": GROUP_VISUAL},
    "Color Guard": {"weight": 20, "group": GROUP_VISUAL},
    "Music Brass": {"weight": 20, "group": GROUP_MUSIC},
    "Music Analysis": {"weight": 20, "group": GROUP_MUSIC},
    "Music Percussion": {"weight": 20, "group": GROUP_MUSIC},
}
CAPTION_NAMES: List[str] = list(CAPTIONS)

# Groups whose caption sum is halved in the show total
HALVED_GROUPS = {GROUP_VISUAL, GROUP_MUSIC}

PERTURBATION_RATIO = 0.1

# Roster rules
DEFAULT_MAX_POINTS = 150
UNLIMITED_CHANGES = -1

# Joining within this span after start_date (while pending) is competitive
EARLY_JOIN_WINDOW = timedelta(hours=24)

# Championship cutoffs
SEMIFINALS_CUTOFF = 25
FINALS_CUTOFF = 12

# Regular-show result ids are REGULAR_SHOW_PREFIX + ISO timestamp
REGULAR_SHOW_PREFIX = "show-"

# League matchups
BYE = "BYE"
COMPETITION_CLASSES = ["worldClass", "openClass", "aClass", "soundSport"]

# Default change-window templates (week, day offsets from week start, UTC times)
DEFAULT_WINDOW_RULES: Dict[str, List[Dict]] = {
    "Live": [
        {"week": 1, "start_day_of_week": 0, "end_day_of_week": 6,
         "start_time": "00:00", "end_time": "23:59", "changes": UNLIMITED_CHANGES},
        {"week": 2, "start_day_of_week": 0, "end_day_of_week": 1,
         "start_time": "00:00", "end_time": "23:59", "changes": 3},
        {"week": 3, "start_day_of_week": 0, "end_day_of_week": 1,
         "start_time": "00:00", "end_time": "23:59", "changes": 3},
        {"week": 4, "start_day_of_week": 0, "end_day_of_week": 1,
         "start_time": "00:00", "end_time": "23:59", "changes": 2},
        {"week": 5, "start_day_of_week": 0, "end_day_of_week": 1,
         "start_time": "00:00", "end_time": "23:59", "changes": 2},
        {"week": 6, "start_day_of_week": 0, "end_day_of_week": 1,
         "start_time": "00:00", "end_time": "23:59", "changes": 1},
    ],
    "OffSeason": [
        {"week": 1, "start_day_of_week": 0, "end_day_of_week": 6,
         "start_time": "00:00", "end_time": "23:59", "changes": UNLIMITED_CHANGES},
        {"week": 2, "start_day_of_week": 0, "end_day_of_week": 2,
         "start_time": "00:00", "end_time": "23:59", "changes": 3},
        {"week": 4, "start_day_of_week": 0, "end_day_of_week": 2,
         "start_time": "00:00", "end_time": "23:59", "changes": 2},
        {"week": 6, "start_day_of_week": 0, "end_day_of_week": 2,
         "start_time": "00:00", "end_time": "23:59", "changes": 1},
    ],
}
