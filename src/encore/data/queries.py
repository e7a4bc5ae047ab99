"""Centralized SQL for the season database.

All SQL statements used by DataReader and SeasonDatabaseManager live here.
Named constants for clarity and single source of truth.
"""

# -----------------------------------------------------------------------------
# Schema
# -----------------------------------------------------------------------------

CREATE_SEASONS = """
CREATE TABLE IF NOT EXISTS seasons (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    type TEXT NOT NULL,
    historical_year INTEGER,
    start_date TEXT NOT NULL,
    end_date TEXT NOT NULL,
    status TEXT NOT NULL,
    championship_stage TEXT NOT NULL,
    rules TEXT NOT NULL
)
"""

CREATE_ENTRIES = """
CREATE TABLE IF NOT EXISTS entries (
    season_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    display_name TEXT NOT NULL,
    status TEXT NOT NULL,
    roster TEXT NOT NULL,
    changes_used TEXT NOT NULL,
    joined_at TEXT,
    PRIMARY KEY (season_id, user_id),
    UNIQUE (season_id, display_name)
)
"""

CREATE_SHOW_RESULTS = """
CREATE TABLE IF NOT EXISTS show_results (
    season_id TEXT NOT NULL,
    result_id TEXT NOT NULL,
    scores TEXT NOT NULL,
    created_at TEXT NOT NULL,
    PRIMARY KEY (season_id, result_id)
)
"""

CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_entities_year ON entities(year)",
    "CREATE INDEX IF NOT EXISTS idx_entities_live ON entities(live)",
    "CREATE INDEX IF NOT EXISTS idx_results_created ON show_results(season_id, created_at)",
]

# -----------------------------------------------------------------------------
# Season queries
# -----------------------------------------------------------------------------

SEASON_BY_ID = "SELECT * FROM seasons WHERE id = ?"

SEASONS_ALL = "SELECT * FROM seasons ORDER BY start_date"

INSERT_SEASON = """
INSERT INTO seasons (id, name, type, historical_year, start_date, end_date,
                     status, championship_stage, rules)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

# Compare-and-swap on championship_stage
UPDATE_SEASON_STAGE = """
UPDATE seasons SET championship_stage = ?
WHERE id = ? AND championship_stage = ?
"""

UPDATE_SEASON_STATUS = "UPDATE seasons SET status = ? WHERE id = ?"

# -----------------------------------------------------------------------------
# Entity queries
# -----------------------------------------------------------------------------

ENTITY_BY_ID = "SELECT * FROM entities WHERE id = ?"

ENTITIES_LIVE = "SELECT * FROM entities WHERE live = 1 ORDER BY placement, id"

ENTITIES_BY_YEAR = "SELECT * FROM entities WHERE year = ? AND live = 0 ORDER BY placement, id"

# -----------------------------------------------------------------------------
# Entry queries
# -----------------------------------------------------------------------------

ENTRY_BY_USER = "SELECT * FROM entries WHERE season_id = ? AND user_id = ?"

ENTRIES_BY_SEASON = "SELECT * FROM entries WHERE season_id = ? ORDER BY user_id"

ENTRY_BY_DISPLAY_NAME = "SELECT user_id FROM entries WHERE season_id = ? AND display_name = ?"

INSERT_ENTRY = """
INSERT INTO entries (season_id, user_id, display_name, status, roster,
                     changes_used, joined_at)
VALUES (?, ?, ?, ?, ?, ?, ?)
"""

# Roster and change counter are written together
UPDATE_ENTRY_ROSTER = """
UPDATE entries SET roster = ?, changes_used = ?
WHERE season_id = ? AND user_id = ?
"""

# -----------------------------------------------------------------------------
# Show result queries
# -----------------------------------------------------------------------------

RESULT_BY_ID = "SELECT * FROM show_results WHERE season_id = ? AND result_id = ?"

RESULTS_BY_SEASON = """
SELECT * FROM show_results WHERE season_id = ?
ORDER BY created_at, result_id
"""

# Plain INSERT: results are append-only, a duplicate id raises IntegrityError
INSERT_RESULT = """
INSERT INTO show_results (season_id, result_id, scores, created_at)
VALUES (?, ?, ?, ?)
"""
