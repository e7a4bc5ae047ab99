"""
Encore - Season Lifecycle for Fantasy Drum Corps

Participants draft a corps into each of 8 captions and score points from
simulated shows, ending in prelims, semifinals, and finals.

Structure:
    data/      - Storage access (SQLite) and pydantic schemas
    models/    - Pure rules: roster locks, scoring, tiers, matchups, standings
    pipeline/  - Season state machine, enrollment, admin operations

Usage:
    from encore.data import SeasonStore
    from encore.pipeline import AdminService, SeasonStateMachine
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
