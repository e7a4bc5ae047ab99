"""Season state machine - championship stage progression and show runs.

Stage Sequence (forward only, admin-triggered):
    regular -> prelims -> semifinals -> finals -> complete

    run_regular_show     regular only; repeatable; pending -> active
    start_championships  regular -> prelims, no scoring
    run_prelims          prelims -> semifinals; scores everyone
    run_semifinals       semifinals -> finals; top 25 competitive from prelims
    run_finals           finals -> complete; top 12 competitive from semifinals

Atomicity:
    Each operation runs inside one BEGIN IMMEDIATE transaction:
    read season -> check stage -> check prerequisite -> score -> insert
    result -> compare-and-swap stage. Any failure rolls the whole run back,
    so a rejected or failed run leaves season and results unchanged, and
    two concurrent runs of one stage cannot both succeed.

Key Classes:
    SeasonStateMachine - Stage operations over a SeasonStore

Usage:
    from encore.pipeline import SeasonStateMachine

    machine = SeasonStateMachine(store, engine=ScoringEngine(seed=1))
    machine.run_regular_show("s1")
    machine.start_championships("s1")
    machine.run_prelims("s1")
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from encore.config import FINALS_CUTOFF, REGULAR_SHOW_PREFIX, SEMIFINALS_CUTOFF
from encore.data.schemas import (
    ChampionshipStage,
    Entry,
    ParticipantScore,
    Season,
    SeasonStatus,
    ShowResult,
)
from encore.data.store import SeasonStore
from encore.errors import StagePrerequisiteError, StageTransitionError
from encore.models.scoring import ScoringEngine
from encore.models.standings import top_competitors
from encore.models.tiers import TierClassifier

logger = logging.getLogger(__name__)

# Allowed stage transitions. Key = current stage, value = the only valid next stage.
TRANSITIONS: Dict[ChampionshipStage, Optional[ChampionshipStage]] = {
    ChampionshipStage.REGULAR: ChampionshipStage.PRELIMS,
    ChampionshipStage.PRELIMS: ChampionshipStage.SEMIFINALS,
    ChampionshipStage.SEMIFINALS: ChampionshipStage.FINALS,
    ChampionshipStage.FINALS: ChampionshipStage.COMPLETE,
    ChampionshipStage.COMPLETE: None,  # terminal
}

# Stage -> (result it requires, how many competitive scorers advance from it)
STAGE_PREREQUISITES: Dict[ChampionshipStage, tuple] = {
    ChampionshipStage.SEMIFINALS: (ChampionshipStage.PRELIMS, SEMIFINALS_CUTOFF),
    ChampionshipStage.FINALS: (ChampionshipStage.SEMIFINALS, FINALS_CUTOFF),
}


def next_stage(current: ChampionshipStage) -> ChampionshipStage:
    """The stage after current.

    Raises:
        StageTransitionError: current is terminal.
    """
    nxt = TRANSITIONS[current]
    if nxt is None:
        raise StageTransitionError(current.value, "next stage")
    return nxt


def validate_transition(current: ChampionshipStage, target: ChampionshipStage) -> None:
    """Reject anything but the single forward step.

    Raises:
        StageTransitionError: target is not the stage after current.
    """
    if TRANSITIONS.get(current) != target:
        raise StageTransitionError(current.value, target.value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SeasonStateMachine:
    """Runs shows and advances championship stages for one store.

    Example:
        >>> machine = SeasonStateMachine(store)
        >>> result = machine.run_regular_show("s1")
        >>> result.id
        'show-2025-07-01T19:00:00.000000Z'
    """

    def __init__(
        self,
        store: SeasonStore,
        engine: Optional[ScoringEngine] = None,
        classifier: Optional[TierClassifier] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize state machine.

        Args:
            store: Season storage
            engine: Scoring engine (default: unseeded ScoringEngine)
            classifier: Soundsport tier classifier
            clock: Returns the current time (injected for tests)
        """
        self.store = store
        self.engine = engine or ScoringEngine()
        self.classifier = classifier or TierClassifier()
        self.clock = clock

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def run_regular_show(self, season_id: str) -> ShowResult:
        """Score all participants in a new regular-season show.

        Not idempotent: every call archives a new result with a new id.

        Raises:
            StageTransitionError: Championships already started.
        """
        with self.store.transaction() as conn:
            season = self.store.get_season(season_id, conn=conn)
            if season.championship_stage != ChampionshipStage.REGULAR:
                raise StageTransitionError(
                    season.championship_stage.value, "regular show", season_id
                )

            entries = self.store.list_participants(season_id, conn=conn)
            if not entries:
                logger.warning(f"Season {season_id} has no participants; archiving empty show")

            now = self.clock()
            result = ShowResult(
                id=self._regular_show_id(season_id, now, conn),
                season_id=season_id,
                scores=self._score(season, entries, conn),
                created_at=now,
            )
            self.store.put_show_result(season_id, result.id, result, conn=conn)

            if season.status == SeasonStatus.PENDING:
                self.store.update_season_status(season_id, SeasonStatus.ACTIVE, conn=conn)
                logger.info(f"Season {season_id} is now active")

        logger.info(f"Regular show {result.id} scored {len(result.scores)} participants")
        return result

    def start_championships(self, season_id: str) -> ChampionshipStage:
        """Close the regular season and open prelims. No scoring.

        Raises:
            StageTransitionError: Season is not in the regular stage.
        """
        with self.store.transaction() as conn:
            season = self.store.get_season(season_id, conn=conn)
            self._advance(conn, season, ChampionshipStage.PRELIMS)
        logger.info(f"Season {season_id} championships started")
        return ChampionshipStage.PRELIMS

    def run_prelims(self, season_id: str) -> ShowResult:
        return self._run_stage(season_id, ChampionshipStage.PRELIMS)

    def run_semifinals(self, season_id: str) -> ShowResult:
        return self._run_stage(season_id, ChampionshipStage.SEMIFINALS)

    def run_finals(self, season_id: str) -> ShowResult:
        return self._run_stage(season_id, ChampionshipStage.FINALS)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _run_stage(self, season_id: str, stage: ChampionshipStage) -> ShowResult:
        """Score one championship stage and advance to the next.

        Raises:
            StageTransitionError: Season is not at this stage (incl. re-runs).
            StagePrerequisiteError: The previous stage's result is missing.
            DuplicateResultError: This stage's result already exists.
        """
        with self.store.transaction() as conn:
            season = self.store.get_season(season_id, conn=conn)
            if season.championship_stage != stage:
                raise StageTransitionError(season.championship_stage.value, stage.value, season_id)

            entries = self.store.list_participants(season_id, conn=conn)

            if stage in STAGE_PREREQUISITES:
                required, cutoff = STAGE_PREREQUISITES[stage]
                prior = self.store.get_show_result(season_id, required.value, conn=conn)
                if prior is None:
                    raise StagePrerequisiteError(stage.value, required.value, season_id)
                advancing = set(top_competitors(prior, cutoff))
                entries = [e for e in entries if e.user_id in advancing]
                logger.info(f"{len(entries)} advance from {required.value} to {stage.value}")

            result = ShowResult(
                id=stage.value,
                season_id=season_id,
                scores=self._score(season, entries, conn),
                created_at=self.clock(),
            )
            self.store.put_show_result(season_id, result.id, result, conn=conn)

            new_stage = self._advance(conn, season, next_stage(stage))
            if new_stage == ChampionshipStage.COMPLETE:
                self.store.update_season_status(season_id, SeasonStatus.COMPLETE, conn=conn)

        logger.info(f"{stage.value.capitalize()} for {season_id} complete ({len(result.scores)} scored)")
        return result

    def _advance(
        self,
        conn: sqlite3.Connection,
        season: Season,
        target: ChampionshipStage,
    ) -> ChampionshipStage:
        """Validate and compare-and-swap the stage inside conn's transaction."""
        current = season.championship_stage
        validate_transition(current, target)
        if not self.store.update_season_stage(season.id, target, current, conn=conn):
            # Stored stage moved since it was read
            raise StageTransitionError(current.value, target.value, season.id)
        logger.info(f"Season {season.id} stage {current.value} -> {target.value}")
        return target

    def _score(
        self,
        season: Season,
        entries: List[Entry],
        conn: sqlite3.Connection,
    ) -> Dict[str, ParticipantScore]:
        entities = self.store.list_entities(season, conn=conn)
        scores = self.engine.score_show(season, entries, entities)
        return self.classifier.apply(scores)

    def _regular_show_id(self, season_id: str, now: datetime, conn: sqlite3.Connection) -> str:
        """show-<UTC timestamp>, nudged forward a microsecond on collision."""
        stamp = now.astimezone(timezone.utc)
        while True:
            result_id = f"{REGULAR_SHOW_PREFIX}{stamp.strftime('%Y-%m-%dT%H:%M:%S.%fZ')}"
            if self.store.get_show_result(season_id, result_id, conn=conn) is None:
                return result_id
            stamp += timedelta(microseconds=1)
