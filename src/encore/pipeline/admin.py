"""Administrative season operations exposed by name.

Each operation takes a season id and returns an AdminAck. Domain errors
(EncoreError) come back as a failed acknowledgment naming the error type
and its message; storage errors are not converted and propagate.

Operations:
    run_regular_show, start_championships, run_prelims, run_semifinals, run_finals

Usage:
    from encore.pipeline import AdminService

    admin = AdminService(SeasonStateMachine(store))
    ack = admin.dispatch("run_prelims", "s1")
    if not ack.ok:
        print(ack.error_type, ack.message)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from encore.data.schemas import ChampionshipStage, ShowResult
from encore.errors import EncoreError
from encore.pipeline.season_machine import SeasonStateMachine, next_stage

logger = logging.getLogger(__name__)

OPERATIONS = (
    "run_regular_show",
    "start_championships",
    "run_prelims",
    "run_semifinals",
    "run_finals",
)


class AdminAck(BaseModel):
    """Acknowledgment of one admin operation."""

    ok: bool
    operation: str
    season_id: str
    stage: Optional[ChampionshipStage] = None
    result_id: Optional[str] = None
    scored: int = 0
    message: str = ""
    error_type: Optional[str] = None
    error_code: Optional[str] = None
    context: Dict[str, Any] = {}


class AdminService:
    """Named admin triggers over a SeasonStateMachine."""

    def __init__(self, machine: SeasonStateMachine) -> None:
        self.machine = machine

    def dispatch(self, operation: str, season_id: str) -> AdminAck:
        """Run an operation by name.

        Raises:
            ValueError: Unknown operation name.
        """
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}. Choose from {list(OPERATIONS)}")
        return getattr(self, operation)(season_id)

    def run_regular_show(self, season_id: str) -> AdminAck:
        return self._call("run_regular_show", season_id, self.machine.run_regular_show,
                          ChampionshipStage.REGULAR)

    def start_championships(self, season_id: str) -> AdminAck:
        return self._call("start_championships", season_id, self.machine.start_championships,
                          ChampionshipStage.PRELIMS)

    def run_prelims(self, season_id: str) -> AdminAck:
        return self._call("run_prelims", season_id, self.machine.run_prelims,
                          next_stage(ChampionshipStage.PRELIMS))

    def run_semifinals(self, season_id: str) -> AdminAck:
        return self._call("run_semifinals", season_id, self.machine.run_semifinals,
                          next_stage(ChampionshipStage.SEMIFINALS))

    def run_finals(self, season_id: str) -> AdminAck:
        return self._call("run_finals", season_id, self.machine.run_finals,
                          next_stage(ChampionshipStage.FINALS))

    def _call(
        self,
        operation: str,
        season_id: str,
        fn: Callable[[str], Any],
        reached: ChampionshipStage,
    ) -> AdminAck:
        """Run fn and acknowledge it; `reached` is the stage fn commits."""
        try:
            outcome = fn(season_id)
        except EncoreError as e:
            logger.warning(f"{operation} rejected for {season_id}: {e.message}")
            details = e.to_dict()
            return AdminAck(
                ok=False,
                operation=operation,
                season_id=season_id,
                message=e.message,
                error_type=details["error_type"],
                error_code=details["error_code"],
                context=details["context"],
            )

        if isinstance(outcome, ShowResult):
            return AdminAck(
                ok=True,
                operation=operation,
                season_id=season_id,
                stage=reached,
                result_id=outcome.id,
                scored=len(outcome.scores),
                message=f"{outcome.id} complete: {len(outcome.scores)} scored.",
            )
        return AdminAck(
            ok=True,
            operation=operation,
            season_id=season_id,
            stage=reached,
            message=f"Season {season_id} is now at {reached.value}.",
        )
