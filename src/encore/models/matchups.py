"""Weekly head-to-head matchups for league play.

Pairing Rule:
    Members are ordered by standings (wins desc, points desc, user_id asc)
    and adjacent members meet (1v2, 3v4, ...), which keeps matchups close
    in skill. Home/away order is drawn from an RNG seeded by
    (seed, competition class, week), so a given week always pairs the same
    way. With an odd member count the leftover member gets a BYE, which
    counts as a completed win.

Key Classes:
    Matchup - One pairing with scores and winner
    LeagueRecord - Running win/loss record of a member
    MatchupScheduler - pair_week(), resolve(), update_records()

Usage:
    from encore.models import MatchupScheduler

    scheduler = MatchupScheduler(seed=2025)
    week = scheduler.pair_week(members, week=3, competition_class="worldClass")
    week = scheduler.resolve(week, {"u1": 81.2, "u2": 79.9})
"""

from __future__ import annotations

import zlib
from typing import Dict, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, Field

from encore.config import BYE

TIE = "tie"


class Matchup(BaseModel):
    """One weekly pairing. pair[1] is BYE for a bye week."""

    pair: Tuple[str, str]
    scores: Optional[Dict[str, float]] = None
    winner: Optional[str] = None
    completed: bool = False

    @property
    def is_bye(self) -> bool:
        return self.pair[1] == BYE


class LeagueRecord(BaseModel):
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0
    current_streak: int = 0
    streak_type: Optional[str] = None

    def _streak(self, kind: str) -> None:
        self.current_streak = self.current_streak + 1 if self.streak_type == kind else 1
        self.streak_type = kind


class MatchupScheduler:
    """Pairs league members into weekly matchups."""

    def __init__(self, seed: int = 0) -> None:
        self.seed = seed

    def _rng(self, week: int, competition_class: str) -> np.random.Generator:
        key = zlib.crc32(f"{competition_class}:{week}".encode())
        return np.random.default_rng([self.seed, key])

    def pair_week(
        self,
        members: List[str],
        week: int,
        competition_class: str,
        standings: Optional[Dict[str, LeagueRecord]] = None,
    ) -> List[Matchup]:
        """Pair members for one week of one competition class."""
        standings = standings or {}

        def sort_key(user_id: str):
            record = standings.get(user_id, LeagueRecord())
            return (-record.wins, -record.points_for, user_id)

        ordered = sorted(set(members), key=sort_key)
        rng = self._rng(week, competition_class)

        matchups = []
        for i in range(0, len(ordered) - 1, 2):
            first, second = ordered[i], ordered[i + 1]
            if rng.random() > 0.5:
                first, second = second, first
            matchups.append(Matchup(pair=(first, second)))

        if len(ordered) % 2 == 1:
            leftover = ordered[-1]
            matchups.append(Matchup(pair=(leftover, BYE), winner=leftover, completed=True))

        return matchups

    def resolve(self, matchups: List[Matchup], week_scores: Dict[str, float]) -> List[Matchup]:
        """Fill scores and winners. Matchups missing a score stay open."""
        resolved = []
        for m in matchups:
            if m.is_bye or m.completed:
                resolved.append(m)
                continue

            a, b = m.pair
            if a not in week_scores or b not in week_scores:
                resolved.append(m)
                continue

            score_a, score_b = week_scores[a], week_scores[b]
            if score_a > score_b:
                winner = a
            elif score_b > score_a:
                winner = b
            else:
                winner = TIE
            resolved.append(m.model_copy(update={
                "scores": {a: score_a, b: score_b},
                "winner": winner,
                "completed": True,
            }))
        return resolved

    def update_records(
        self,
        records: Dict[str, LeagueRecord],
        matchups: List[Matchup],
    ) -> Dict[str, LeagueRecord]:
        """Fold completed matchups into league records (returns new records)."""
        updated = {user_id: r.model_copy() for user_id, r in records.items()}

        for m in matchups:
            if not m.completed:
                continue
            a, b = m.pair
            if m.is_bye:
                rec = updated.setdefault(a, LeagueRecord())
                rec.wins += 1
                rec._streak("W")
                continue

            rec_a = updated.setdefault(a, LeagueRecord())
            rec_b = updated.setdefault(b, LeagueRecord())
            score_a, score_b = m.scores[a], m.scores[b]
            rec_a.points_for += score_a
            rec_a.points_against += score_b
            rec_b.points_for += score_b
            rec_b.points_against += score_a

            if m.winner == TIE:
                for rec in (rec_a, rec_b):
                    rec.ties += 1
                    rec.current_streak = 0
                    rec.streak_type = None
            else:
                winner, loser = (rec_a, rec_b) if m.winner == a else (rec_b, rec_a)
                winner.wins += 1
                winner._streak("W")
                loser.losses += 1
                loser._streak("L")

        return updated
