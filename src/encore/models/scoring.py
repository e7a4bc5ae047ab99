"""Show scoring from caption-weighted rankings plus bounded randomness.

Scoring Rule:
    For each assigned caption, with N = size of the season's entity pool
    and rank = the entity's 1-indexed rank in that pool (by placement):

        base = (N + 1 - rank) * (weight / N)
        caption_score = base + U[0, weight * PERTURBATION_RATIO)

    Caption scores are summed per group and combined as

        total = GE + Visual / 2 + Music / 2

    GE's two captions make the full 40-point category; Visual's and Music's
    captions are halved into their 30-point categories. Unassigned captions
    and entities outside the pool contribute zero.

    The perturbation is intentional show-to-show variance. The RNG is
    injected: pass a seeded numpy Generator for reproducible runs, or any
    object with uniform(low, high) (e.g. one returning 0.0) to pin it.

Key Classes:
    ScoringEngine - score_show() over entries and the entity pool

Usage:
    from encore.models import ScoringEngine

    engine = ScoringEngine(seed=42)
    scores = engine.score_show(season, entries, entities)
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol

import numpy as np

from encore.config import (
    CAPTIONS,
    CAPTION_GROUPS,
    GROUP_GE,
    GROUP_MUSIC,
    GROUP_VISUAL,
    HALVED_GROUPS,
    PERTURBATION_RATIO,
)
from encore.data.schemas import Entity, Entry, ParticipantScore, Season


class UniformSource(Protocol):
    """Anything that can draw uniformly from [low, high)."""

    def uniform(self, low: float, high: float) -> float: ...


class ScoringEngine:
    """Computes per-participant fantasy scores for one show.

    Example:
        >>> engine = ScoringEngine(seed=7)
        >>> scores = engine.score_show(season, entries, entities)
        >>> scores["user-1"].total
    """

    def __init__(
        self,
        rng: Optional[UniformSource] = None,
        seed: Optional[int] = None,
        perturbation_ratio: float = PERTURBATION_RATIO,
    ) -> None:
        """Initialize engine.

        Args:
            rng: Random source; defaults to numpy default_rng(seed).
            seed: Seed for the default generator (ignored if rng given).
            perturbation_ratio: Upper bound of noise as a share of caption weight.
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.perturbation_ratio = perturbation_ratio

    @staticmethod
    def rank_pool(entities: Iterable[Entity]) -> Dict[str, int]:
        """Map entity id -> 1-indexed rank (best placement first, id breaks ties)."""
        ordered = sorted(entities, key=lambda e: (e.placement, e.id))
        return {e.id: rank for rank, e in enumerate(ordered, start=1)}

    def caption_score(self, caption: str, rank: int, pool_size: int) -> float:
        """Score one caption for an entity of the given rank."""
        weight = CAPTIONS[caption]["weight"]
        base = (pool_size + 1 - rank) * (weight / pool_size)
        noise = float(self.rng.uniform(0.0, weight * self.perturbation_ratio))
        return base + noise

    def score_entry(self, entry: Entry, ranks: Dict[str, int]) -> ParticipantScore:
        """Score one entry against a ranked pool."""
        pool_size = len(ranks)
        group_sums = {group: 0.0 for group in CAPTION_GROUPS}

        for caption, entity_id in entry.roster.items():
            if not entity_id or entity_id not in ranks:
                continue
            group = CAPTIONS[caption]["group"]
            group_sums[group] += self.caption_score(caption, ranks[entity_id], pool_size)

        total = sum(
            value / 2 if group in HALVED_GROUPS else value
            for group, value in group_sums.items()
        )
        return ParticipantScore(
            total=total,
            status=entry.status,
            display_name=entry.display_name,
            ge=group_sums[GROUP_GE],
            visual=group_sums[GROUP_VISUAL],
            music=group_sums[GROUP_MUSIC],
        )

    def score_show(
        self,
        season: Season,
        entries: List[Entry],
        entities: List[Entity],
    ) -> Dict[str, ParticipantScore]:
        """Score every entry for one show.

        Args:
            season: Season being scored (entries from other seasons are skipped)
            entries: Participants to score
            entities: The season's ranked entity pool

        Returns:
            Dict mapping user_id -> ParticipantScore (no ratings yet)
        """
        ranks = self.rank_pool(entities)
        return {
            entry.user_id: self.score_entry(entry, ranks)
            for entry in entries
            if entry.season_id == season.id
        }
