"""Soundsport rating tiers from the competitive score distribution.

Rating Rule:
    Sort the show's competitive totals ascending (count = n):

        top    = scores[floor(2/3 * n)]
        bottom = scores[floor(1/3 * n)]

    A soundsport total >= top is rated I, >= bottom is II, else III.
    With no competitive scores to compare against, soundsport participants
    are rated Unrated.

Key Classes:
    TierClassifier - classify() / apply()
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Optional, Tuple

import numpy as np

from encore.data.schemas import EntryStatus, ParticipantScore, Rating

logger = logging.getLogger(__name__)


class TierClassifier:
    """Converts soundsport totals into I/II/III ratings."""

    @staticmethod
    def thresholds(show_scores: Dict[str, ParticipantScore]) -> Optional[Tuple[float, float]]:
        """Get (top, bottom) thresholds, or None if no competitive scores."""
        competitive = np.sort(np.array([
            s.total for s in show_scores.values()
            if s.status == EntryStatus.COMPETITIVE
        ], dtype=float))
        count = len(competitive)
        if count == 0:
            return None
        top = float(competitive[math.floor(count * 2 / 3)])
        bottom = float(competitive[math.floor(count / 3)])
        return top, bottom

    def classify(self, show_scores: Dict[str, ParticipantScore]) -> Dict[str, Rating]:
        """Rate every soundsport participant of one show.

        Returns:
            Dict mapping user_id -> Rating (soundsport participants only)
        """
        soundsport = {
            user_id: s for user_id, s in show_scores.items()
            if s.status == EntryStatus.SOUNDSPORT
        }
        if not soundsport:
            return {}

        bounds = self.thresholds(show_scores)
        if bounds is None:
            logger.warning(f"No competitive scores; {len(soundsport)} soundsport entries unrated")
            return {user_id: Rating.UNRATED for user_id in soundsport}

        top, bottom = bounds
        ratings = {}
        for user_id, score in soundsport.items():
            if score.total >= top:
                ratings[user_id] = Rating.I
            elif score.total >= bottom:
                ratings[user_id] = Rating.II
            else:
                ratings[user_id] = Rating.III
        return ratings

    def apply(self, show_scores: Dict[str, ParticipantScore]) -> Dict[str, ParticipantScore]:
        """Return show_scores with soundsport ratings attached."""
        ratings = self.classify(show_scores)
        return {
            user_id: score.model_copy(update={"rating": ratings[user_id]})
            if user_id in ratings else score
            for user_id, score in show_scores.items()
        }
