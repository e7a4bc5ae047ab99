"""Standings and rating tables over archived show results.

Views:
    regular     - All regular-season shows (ids starting "show-")
    prelims     - The prelims result
    semifinals  - The semifinals result
    finals      - The finals result

Ordering:
    Totals descending; equal totals are ordered by user_id ascending so
    standings and elimination cutoffs are deterministic.

Key Functions:
    calculate_standings() - Competitive standings table for a view
    soundsport_ratings() - user x show table of soundsport ratings
    top_competitors() - Advancers from one result (elimination cutoff)
"""

from __future__ import annotations

from typing import Iterable, List

import pandas as pd

from encore.data.schemas import ChampionshipStage, EntryStatus, ShowResult

REGULAR_VIEW = "regular"
STANDINGS_COLUMNS = ["rank", "user_id", "display_name", "total_score", "shows"]


def results_for_view(results: Iterable[ShowResult], view: str) -> List[ShowResult]:
    """Filter results to one standings view."""
    if view == REGULAR_VIEW:
        return [r for r in results if r.is_regular]
    stage = ChampionshipStage(view)
    return [r for r in results if r.id == stage.value]


def _score_rows(results: Iterable[ShowResult], status: EntryStatus) -> pd.DataFrame:
    rows = [
        {
            "result_id": result.id,
            "user_id": user_id,
            "display_name": score.display_name,
            "total": score.total,
            "rating": score.rating.value if score.rating else None,
        }
        for result in results
        for user_id, score in result.scores.items()
        if score.status == status
    ]
    return pd.DataFrame(rows, columns=["result_id", "user_id", "display_name", "total", "rating"])


def calculate_standings(results: Iterable[ShowResult], view: str = REGULAR_VIEW) -> pd.DataFrame:
    """Sum competitive totals per participant over a view.

    Args:
        results: Archived show results of one season
        view: "regular" or a championship stage id

    Returns:
        DataFrame with columns rank, user_id, display_name, total_score, shows
    """
    df = _score_rows(results_for_view(results, view), EntryStatus.COMPETITIVE)
    if df.empty:
        return pd.DataFrame(columns=STANDINGS_COLUMNS)

    standings = (
        df.groupby("user_id", as_index=False)
        .agg(
            display_name=("display_name", "last"),
            total_score=("total", "sum"),
            shows=("result_id", "nunique"),
        )
        .sort_values(["total_score", "user_id"], ascending=[False, True])
        .reset_index(drop=True)
    )
    standings.insert(0, "rank", range(1, len(standings) + 1))
    return standings[STANDINGS_COLUMNS]


def soundsport_ratings(results: Iterable[ShowResult]) -> pd.DataFrame:
    """Pivot soundsport ratings to one row per participant, one column per show."""
    df = _score_rows(results, EntryStatus.SOUNDSPORT)
    if df.empty:
        return pd.DataFrame()
    return df.pivot(index="user_id", columns="result_id", values="rating")


def top_competitors(result: ShowResult, limit: int) -> List[str]:
    """User ids of the top `limit` competitive scorers in one result.

    Returns fewer than `limit` ids when the competitive pool is smaller.
    """
    df = _score_rows([result], EntryStatus.COMPETITIVE)
    if df.empty:
        return []
    ranked = df.sort_values(["total", "user_id"], ascending=[False, True])
    return ranked["user_id"].head(limit).tolist()
