#!/usr/bin/env python3
"""Season admin CLI.

Runs the named admin operations against a season and prints standings.

Usage:
    python scripts/ops/season_admin.py run_regular_show --season live-2025
    python scripts/ops/season_admin.py start_championships --season live-2025
    python scripts/ops/season_admin.py run_prelims --season live-2025 --seed 7
    python scripts/ops/season_admin.py standings --season live-2025 --view prelims

Environment:
    ENCORE_DB_PATH: Path to SQLite database (default: storage/encore.sqlite)
    ENCORE_SEED: Scoring seed used when --seed is not given
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add src to path if running as script
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from encore.config import DEFAULT_DB_PATH, DEFAULT_SEED
from encore.data import SeasonStore
from encore.models import ScoringEngine, calculate_standings, soundsport_ratings
from encore.pipeline import OPERATIONS, AdminService, SeasonStateMachine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def print_standings(store: SeasonStore, season_id: str, view: str) -> None:
    results = store.list_show_results(season_id)
    standings = calculate_standings(results, view)

    print("\n" + "=" * 60)
    print(f"{season_id} STANDINGS ({view})")
    print("=" * 60)
    if standings.empty:
        print("No competitive scores yet.")
    for _, row in standings.iterrows():
        print(f"{row['rank']:>3}. {str(row['display_name']):<28} {row['total_score']:>8.3f}")

    if view == "regular":
        ratings = soundsport_ratings(results)
        if not ratings.empty:
            print("\n" + "-" * 60)
            print("SOUNDSPORT RATINGS")
            print("-" * 60)
            print(ratings.to_string())
    print("=" * 60 + "\n")


def main() -> int:
    parser = argparse.ArgumentParser(description="Run season admin operations")
    parser.add_argument("operation", choices=[*OPERATIONS, "standings"], help="Operation to run")
    parser.add_argument("--season", required=True, help="Season id")
    parser.add_argument("--db", default=None, help="Database path (default: from config)")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Scoring RNG seed")
    parser.add_argument(
        "--view", default="regular",
        choices=["regular", "prelims", "semifinals", "finals"],
        help="Standings view (standings only)",
    )
    args = parser.parse_args()

    store = SeasonStore(args.db or DEFAULT_DB_PATH)

    if args.operation == "standings":
        print_standings(store, args.season, args.view)
        return 0

    machine = SeasonStateMachine(store, engine=ScoringEngine(seed=args.seed))
    ack = AdminService(machine).dispatch(args.operation, args.season)

    if not ack.ok:
        logger.error(f"{ack.error_type}: {ack.message}")
        return 1

    logger.info(ack.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
