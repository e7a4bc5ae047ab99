#!/usr/bin/env python3
"""Load draftable corps into the season database.

Reads a CSV with columns id, name, placement, point_cost, year, live and
upserts every row.

Usage:
    python scripts/ops/load_entities.py --csv data/corps_2019.csv
    python scripts/ops/load_entities.py --csv data/live_corps.csv --db storage/test.sqlite
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from encore.config import DEFAULT_DB_PATH
from encore.data import Entity, SeasonStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["id", "name", "placement", "point_cost"]


def read_entities(csv_path: Path) -> list:
    """Parse and validate entity rows from CSV."""
    df = pd.read_csv(csv_path, dtype={"id": str})
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    if "live" not in df.columns:
        df["live"] = False
    df = df.astype(object).where(pd.notna(df), None)
    return [Entity.model_validate(row) for row in df.to_dict(orient="records")]


def main() -> int:
    parser = argparse.ArgumentParser(description="Load corps into the season database")
    parser.add_argument("--csv", required=True, type=Path, help="CSV of corps")
    parser.add_argument("--db", default=None, help="Database path (default: from config)")
    args = parser.parse_args()

    try:
        entities = read_entities(args.csv)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not read {args.csv}: {e}")
        return 1

    store = SeasonStore(args.db or DEFAULT_DB_PATH)
    count = store.add_entities(entities)
    logger.info(f"Loaded {count} corps into {store.db_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
