#!/usr/bin/env python3
"""
Build a puzzle database from the Lichess puzzle CSV export.

Usage:
  chessvault-import-puzzles lichess_db_puzzle.csv -o puzzles.db3
  chessvault-import-puzzles lichess_db_puzzle.csv -o puzzles.duckdb --min-rating 1000 --max-rating 2000
"""
import argparse
import itertools
import logging
import time

from .puzzle_store import load_lichess_csv, open_puzzle_store

logger = logging.getLogger(__name__)

CHUNK = 50_000


def import_puzzles(csv_path, output, min_rating=0, max_rating=None, limit=None):
    """Load puzzles from ``csv_path`` into the store at ``output``. Returns the count."""
    store = open_puzzle_store(output)
    store.init_db()

    puzzles = load_lichess_csv(csv_path, min_rating=min_rating, max_rating=max_rating)
    if limit is not None:
        puzzles = itertools.islice(puzzles, limit)

    total = 0
    while True:
        chunk = list(itertools.islice(puzzles, CHUNK))
        if not chunk:
            break
        total += store.insert_puzzles(chunk)
        logger.info(f"Imported {total:,} puzzles into {store.path}")

    return total


def main(argv=None):
    parser = argparse.ArgumentParser(description="Import Lichess puzzles into a puzzle database")
    parser.add_argument("csv", help="Lichess puzzle CSV (lichess_db_puzzle.csv)")
    parser.add_argument("-o", "--output", required=True,
                        help="Output database (.duckdb for DuckDB, anything else for SQLite)")
    parser.add_argument("--min-rating", type=int, default=0,
                        help="Minimum puzzle rating (default: 0)")
    parser.add_argument("--max-rating", type=int, default=None,
                        help="Maximum puzzle rating (default: no limit)")
    parser.add_argument("--limit", type=int, default=None,
                        help="Import at most this many puzzles")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    start = time.time()
    total = import_puzzles(args.csv, args.output, args.min_rating, args.max_rating, args.limit)
    print(f"Imported {total:,} puzzles into {args.output} in {time.time() - start:.1f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
