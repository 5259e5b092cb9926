# Shared fixtures: small puzzle databases and a fake counting store.

import logging
from typing import List

import pytest

from chessvault.errors import StoreUnavailable
from chessvault.puzzle_data import Puzzle
from chessvault.puzzle_store import DuckDBPuzzleStore, PuzzleStore, SqlitePuzzleStore, validate_rating_window

logger = logging.getLogger(__name__)

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def make_puzzle(puzzle_id: int, rating: int) -> Puzzle:
    return Puzzle(
        id=puzzle_id,
        fen=START_FEN,
        moves="e2e4 e7e5",
        rating=rating,
        rating_deviation=75,
        popularity=90,
        nb_plays=100 + puzzle_id,
    )


def make_puzzles(count: int = 100, start_rating: int = 800, step: int = 10) -> List[Puzzle]:
    return [make_puzzle(i + 1, start_rating + i * step) for i in range(count)]


class FakeStore(PuzzleStore):
    """In-memory store that records every sample call."""

    def __init__(self, puzzles: List[Puzzle], path: str = "fake.db3"):
        super().__init__(path)
        self.puzzles = puzzles
        self.sample_calls = []
        self.fail = False

    def sample(self, min_rating, max_rating, limit):
        validate_rating_window(min_rating, max_rating)
        self.sample_calls.append((min_rating, max_rating, limit))
        if self.fail:
            raise StoreUnavailable(self.path, "offline")
        matching = [p for p in self.puzzles if min_rating <= p.rating <= max_rating]
        # Deterministic "random" order: reversed
        return list(reversed(matching))[:limit]

    def count(self):
        return len(self.puzzles)


@pytest.fixture()
def puzzles() -> List[Puzzle]:
    return make_puzzles()


@pytest.fixture()
def fake_store(puzzles) -> FakeStore:
    return FakeStore(puzzles)


@pytest.fixture()
def sqlite_store(tmp_path, puzzles) -> SqlitePuzzleStore:
    store = SqlitePuzzleStore(str(tmp_path / "puzzles.db3"))
    store.init_db()
    store.insert_puzzles(puzzles)
    logger.info("[tests] Created SQLite puzzle store at %s", store.path)
    return store


@pytest.fixture()
def duckdb_store(tmp_path, puzzles) -> DuckDBPuzzleStore:
    store = DuckDBPuzzleStore(str(tmp_path / "puzzles.duckdb"))
    store.init_db()
    store.insert_puzzles(puzzles)
    return store
