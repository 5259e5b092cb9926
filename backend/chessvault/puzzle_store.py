"""
Puzzle database backends (SQLite and DuckDB).
"""
import csv
import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List

import duckdb

from . import config
from .errors import InvalidRatingWindow, StoreUnavailable
from .puzzle_data import Puzzle, PuzzleDatabaseInfo

logger = logging.getLogger(__name__)

PUZZLE_COLUMNS = "id, fen, moves, rating, rating_deviation, popularity, nb_plays"

CREATE_PUZZLES_TABLE = """
    CREATE TABLE IF NOT EXISTS puzzles (
        id INTEGER PRIMARY KEY,
        fen TEXT NOT NULL,
        moves TEXT NOT NULL,
        rating INTEGER NOT NULL,
        rating_deviation INTEGER NOT NULL,
        popularity INTEGER NOT NULL,
        nb_plays INTEGER NOT NULL
    )
"""

SAMPLE_QUERY = f"""
    SELECT {PUZZLE_COLUMNS}
    FROM puzzles
    WHERE rating >= ? AND rating <= ?
    ORDER BY RANDOM()
    LIMIT ?
"""

INSERT_QUERY = f"INSERT INTO puzzles ({PUZZLE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)"


def validate_rating_window(min_rating: int, max_rating: int) -> None:
    """Raise InvalidRatingWindow unless 0 <= min_rating <= max_rating."""
    if min_rating < 0 or max_rating < 0 or min_rating > max_rating:
        raise InvalidRatingWindow(min_rating, max_rating)


def _row_to_puzzle(row) -> Puzzle:
    return Puzzle(
        id=row[0],
        fen=row[1],
        moves=row[2],
        rating=row[3],
        rating_deviation=row[4],
        popularity=row[5],
        nb_plays=row[6],
    )


def _puzzle_to_row(puzzle: Puzzle) -> tuple:
    return (
        puzzle.id,
        puzzle.fen,
        puzzle.moves,
        puzzle.rating,
        puzzle.rating_deviation,
        puzzle.popularity,
        puzzle.nb_plays,
    )


class PuzzleStore:
    """Base class for puzzle databases that support random rating-filtered sampling."""

    def __init__(self, path: str):
        self.path = os.path.abspath(path)

    def sample(self, min_rating: int, max_rating: int, limit: int) -> List[Puzzle]:
        """Return up to ``limit`` random puzzles rated within [min_rating, max_rating]."""
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def init_db(self) -> None:
        raise NotImplementedError

    def insert_puzzles(self, puzzles: Iterable[Puzzle]) -> int:
        raise NotImplementedError

    def size_bytes(self) -> int:
        try:
            return os.path.getsize(self.path)
        except OSError as e:
            raise StoreUnavailable(self.path, str(e)) from e

    def info(self) -> PuzzleDatabaseInfo:
        return PuzzleDatabaseInfo(
            title=os.path.basename(self.path),
            description="",
            puzzle_count=self.count(),
            storage_size=self.size_bytes(),
            path=self.path,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"


class SqlitePuzzleStore(PuzzleStore):
    """Puzzle store backed by a SQLite file."""

    def __init__(self, path: str, timeout: float = None):
        super().__init__(path)
        self.timeout = config.STORE_TIMEOUT if timeout is None else timeout

    @contextmanager
    def get_connection(self, read_only: bool = True):
        """Context manager for database connections.

        Read-only connections never create the file, so a missing database
        is reported instead of silently replaced with an empty one.
        """
        try:
            if read_only:
                uri = Path(self.path).as_uri() + "?mode=ro"
                conn = sqlite3.connect(uri, uri=True, timeout=self.timeout)
            else:
                os.makedirs(os.path.dirname(self.path), exist_ok=True)
                conn = sqlite3.connect(self.path, timeout=self.timeout)
        except sqlite3.Error as e:
            logger.error(f"Cannot open puzzle database {self.path}: {e}")
            raise StoreUnavailable(self.path, str(e)) from e

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Puzzle database error on {self.path}: {e}")
            raise StoreUnavailable(self.path, str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_db(self) -> None:
        """Initialize the database schema."""
        with self.get_connection(read_only=False) as conn:
            conn.execute(CREATE_PUZZLES_TABLE)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_puzzles_rating ON puzzles(rating)")

    def insert_puzzles(self, puzzles: Iterable[Puzzle]) -> int:
        """Insert puzzles in a single transaction. Returns the number inserted."""
        rows = [_puzzle_to_row(p) for p in puzzles]
        if not rows:
            return 0
        with self.get_connection(read_only=False) as conn:
            conn.executemany(INSERT_QUERY, rows)
        return len(rows)

    def sample(self, min_rating: int, max_rating: int, limit: int) -> List[Puzzle]:
        validate_rating_window(min_rating, max_rating)
        with self.get_connection() as conn:
            cursor = conn.execute(SAMPLE_QUERY, (min_rating, max_rating, limit))
            return [_row_to_puzzle(row) for row in cursor.fetchall()]

    def count(self) -> int:
        with self.get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM puzzles").fetchone()[0]


class DuckDBPuzzleStore(PuzzleStore):
    """Puzzle store backed by a DuckDB file."""

    @contextmanager
    def get_connection(self, read_only: bool = True):
        try:
            if not read_only:
                os.makedirs(os.path.dirname(self.path), exist_ok=True)
            con = duckdb.connect(self.path, read_only=read_only)
        except duckdb.Error as e:
            logger.error(f"Cannot open puzzle database {self.path}: {e}")
            raise StoreUnavailable(self.path, str(e)) from e

        try:
            yield con
        except duckdb.Error as e:
            logger.error(f"Puzzle database error on {self.path}: {e}")
            raise StoreUnavailable(self.path, str(e)) from e
        finally:
            con.close()

    def init_db(self) -> None:
        with self.get_connection(read_only=False) as con:
            con.execute(CREATE_PUZZLES_TABLE)

    def insert_puzzles(self, puzzles: Iterable[Puzzle]) -> int:
        rows = [_puzzle_to_row(p) for p in puzzles]
        if not rows:
            return 0
        with self.get_connection(read_only=False) as con:
            con.executemany(INSERT_QUERY, rows)
        return len(rows)

    def sample(self, min_rating: int, max_rating: int, limit: int) -> List[Puzzle]:
        validate_rating_window(min_rating, max_rating)
        with self.get_connection() as con:
            rows = con.execute(SAMPLE_QUERY, [min_rating, max_rating, limit]).fetchall()
            return [_row_to_puzzle(row) for row in rows]

    def count(self) -> int:
        with self.get_connection() as con:
            return con.execute("SELECT COUNT(*) FROM puzzles").fetchone()[0]


def open_puzzle_store(path: str) -> PuzzleStore:
    """Open a puzzle store, picking the backend from the file suffix."""
    if Path(path).suffix.lower() == ".duckdb":
        return DuckDBPuzzleStore(path)
    return SqlitePuzzleStore(path)


def get_puzzle_db_info(path: str) -> PuzzleDatabaseInfo:
    """Get title, puzzle count and size of a puzzle database."""
    return open_puzzle_store(path).info()


def load_lichess_csv(csv_path: str, min_rating: int = 0, max_rating: int = None) -> Iterator[Puzzle]:
    """
    Load puzzles from the Lichess puzzle CSV export.

    Rows are numbered from 1 in file order. Rows with missing or non-numeric
    fields are skipped.

    Args:
        csv_path: Path to lichess_db_puzzle.csv
        min_rating: Minimum puzzle rating to include
        max_rating: Maximum puzzle rating to include (None for no limit)
    """
    skipped = 0
    with open(csv_path, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)
        for index, row in enumerate(reader, start=1):
            try:
                puzzle = Puzzle(
                    id=index,
                    fen=row['FEN'],
                    moves=row['Moves'],
                    rating=int(row['Rating']),
                    rating_deviation=int(row['RatingDeviation']),
                    popularity=int(row['Popularity']),
                    nb_plays=int(row['NbPlays']),
                )
            except (KeyError, TypeError, ValueError):
                skipped += 1
                continue

            if puzzle.rating < min_rating:
                continue
            if max_rating is not None and puzzle.rating > max_rating:
                continue
            yield puzzle

    if skipped:
        logger.warning(f"Skipped {skipped} malformed rows in {csv_path}")
