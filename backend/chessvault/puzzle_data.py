"""
Data models for puzzles and puzzle databases.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, List


@dataclass(frozen=True)
class Puzzle:
    """A single puzzle, as stored in a puzzle database."""
    id: int
    fen: str
    moves: str  # Space-separated UCI; the first move is the opponent's setup move
    rating: int
    rating_deviation: int
    popularity: int
    nb_plays: int

    @property
    def solution(self) -> List[str]:
        return self.moves.split()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PuzzleDatabaseInfo:
    """Summary of a puzzle database file."""
    title: str
    description: str
    puzzle_count: int
    storage_size: int
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
