"""
Data models for recorded chess games.
"""
from dataclasses import dataclass
from typing import Optional

from .encoding import decode_moves, pack_game


@dataclass
class GameMetadata:
    """Metadata about a chess game."""
    white: str
    black: str
    result: str  # "1-0", "0-1", "1/2-1/2", "*"
    date: Optional[str] = None
    time_control: Optional[str] = None
    eco: Optional[str] = None  # Opening code
    event: Optional[str] = None
    site: Optional[str] = None


@dataclass
class EncodedGame:
    """A game with its moves stored one byte per ply."""
    metadata: GameMetadata
    moves: bytes
    fen: Optional[str] = None  # Starting position, None for the standard start

    @property
    def ply_count(self) -> int:
        return len(self.moves)

    def to_san(self) -> str:
        """Decode the moves to space-separated SAN."""
        return decode_moves(self.moves, fen=self.fen)

    def to_blob(self) -> bytes:
        """Moves with a version header, for storage."""
        return pack_game(self.moves)
