"""
Error types raised by the move codec and the puzzle services.
"""
from typing import Optional


class ChessVaultError(Exception):
    """Base class for all chessvault errors."""


class InvalidMove(ChessVaultError):
    """A move (or SAN token) is not legal in the position it was given with."""

    def __init__(self, move, fen: str):
        self.move = move
        self.fen = fen
        super().__init__(f"Illegal move {move} in position {fen}")


class CorruptGameData(ChessVaultError):
    """An encoded game cannot be decoded.

    ``ply`` is the 0-based index of the first undecodable move byte, or None
    when the container header itself is damaged.
    """

    def __init__(self, ply: Optional[int], reason: Optional[str] = None):
        self.ply = ply
        self.reason = reason
        if ply is None:
            message = f"Corrupt game data: {reason or 'bad header'}"
        else:
            message = f"Corrupt game data at ply {ply}"
            if reason:
                message += f": {reason}"
        super().__init__(message)


class NoPuzzlesAvailable(ChessVaultError):
    """The rating window has no more puzzles to serve in the current batch."""

    def __init__(self, min_rating: int, max_rating: int):
        self.min_rating = min_rating
        self.max_rating = max_rating
        super().__init__(f"No puzzles available for ratings {min_rating}-{max_rating}")


class InvalidRatingWindow(ChessVaultError, ValueError):
    def __init__(self, min_rating: int, max_rating: int):
        self.min_rating = min_rating
        self.max_rating = max_rating
        super().__init__(f"Invalid rating window {min_rating}-{max_rating}")


class StoreUnavailable(ChessVaultError):
    """The puzzle store could not be opened or queried."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Puzzle store unavailable: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
