"""Compact chess game storage and puzzle serving."""

from .encoding import decode_move, decode_moves, encode_move, encode_moves, encode_san_moves
from .errors import (
    ChessVaultError,
    CorruptGameData,
    InvalidMove,
    InvalidRatingWindow,
    NoPuzzlesAvailable,
    StoreUnavailable,
)
from .puzzle_cache import PuzzleCache
from .puzzle_data import Puzzle, PuzzleDatabaseInfo
from .puzzle_store import DuckDBPuzzleStore, PuzzleStore, SqlitePuzzleStore, open_puzzle_store

__all__ = [
    'encode_move',
    'decode_move',
    'encode_moves',
    'encode_san_moves',
    'decode_moves',
    'ChessVaultError',
    'CorruptGameData',
    'InvalidMove',
    'InvalidRatingWindow',
    'NoPuzzlesAvailable',
    'StoreUnavailable',
    'PuzzleCache',
    'Puzzle',
    'PuzzleDatabaseInfo',
    'PuzzleStore',
    'SqlitePuzzleStore',
    'DuckDBPuzzleStore',
    'open_puzzle_store',
]
