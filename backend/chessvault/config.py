"""
Runtime configuration, read from environment variables.
"""
import os

from .errors import StoreUnavailable

PUZZLE_DIR = os.getenv(
    "CHESSVAULT_PUZZLE_DIR",
    os.path.join(os.path.dirname(__file__), "..", "data", "puzzles"),
)
PUZZLE_BATCH_SIZE = int(os.getenv("CHESSVAULT_PUZZLE_BATCH_SIZE", "20"))
STORE_TIMEOUT = float(os.getenv("CHESSVAULT_STORE_TIMEOUT", "5.0"))  # seconds
LOG_LEVEL = os.getenv("CHESSVAULT_LOG_LEVEL", "INFO")


def resolve_puzzle_path(name: str, puzzle_dir: str = None) -> str:
    """Resolve a puzzle database file name inside the puzzle directory."""
    base = os.path.abspath(puzzle_dir or PUZZLE_DIR)
    path = os.path.abspath(os.path.join(base, name))
    if os.path.dirname(path) != base:
        raise StoreUnavailable(name, "path outside puzzle directory")
    return path
