"""
In-memory puzzle batch cache.

Drawing random puzzles from a large database is expensive, so puzzles are
sampled in batches and served one at a time. A new batch is drawn when the
current one is empty or used up, or when the caller asks for a different
rating window or database.
"""
import logging
import threading
from enum import Enum
from typing import List, Optional, Tuple

from .errors import NoPuzzlesAvailable
from .puzzle_data import Puzzle
from .puzzle_store import PuzzleStore, validate_rating_window

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 20


class CacheState(str, Enum):
    EMPTY = "empty"
    POPULATED = "populated"


class PuzzleCache:
    """Serves puzzles from a randomly sampled batch, refilling as needed.

    All state is guarded by a single lock held for the whole request,
    including the store query, so concurrent callers never see a partially
    replaced batch and never run two refills at once.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._lock = threading.Lock()
        self._batch: List[Puzzle] = []
        self._served = 0
        self._min_rating = 0
        self._max_rating = 0
        self._store_path: Optional[str] = None
        self._populated = False
        self.refill_count = 0

    @property
    def state(self) -> CacheState:
        return CacheState.POPULATED if self._populated else CacheState.EMPTY

    @property
    def served_count(self) -> int:
        return self._served

    @property
    def remaining(self) -> int:
        return max(0, len(self._batch) - self._served)

    @property
    def window(self) -> Tuple[int, int]:
        return self._min_rating, self._max_rating

    def clear(self) -> None:
        """Drop the current batch."""
        with self._lock:
            self._batch = []
            self._served = 0
            self._store_path = None
            self._populated = False

    def request(self, store: PuzzleStore, min_rating: int, max_rating: int) -> Puzzle:
        """
        Get the next puzzle rated within [min_rating, max_rating].

        Raises:
            InvalidRatingWindow: if the window is negative or inverted
            StoreUnavailable: if a refill was needed and the store failed
            NoPuzzlesAvailable: if the current batch has no puzzles left
        """
        validate_rating_window(min_rating, max_rating)

        with self._lock:
            if self._needs_refill(store, min_rating, max_rating):
                self._refill(store, min_rating, max_rating)

            if self._served >= len(self._batch):
                raise NoPuzzlesAvailable(min_rating, max_rating)

            puzzle = self._batch[self._served]
            self._served += 1
            logger.debug(f"Serving puzzle {puzzle.id} ({self._served}/{len(self._batch)})")
            return puzzle

    def _needs_refill(self, store: PuzzleStore, min_rating: int, max_rating: int) -> bool:
        return (
            not self._batch
            or self._min_rating != min_rating
            or self._max_rating != max_rating
            or self._store_path != store.path
            or self._served >= self.capacity
        )

    def _refill(self, store: PuzzleStore, min_rating: int, max_rating: int) -> None:
        # Query first; the old batch stays intact if the store fails
        puzzles = store.sample(min_rating, max_rating, self.capacity)

        self._batch = list(puzzles[:self.capacity])
        self._served = 0
        self._min_rating = min_rating
        self._max_rating = max_rating
        self._store_path = store.path
        self._populated = True
        self.refill_count += 1
        logger.info(
            f"Refilled puzzle cache with {len(self._batch)} puzzles "
            f"rated {min_rating}-{max_rating} from {store.path}"
        )
