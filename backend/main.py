"""
Chess Vault Backend API
"""
import logging
from fastapi import FastAPI, Query, HTTPException, Depends, Request
from pydantic import BaseModel
from typing import Optional, List, Dict, Any

from chessvault import config
from chessvault.encoding import decode_moves, encode_san_moves
from chessvault.errors import (
    CorruptGameData,
    InvalidMove,
    InvalidRatingWindow,
    NoPuzzlesAvailable,
    StoreUnavailable,
)
from chessvault.puzzle_cache import PuzzleCache
from chessvault.puzzle_store import open_puzzle_store

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Chess Vault API")
app.state.puzzle_cache = PuzzleCache(capacity=config.PUZZLE_BATCH_SIZE)


# ============================================
# Pydantic models for request/response
# ============================================

class EncodeRequest(BaseModel):
    moves: List[str]
    fen: Optional[str] = None


class EncodeResponse(BaseModel):
    moves: List[int]
    plyCount: int


class DecodeRequest(BaseModel):
    moves: List[int]
    fen: Optional[str] = None


class DecodeResponse(BaseModel):
    san: str


class PuzzleResponse(BaseModel):
    id: int
    fen: str
    moves: str
    rating: int
    ratingDeviation: int
    popularity: int
    nbPlays: int


class PuzzleDatabaseInfoResponse(BaseModel):
    title: str
    description: str
    puzzleCount: int
    storageSize: int
    path: str


# ============================================
# Dependencies
# ============================================

def get_puzzle_cache(request: Request) -> PuzzleCache:
    """The process-wide puzzle cache created at startup."""
    return request.app.state.puzzle_cache


def get_puzzle_dir() -> str:
    return config.PUZZLE_DIR


# ============================================
# Puzzle endpoints
# ============================================

@app.get("/api/puzzles/next", response_model=PuzzleResponse)
def get_puzzle(
    file: str = Query(..., description="Puzzle database file name"),
    minRating: int = Query(..., description="Minimum puzzle rating"),
    maxRating: int = Query(..., description="Maximum puzzle rating"),
    cache: PuzzleCache = Depends(get_puzzle_cache),
    puzzle_dir: str = Depends(get_puzzle_dir),
):
    """Serve the next puzzle rated within [minRating, maxRating]."""
    try:
        store = open_puzzle_store(config.resolve_puzzle_path(file, puzzle_dir))
        puzzle = cache.request(store, minRating, maxRating)
    except InvalidRatingWindow as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoPuzzlesAvailable as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    return PuzzleResponse(
        id=puzzle.id,
        fen=puzzle.fen,
        moves=puzzle.moves,
        rating=puzzle.rating,
        ratingDeviation=puzzle.rating_deviation,
        popularity=puzzle.popularity,
        nbPlays=puzzle.nb_plays,
    )


@app.get("/api/puzzles/info", response_model=PuzzleDatabaseInfoResponse)
def get_puzzle_db_info(
    file: str = Query(..., description="Puzzle database file name"),
    puzzle_dir: str = Depends(get_puzzle_dir),
):
    """Get puzzle count and file size of a puzzle database."""
    try:
        info = open_puzzle_store(config.resolve_puzzle_path(file, puzzle_dir)).info()
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    return PuzzleDatabaseInfoResponse(
        title=info.title,
        description=info.description,
        puzzleCount=info.puzzle_count,
        storageSize=info.storage_size,
        path=info.path,
    )


# ============================================
# Game encoding endpoints
# ============================================

@app.post("/api/games/encode", response_model=EncodeResponse)
def encode_game(request: EncodeRequest):
    """Encode SAN moves to one byte per ply."""
    try:
        data = encode_san_moves(request.moves, fen=request.fen)
    except InvalidMove as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        # Bad starting FEN
        raise HTTPException(status_code=400, detail=str(e))

    return EncodeResponse(moves=list(data), plyCount=len(data))


@app.post("/api/games/decode", response_model=DecodeResponse)
def decode_game(request: DecodeRequest):
    """Decode move bytes back to SAN."""
    if any(b < 0 or b > 255 for b in request.moves):
        raise HTTPException(status_code=400, detail="Move bytes must be in 0-255")

    try:
        san = decode_moves(bytes(request.moves), fen=request.fen)
    except CorruptGameData as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return DecodeResponse(san=san)


@app.get("/health")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok"}
