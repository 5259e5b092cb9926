"""
Compact move encoding: one byte per move.

Each move is stored as its index in the position's legal move list, as
generated by python-chess. A byte therefore only means something together
with the position it was encoded in, and decoding has to replay the game
from its starting position.
"""
import struct
import chess
from typing import Callable, Iterable, List, Optional, Tuple

from .errors import CorruptGameData, InvalidMove

# Container header: magic, format version, ply count (big-endian)
GAME_MAGIC = b"CV"
FORMAT_VERSION = 1
HEADER = struct.Struct(">2sBH")

RESULT_TOKENS = ('1-0', '0-1', '1/2-1/2', '*')


def _start_board(fen: Optional[str] = None) -> chess.Board:
    return chess.Board(fen) if fen else chess.Board()


def encode_move(move: chess.Move, board: chess.Board) -> int:
    """
    Encode a move as its index in the board's legal move list.

    Args:
        move: A move legal in ``board``
        board: Position the move is played from (not modified)

    Returns:
        Index in [0, 255]

    Raises:
        InvalidMove: if the move is not legal in the position
    """
    for index, legal in enumerate(board.legal_moves):
        if legal == move:
            return index
    raise InvalidMove(move, board.fen())


def decode_move(byte: int, board: chess.Board) -> Optional[chess.Move]:
    """Decode a move byte against a position. Returns None if out of range."""
    if byte < 0:
        return None
    for index, legal in enumerate(board.legal_moves):
        if index == byte:
            return legal
    return None


def encode_moves(moves: Iterable[chess.Move], board: Optional[chess.Board] = None) -> bytes:
    """
    Encode a sequence of moves played from ``board``.

    Args:
        moves: Moves in ply order
        board: Optional starting board position (defaults to standard start)

    Returns:
        One byte per ply
    """
    board = chess.Board() if board is None else board.copy(stack=False)

    encoded = bytearray()
    for move in moves:
        encoded.append(encode_move(move, board))
        board.push(move)
    return bytes(encoded)


def encode_san_moves(san_moves: Iterable[str], fen: Optional[str] = None) -> bytes:
    """
    Convert SAN moves to the byte encoding.

    Result tokens are ignored. Any other token that does not parse as a
    legal move raises InvalidMove.
    """
    board = _start_board(fen)

    encoded = bytearray()
    for san in san_moves:
        clean_san = san.strip()
        if not clean_san or clean_san in RESULT_TOKENS:
            continue
        try:
            move = board.parse_san(clean_san)
        except (chess.InvalidMoveError, chess.IllegalMoveError, chess.AmbiguousMoveError):
            raise InvalidMove(clean_san, board.fen()) from None
        encoded.append(encode_move(move, board))
        board.push(move)
    return bytes(encoded)


def replay_moves(
    data: bytes,
    callback: Optional[Callable[[chess.Board, chess.Move, int], None]] = None,
    fen: Optional[str] = None,
) -> Tuple[chess.Board, List[chess.Move]]:
    """
    Replay an encoded game, optionally calling a callback before each move.

    The callback receives the board before the move is pushed, the move and
    the 1-based ply number.

    Raises:
        CorruptGameData: at the first byte with no matching legal move
    """
    board = _start_board(fen)
    moves = []

    for ply, byte in enumerate(data):
        move = decode_move(byte, board)
        if move is None:
            raise CorruptGameData(ply, f"byte {byte} out of range in {board.fen()}")
        if callback:
            callback(board, move, ply + 1)
        board.push(move)
        moves.append(move)

    return board, moves


def decode_move_list(data: bytes, fen: Optional[str] = None) -> List[chess.Move]:
    """Decode an encoded game to a list of chess.Move objects."""
    _, moves = replay_moves(data, fen=fen)
    return moves


def decode_moves(data: bytes, fen: Optional[str] = None) -> str:
    """
    Decode an encoded game to space-separated SAN.

    Each move is formatted against the position before it is played.
    An empty sequence decodes to an empty string.
    """
    sans = []

    def collect(board: chess.Board, move: chess.Move, ply: int) -> None:
        sans.append(board.san(move))

    replay_moves(data, callback=collect, fen=fen)
    return " ".join(sans)


def pack_game(data: bytes) -> bytes:
    """Prefix an encoded game with a magic/version/length header for storage."""
    if len(data) > 0xFFFF:
        raise ValueError(f"Game too long to pack: {len(data)} plies")
    return HEADER.pack(GAME_MAGIC, FORMAT_VERSION, len(data)) + bytes(data)


def unpack_game(blob: bytes) -> bytes:
    """
    Validate a packed game and return its move bytes.

    Raises:
        CorruptGameData: on a bad magic, unknown version or length mismatch
    """
    if len(blob) < HEADER.size:
        raise CorruptGameData(None, "truncated header")

    magic, version, ply_count = HEADER.unpack_from(blob)
    if magic != GAME_MAGIC:
        raise CorruptGameData(None, "bad magic")
    if version != FORMAT_VERSION:
        raise CorruptGameData(None, f"unsupported format version {version}")

    data = bytes(blob[HEADER.size:])
    if len(data) != ply_count:
        raise CorruptGameData(None, f"expected {ply_count} plies, found {len(data)}")
    return data
