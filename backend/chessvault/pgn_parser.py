"""
PGN parsing into byte-encoded games.
"""
import io
import logging
import chess
import chess.pgn
from typing import List, Optional

from .encoding import encode_moves
from .errors import ChessVaultError, InvalidMove
from .game_data import EncodedGame, GameMetadata

logger = logging.getLogger(__name__)


def parse_pgn(pgn_string: str) -> Optional[EncodedGame]:
    """
    Parse a single PGN game into an EncodedGame.

    Returns None when the string contains no game. Raises InvalidMove if the
    mainline contains a move python-chess could not play.
    """
    game = chess.pgn.read_game(io.StringIO(pgn_string))
    if game is None:
        return None

    if game.errors:
        # python-chess records illegal/ambiguous SAN here instead of raising
        error = game.errors[0]
        raise InvalidMove(str(error), game.board().fen())

    headers = game.headers
    metadata = GameMetadata(
        white=headers.get('White', 'Unknown'),
        black=headers.get('Black', 'Unknown'),
        result=headers.get('Result', '*'),
        date=headers.get('Date'),
        time_control=headers.get('TimeControl'),
        eco=headers.get('ECO'),
        event=headers.get('Event'),
        site=headers.get('Site'),
    )

    board = game.board()
    fen = board.fen() if board.fen() != chess.STARTING_FEN else None

    return EncodedGame(
        metadata=metadata,
        moves=encode_moves(game.mainline_moves(), board),
        fen=fen,
    )


def parse_pgns(pgn_strings: List[str]) -> List[EncodedGame]:
    """Parse multiple PGN strings, skipping games that fail to parse."""
    games = []
    for i, pgn in enumerate(pgn_strings):
        if (i + 1) % 500 == 0:
            logger.info(f"Parsed {i + 1}/{len(pgn_strings)} games...")
        try:
            game = parse_pgn(pgn)
        except (ChessVaultError, ValueError) as e:
            logger.warning(f"Skipping game {i}: {e}")
            continue
        if game:
            games.append(game)
    return games
