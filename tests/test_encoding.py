import chess
import pytest

from chessvault.encoding import (
    FORMAT_VERSION,
    decode_move,
    decode_move_list,
    decode_moves,
    encode_move,
    encode_moves,
    encode_san_moves,
    pack_game,
    replay_moves,
    unpack_game,
)
from chessvault.errors import CorruptGameData, InvalidMove

FOOLS_MATE_FEN = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
PROMOTION_FEN = "8/P6k/8/8/8/8/8/K7 w - - 0 1"


def idx(board: chess.Board, uci: str) -> int:
    return list(board.legal_moves).index(chess.Move.from_uci(uci))


def test_encode_e4_from_start_position():
    board = chess.Board()
    move = chess.Move.from_uci("e2e4")

    byte = encode_move(move, board)

    assert byte == idx(board, "e2e4")
    assert decode_move(byte, board) == move
    # Board untouched
    assert board.fen() == chess.STARTING_FEN


def test_encode_e5_after_e4():
    board = chess.Board()
    board.push_uci("e2e4")
    move = chess.Move.from_uci("e7e5")

    assert decode_move(encode_move(move, board), board) == move


def test_round_trip_every_legal_move_along_a_game():
    board = chess.Board()
    for san in ["e4", "d5", "exd5", "Qxd5", "Nc3", "Qa5", "d4", "c6", "Nf3", "Bf5", "Bc4", "e6"]:
        for move in board.legal_moves:
            assert decode_move(encode_move(move, board), board) == move
        board.push_san(san)


def test_round_trip_castling_en_passant_and_promotion():
    castle = chess.Board("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    for uci in ("e1g1", "e1c1"):
        move = chess.Move.from_uci(uci)
        assert decode_move(encode_move(move, castle), castle) == move

    en_passant = chess.Board("rnbqkbnr/ppp1p1pp/8/3pPp2/8/8/PPPP1PPP/RNBQKBNR w KQkq f6 0 3")
    move = chess.Move.from_uci("e5f6")
    assert en_passant.is_en_passant(move)
    assert decode_move(encode_move(move, en_passant), en_passant) == move

    promotion = chess.Board(PROMOTION_FEN)
    for piece in "qrbn":
        move = chess.Move.from_uci("a7a8" + piece)
        assert decode_move(encode_move(move, promotion), promotion) == move


def test_encode_illegal_move_raises():
    board = chess.Board()
    with pytest.raises(InvalidMove) as exc:
        encode_move(chess.Move.from_uci("e2e5"), board)
    assert exc.value.fen == board.fen()


def test_decode_out_of_range_returns_none():
    board = chess.Board()
    count = board.legal_moves.count()
    assert count == 20
    for byte in range(count, 256):
        assert decode_move(byte, board) is None


@pytest.mark.parametrize("fen", [FOOLS_MATE_FEN, STALEMATE_FEN])
def test_decode_with_no_legal_moves(fen):
    board = chess.Board(fen)
    assert board.legal_moves.count() == 0
    assert all(decode_move(byte, board) is None for byte in range(256))


def test_decode_sequence_italian_opening():
    board = chess.Board()
    data = bytearray()
    for uci in ("e2e4", "e7e5", "g1f3", "b8c6"):
        data.append(idx(board, uci))
        board.push_uci(uci)

    assert decode_moves(bytes(data)) == "e4 e5 Nf3 Nc6"


def test_decode_sequence_is_deterministic():
    data = encode_san_moves(["d4", "Nf6", "c4", "e6", "Nc3", "Bb4"])
    assert decode_moves(data) == decode_moves(data) == "d4 Nf6 c4 e6 Nc3 Bb4"


def test_decode_empty_sequence():
    assert decode_moves(b"") == ""
    assert encode_moves([]) == b""
    assert encode_san_moves([]) == b""


def test_decode_includes_check_and_mate_suffixes():
    data = encode_san_moves(["f3", "e5", "g4", "Qh4#"])
    assert decode_moves(data) == "f3 e5 g4 Qh4#"


def test_decode_corrupt_byte_reports_ply():
    data = encode_san_moves(["e4", "e5"]) + bytes([250]) + encode_san_moves(["e4"])
    with pytest.raises(CorruptGameData) as exc:
        decode_moves(data)
    assert exc.value.ply == 2


def test_decode_past_checkmate_is_corrupt():
    data = encode_san_moves(["f3", "e5", "g4", "Qh4#"]) + bytes([0])
    with pytest.raises(CorruptGameData) as exc:
        decode_moves(data)
    assert exc.value.ply == 4


def test_encode_moves_matches_san_encoding():
    board = chess.Board()
    moves = []
    for san in ["e4", "c5", "Nf3", "d6", "d4", "cxd4", "Nxd4"]:
        move = board.parse_san(san)
        moves.append(move)
        board.push(move)

    assert encode_moves(moves) == encode_san_moves(["e4", "c5", "Nf3", "d6", "d4", "cxd4", "Nxd4"])
    assert decode_move_list(encode_moves(moves)) == moves


def test_encode_moves_does_not_modify_board():
    board = chess.Board()
    encode_moves([chess.Move.from_uci("e2e4")], board)
    assert board.fen() == chess.STARTING_FEN


def test_encode_moves_illegal_move_raises():
    moves = [chess.Move.from_uci("e2e4"), chess.Move.from_uci("e2e4")]
    with pytest.raises(InvalidMove):
        encode_moves(moves)


def test_encode_san_skips_result_tokens():
    assert encode_san_moves(["e4", "e5", "1-0"]) == encode_san_moves(["e4", "e5"])


@pytest.mark.parametrize("san", ["Ke3", "xyz", "Nd2"])
def test_encode_san_rejects_bad_tokens(san):
    # Nd2 is illegal because d2 still holds the white pawn
    with pytest.raises(InvalidMove):
        encode_san_moves(["e4", "e5", san])


def test_decode_from_custom_fen():
    data = encode_san_moves(["a8=Q"], fen=PROMOTION_FEN)
    assert decode_moves(data, fen=PROMOTION_FEN) == "a8=Q"


def test_replay_moves_callback_sees_pre_move_board():
    data = encode_san_moves(["e4", "e5", "Nf3"])
    seen = []

    def callback(board, move, ply):
        seen.append((board.san(move), ply))

    board, moves = replay_moves(data, callback=callback)

    assert seen == [("e4", 1), ("e5", 2), ("Nf3", 3)]
    assert len(moves) == 3
    assert board.fullmove_number == 2


def test_pack_and_unpack_game():
    data = encode_san_moves(["e4", "e5", "Nf3", "Nc6"])
    blob = pack_game(data)

    assert blob[:2] == b"CV"
    assert blob[2] == FORMAT_VERSION
    assert unpack_game(blob) == data
    assert decode_moves(unpack_game(blob)) == "e4 e5 Nf3 Nc6"


@pytest.mark.parametrize("blob,reason", [
    (b"C", "truncated"),
    (b"XX\x01\x00\x00", "magic"),
    (b"CV\x09\x00\x00", "version"),
    (b"CV\x01\x00\x03\x01\x02", "expected 3"),
])
def test_unpack_game_rejects_bad_headers(blob, reason):
    with pytest.raises(CorruptGameData) as exc:
        unpack_game(blob)
    assert exc.value.ply is None
    assert reason in exc.value.reason
