from __future__ import annotations

from greedy_chess.engine.board import (
    BB,
    BP,
    BQ,
    BR,
    EMPTY,
    STARTPOS_FEN,
    WP,
    WQ,
    Board,
    CastlingRights,
    Kind,
    apply_move,
)
from greedy_chess.engine.move import str_to_square


def _apply(b: Board, uci: str):
    return apply_move(b, str_to_square(uci[:2]), str_to_square(uci[2:4]))


def test_apply_returns_new_board_and_does_not_mutate() -> None:
    b = Board.startpos()
    b2, captured = _apply(b, "e2e4")
    assert b.to_fen() == STARTPOS_FEN
    assert b2.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR w KQkq - 0 1"
    assert captured is EMPTY


def test_capture_returns_previous_occupant() -> None:
    b = Board.from_fen("4k3/8/8/3p4/4P3/8/8/4K3")
    b2, captured = _apply(b, "e4d5")
    assert captured == BP
    assert b2[str_to_square("d5")] == WP
    assert b2[str_to_square("e4")] is EMPTY


def test_white_pawn_promotes_to_queen() -> None:
    b = Board.from_fen("7k/4P3/8/8/8/8/8/4K3")
    b2, captured = _apply(b, "e7e8")
    assert b2[str_to_square("e8")] == WQ
    assert captured is EMPTY


def test_capture_promotion_records_captured_piece() -> None:
    b = Board.from_fen("3r3k/4P3/8/8/8/8/8/4K3")
    b2, captured = _apply(b, "e7d8")
    assert b2[str_to_square("d8")] == WQ
    assert captured == BR


def test_black_pawn_promotes_to_queen() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/3p4/K7")
    b2, _ = _apply(b, "d2d1")
    assert b2[str_to_square("d1")] == BQ


def test_promotion_only_ever_yields_queens() -> None:
    b = Board.from_fen("r1n1k3/1P1P4/8/8/8/8/1p1p4/R1N1K3")
    for uci in ("b7a8", "b7b8", "b7c8", "d7c8", "d7d8"):
        b2, _ = _apply(b, uci)
        assert b2[str_to_square(uci[2:4])].kind is Kind.QUEEN
    for uci in ("b2a1", "b2b1", "b2c1", "d2c1", "d2d1"):
        b2, _ = _apply(b, uci)
        assert b2[str_to_square(uci[2:4])] == BQ


def test_non_final_rank_pawn_move_keeps_pawn() -> None:
    b = Board.from_fen("4k3/8/4P3/8/8/8/8/4K3")
    b2, _ = _apply(b, "e6e7")
    assert b2[str_to_square("e7")] == WP


FULL_RIGHTS = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"


def test_king_move_clears_both_rights_of_its_color() -> None:
    b2, _ = _apply(Board.from_fen(FULL_RIGHTS), "e1e2")
    assert b2.castling == CastlingRights(False, False, True, True)
    b3, _ = _apply(Board.from_fen(FULL_RIGHTS), "e8d8")
    assert b3.castling == CastlingRights(True, True, False, False)


def test_rook_leaving_home_clears_only_its_flag() -> None:
    b = Board.from_fen(FULL_RIGHTS)
    assert _apply(b, "h1h2")[0].castling == CastlingRights(False, True, True, True)
    assert _apply(b, "a1a2")[0].castling == CastlingRights(True, False, True, True)
    assert _apply(b, "h8h7")[0].castling == CastlingRights(True, True, False, True)
    assert _apply(b, "a8a7")[0].castling == CastlingRights(True, True, True, False)


def test_rook_captured_on_home_square_clears_only_its_flag() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/1b6/R3K2R b KQkq - 0 1")
    b2, captured = _apply(b, "b2a1")
    assert captured.kind is Kind.ROOK
    assert b2.castling == CastlingRights(True, False, True, True)
    assert b2[str_to_square("a1")] == BB


def test_rook_trade_on_home_squares_clears_both_flags() -> None:
    b2, _ = _apply(Board.from_fen(FULL_RIGHTS), "a8a1")
    assert b2.castling == CastlingRights(True, False, True, False)


def test_unrelated_move_keeps_rights() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/4P3/R3K2R w KQkq - 0 1")
    assert _apply(b, "e2e4")[0].castling == CastlingRights()
