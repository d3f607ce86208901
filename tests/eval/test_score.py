from __future__ import annotations

import random

import pytest

from greedy_chess.engine.board import EMPTY, Board, Piece, apply_move
from greedy_chess.engine.move import Square, str_to_square
from greedy_chess.eval import ScoringProfile, score_board, score_piece


def _mirror(board: Board) -> Board:
    """Swap piece colors and flip ranks."""
    cells = []
    for rank in range(8):
        for file in range(8):
            p = board.at(file, 7 - rank)
            if isinstance(p, Piece):
                cells.append(Piece(p.color.opponent, p.kind))
            else:
                cells.append(EMPTY)
    return Board(cells=tuple(cells), castling=board.castling)


def test_empty_square_scores_zero() -> None:
    assert score_piece(Board.startpos(), str_to_square("e4"), ScoringProfile.default()) == 0.0


def test_pawn_positional_term() -> None:
    b = Board.from_fen("8/8/8/8/8/8/4P3/8")
    # 1 + (6 - 3.5) * -0.2 * 1.2 ** (3.5 - 0.5)
    assert score_piece(b, str_to_square("e2"), ScoringProfile.default()) == pytest.approx(0.1360)


def test_advancing_pawns_helps_their_side() -> None:
    profile = ScoringProfile.default(noise=0.0)
    white = Board.from_fen("4k3/8/8/8/8/8/4P3/4K3")
    white_advanced = Board.from_fen("4k3/8/8/8/4P3/8/8/4K3")
    assert score_board(white_advanced, profile) > score_board(white, profile)
    black = Board.from_fen("4k3/4p3/8/8/8/8/8/4K3")
    black_advanced = Board.from_fen("4k3/8/8/4p3/8/8/8/4K3")
    assert score_board(black_advanced, profile) < score_board(black, profile)


def test_hanging_piece_loses_danger_share() -> None:
    profile = ScoringProfile.default()
    positional = 0.5 * -0.1 * 1.1**3
    hanging = Board.from_fen("3r4/8/8/8/3N4/8/8/8")
    assert score_piece(hanging, str_to_square("d4"), profile) == pytest.approx(10 + positional - 8)
    defended = Board.from_fen("3r4/8/8/8/3N4/8/8/3R4")
    assert score_piece(defended, str_to_square("d4"), profile) == pytest.approx(10 + positional)


def test_hanging_black_piece_favors_white() -> None:
    profile = ScoringProfile.default()
    hanging = Board.from_fen("8/8/8/3n4/8/8/8/3R4")
    safe = Board.from_fen("3r4/8/8/3n4/8/8/8/3R4")
    assert score_piece(hanging, str_to_square("d5"), profile) > score_piece(
        safe, str_to_square("d5"), profile
    )


@pytest.mark.parametrize(
    "fen",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR",
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R",
        "3r4/8/8/8/3N4/8/8/3R4",
        "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8",
    ],
)
def test_color_swap_and_rank_mirror_negates_score(fen: str) -> None:
    profile = ScoringProfile.randomized(random.Random(5), noise=0.0)
    board = Board.from_fen(fen)
    assert score_board(_mirror(board), profile) == pytest.approx(-score_board(board, profile))


def test_startpos_is_balanced() -> None:
    profile = ScoringProfile.randomized(random.Random(8), noise=0.0)
    assert score_board(Board.startpos(), profile) == pytest.approx(0.0, abs=1e-9)


def test_noise_is_small_and_nonnegative() -> None:
    quiet = ScoringProfile.default(noise=0.0)
    noisy = ScoringProfile.default()
    board, _ = apply_move(Board.startpos(), Square(4, 6), Square(4, 4))
    base = score_board(board, quiet)
    rng = random.Random(3)
    for _ in range(50):
        delta = score_board(board, noisy, rng) - base
        assert -1e-9 <= delta < 0.25 + 1e-9


def test_noise_draws_from_injected_rng() -> None:
    profile = ScoringProfile.default()
    board = Board.startpos()
    assert score_board(board, profile, random.Random(1)) == score_board(
        board, profile, random.Random(1)
    )
