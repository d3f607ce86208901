from __future__ import annotations

import random

from greedy_chess.engine.board import PIECE_ORDER, Board, Color, apply_move
from greedy_chess.engine.move import Move, Square, str_to_square
from greedy_chess.engine.movegen import legal_moves_for
from greedy_chess.eval import ScoringProfile, score_board
from greedy_chess.search.service import SearchService


def _flat_profile() -> ScoringProfile:
    return ScoringProfile(
        piece_value={p: 0.0 for p in PIECE_ORDER},
        depth_factor={p: 0.0 for p in PIECE_ORDER},
        center_factor={p: 1.0 for p in PIECE_ORDER},
        danger_factor=0.0,
        noise=0.0,
    )


def test_white_takes_hanging_queen() -> None:
    board = Board.from_fen("7k/6pp/8/3q4/8/8/3R4/K7 w - - 0 1")
    res = SearchService(ScoringProfile.default(noise=0.0)).search(board, Color.WHITE)
    assert res.best_move == Move(str_to_square("d2"), str_to_square("d5"))
    assert res.nodes == len(legal_moves_for(board, Color.WHITE))


def test_black_takes_hanging_queen() -> None:
    board = Board.from_fen("k7/3r4/8/8/3Q4/8/6PP/7K b - - 0 1")
    res = SearchService(ScoringProfile.default(noise=0.0)).search(board, Color.BLACK)
    assert res.best_move == Move(str_to_square("d7"), str_to_square("d4"))


def test_selects_extremum_with_first_wins_ties() -> None:
    fens = [
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR",
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R KQkq",
    ]
    profile = ScoringProfile.randomized(random.Random(17), noise=0.0)
    for fen in fens:
        parts = fen.split()
        board = Board.from_fen(f"{parts[0]} w {parts[1] if len(parts) > 1 else '-'} - 0 1")
        for color in (Color.WHITE, Color.BLACK):
            moves = legal_moves_for(board, color)
            scores = [score_board(apply_move(board, m.from_sq, m.to_sq)[0], profile) for m in moves]
            target = max(scores) if color is Color.WHITE else min(scores)
            res = SearchService(profile).search(board, color)
            assert res.score == target
            assert res.best_move == moves[scores.index(target)]


def test_zero_score_still_yields_first_move() -> None:
    board = Board.startpos()
    white = SearchService(_flat_profile()).search(board, Color.WHITE)
    assert white.score == 0.0
    assert white.best_move == Move(Square(0, 6), Square(0, 5))
    black = SearchService(_flat_profile()).search(board, Color.BLACK)
    assert black.best_move == Move(Square(0, 1), Square(0, 2))


def test_no_legal_move_returns_none() -> None:
    board = Board.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    res = SearchService(ScoringProfile.default()).search(board, Color.BLACK)
    assert res.best_move is None
    assert res.score is None
    assert res.nodes == 0


def test_seeded_noise_is_reproducible() -> None:
    profile = ScoringProfile.default()
    board = Board.startpos()
    a = SearchService(profile, random.Random(99)).search(board, Color.WHITE)
    b = SearchService(profile, random.Random(99)).search(board, Color.WHITE)
    assert a.best_move == b.best_move
    assert a.score == b.score
