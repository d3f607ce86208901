"""Evaluation heuristics and the per-game scoring profile.

Scores are floats; positive favors white, negative favors black.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Final, Mapping, Optional

from greedy_chess.engine.board import Board, Color, Kind, Piece
from greedy_chess.engine.move import Square
from greedy_chess.engine.movegen import attackers_of


KINDS: Final = (Kind.PAWN, Kind.KNIGHT, Kind.BISHOP, Kind.ROOK, Kind.QUEEN, Kind.KING)

# Material values in pawns
BASE_PIECE_VALUE: Final[Mapping[Kind, float]] = {
    Kind.PAWN: 1.0,
    Kind.KNIGHT: 10.0,
    Kind.BISHOP: 12.0,
    Kind.ROOK: 20.0,
    Kind.QUEEN: 30.0,
    Kind.KING: 1000.0,
}
# Positional weight per rank step away from the board's middle
BASE_DEPTH_FACTOR: Final[Mapping[Kind, float]] = {
    Kind.PAWN: -0.2,
    Kind.KNIGHT: -0.1,
    Kind.BISHOP: -0.1,
    Kind.ROOK: 0.0,
    Kind.QUEEN: 0.0,
    Kind.KING: 0.1,
}
# Base of the exponent rewarding (or, below 1, penalizing) central files
BASE_CENTER_FACTOR: Final[Mapping[Kind, float]] = {
    Kind.PAWN: 1.2,
    Kind.KNIGHT: 1.1,
    Kind.BISHOP: 1.05,
    Kind.ROOK: 1.02,
    Kind.QUEEN: 1.01,
    Kind.KING: 0.99,
}
# Share of a piece's value lost when it has more attackers than supporters
BASE_DANGER_FACTOR: Final = 0.8

DEFAULT_JITTER: Final = 0.05
DEFAULT_NOISE: Final = 0.25
CENTER: Final = 3.5


@dataclass(frozen=True)
class ScoringProfile:
    """Evaluation coefficients, fixed for the lifetime of one game.

    Black piece values are the negation of white ones; depth and center
    factors are shared between colors. ``noise`` is the upper bound of the
    uniform fuzz added by :func:`score_board` (0 disables it).
    """

    piece_value: Mapping[Piece, float]
    depth_factor: Mapping[Piece, float]
    center_factor: Mapping[Piece, float]
    danger_factor: float
    noise: float = DEFAULT_NOISE

    @classmethod
    def default(cls, noise: float = DEFAULT_NOISE) -> "ScoringProfile":
        """Profile built from the base constants without any jitter."""
        return cls(
            piece_value=_signed(BASE_PIECE_VALUE),
            depth_factor=_shared(BASE_DEPTH_FACTOR),
            center_factor=_shared(BASE_CENTER_FACTOR),
            danger_factor=BASE_DANGER_FACTOR,
            noise=noise,
        )

    @classmethod
    def randomized(
        cls,
        rng: Optional[random.Random] = None,
        jitter: float = DEFAULT_JITTER,
        noise: float = DEFAULT_NOISE,
    ) -> "ScoringProfile":
        """Jitter the base constants by ``jitter`` so games differ.

        Piece values and the danger factor scale by U(1-r, 1+r), depth
        factors shift by U(-r, r), and center factors keep their distance
        from 1 scaled by U(1-r, 1+r).
        """
        rng = rng if rng is not None else random.Random()
        lo, hi = 1.0 - jitter, 1.0 + jitter
        values = {k: BASE_PIECE_VALUE[k] * rng.uniform(lo, hi) for k in KINDS}
        depth = {k: BASE_DEPTH_FACTOR[k] + rng.uniform(-jitter, jitter) for k in KINDS}
        center = {k: 1.0 + (BASE_CENTER_FACTOR[k] - 1.0) * rng.uniform(lo, hi) for k in KINDS}
        return cls(
            piece_value=_signed(values),
            depth_factor=_shared(depth),
            center_factor=_shared(center),
            danger_factor=BASE_DANGER_FACTOR * rng.uniform(lo, hi),
            noise=noise,
        )


def _signed(white: Mapping[Kind, float]) -> Dict[Piece, float]:
    out: Dict[Piece, float] = {}
    for kind, value in white.items():
        out[Piece(Color.WHITE, kind)] = value
        out[Piece(Color.BLACK, kind)] = -value
    return out


def _shared(table: Mapping[Kind, float]) -> Dict[Piece, float]:
    out: Dict[Piece, float] = {}
    for kind, value in table.items():
        out[Piece(Color.WHITE, kind)] = value
        out[Piece(Color.BLACK, kind)] = value
    return out


def score_piece(board: Board, square: Square, profile: ScoringProfile) -> float:
    """Score the piece on ``square``: presence, placement, and safety.

    Returns 0.0 for an empty square. A piece with more enemy attackers than
    friendly supporters loses ``danger_factor`` of its value.
    """
    p = board[square]
    if not isinstance(p, Piece):
        return 0.0
    value = profile.piece_value[p]
    score = value + (square.rank - CENTER) * profile.depth_factor[p] * profile.center_factor[
        p
    ] ** (CENTER - abs(square.file - CENTER))

    supports = 0
    attacks = 0
    for attacker in attackers_of(board, square):
        if attacker.color is p.color:
            supports += 1
        else:
            attacks += 1
    if attacks > supports:
        score -= profile.danger_factor * value
    return score


def score_board(
    board: Board, profile: ScoringProfile, rng: Optional[random.Random] = None
) -> float:
    """Sum :func:`score_piece` over all squares plus a small random fuzz."""
    score = 0.0
    for file in range(8):
        for rank in range(8):
            score += score_piece(board, Square(file, rank), profile)
    if profile.noise:
        source = rng if rng is not None else random
        score += source.uniform(0.0, profile.noise)
    return score
