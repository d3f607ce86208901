"""Attack detection and move generation.

Squares use the board orientation of :mod:`greedy_chess.engine.board`:
white pawns advance toward rank 0, black pawns toward rank 7. En passant is
not modeled.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .board import (
    BACK_RANK,
    BP,
    EMPTY,
    KING_HOME,
    WP,
    Board,
    Color,
    Kind,
    Piece,
    apply_move,
)
from .move import Move, Square


KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (2, -1),
    (2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
)
KING_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)
DIAGONALS: Tuple[Tuple[int, int], ...] = ((-1, -1), (1, -1), (-1, 1), (1, 1))
STRAIGHTS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))

_DIAGONAL_SLIDERS = (Kind.BISHOP, Kind.QUEEN)
_STRAIGHT_SLIDERS = (Kind.ROOK, Kind.QUEEN)


def _on_board(file: int, rank: int) -> bool:
    return 0 <= file <= 7 and 0 <= rank <= 7


def attackers_of(board: Board, square: Square) -> List[Piece]:
    """Return every piece, of either color, that could capture on ``square``.

    Turn and check are ignored; this is capture geometry only. Kings count as
    attackers of adjacent squares only.
    """
    attackers: List[Piece] = []
    f, r = square.file, square.rank

    # Black pawns capture toward higher ranks, white pawns toward lower ones.
    if r > 0:
        for df in (-1, 1):
            if _on_board(f + df, r - 1) and board.at(f + df, r - 1) == BP:
                attackers.append(BP)
    if r < 7:
        for df in (-1, 1):
            if _on_board(f + df, r + 1) and board.at(f + df, r + 1) == WP:
                attackers.append(WP)

    for df, dr in KNIGHT_OFFSETS:
        if _on_board(f + df, r + dr):
            p = board.at(f + df, r + dr)
            if isinstance(p, Piece) and p.kind is Kind.KNIGHT:
                attackers.append(p)

    _scan_rays(board, square, DIAGONALS, _DIAGONAL_SLIDERS, attackers)
    _scan_rays(board, square, STRAIGHTS, _STRAIGHT_SLIDERS, attackers)
    return attackers


def _scan_rays(
    board: Board,
    square: Square,
    directions: Iterable[Tuple[int, int]],
    sliders: Tuple[Kind, ...],
    out: List[Piece],
) -> None:
    for df, dr in directions:
        f, r = square.file + df, square.rank + dr
        first = True
        while _on_board(f, r):
            p = board.at(f, r)
            if isinstance(p, Piece):
                if p.kind in sliders or (first and p.kind is Kind.KING):
                    out.append(p)
                break
            f += df
            r += dr
            first = False


def is_attacked_by(board: Board, square: Square, color: Color) -> bool:
    return any(p.color is color for p in attackers_of(board, square))


def in_check(board: Board, color: Color) -> bool:
    """Return True if ``color``'s king is attacked.

    A missing king counts as being in check.
    """
    king_sq = board.king_square(color)
    if king_sq is None:
        return True
    return is_attacked_by(board, king_sq, color.opponent)


def pseudo_moves(board: Board, square: Square) -> List[Square]:
    """Destinations for the piece on ``square`` by movement geometry alone.

    Ignores whether the mover's king is left in check and never includes
    castling.
    """
    p = board[square]
    if not isinstance(p, Piece):
        return []
    if p.kind is Kind.PAWN:
        return _pawn_moves(board, square, p.color)
    if p.kind is Kind.KNIGHT:
        return _step_moves(board, square, p.color, KNIGHT_OFFSETS)
    if p.kind is Kind.KING:
        return _step_moves(board, square, p.color, KING_OFFSETS)
    moves: List[Square] = []
    if p.kind in _DIAGONAL_SLIDERS:
        moves.extend(_slide_moves(board, square, p.color, DIAGONALS))
    if p.kind in _STRAIGHT_SLIDERS:
        moves.extend(_slide_moves(board, square, p.color, STRAIGHTS))
    return moves


def _pawn_moves(board: Board, square: Square, color: Color) -> List[Square]:
    f, r = square.file, square.rank
    if color is Color.WHITE:
        step, start_rank = -1, 6
    else:
        step, start_rank = 1, 1
    ahead = r + step
    if not 0 <= ahead <= 7:
        return []
    moves: List[Square] = []
    if board.at(f, ahead) is EMPTY:
        moves.append(Square(f, ahead))
    if (
        r == start_rank
        and board.at(f, ahead) is EMPTY
        and board.at(f, ahead + step) is EMPTY
    ):
        moves.append(Square(f, ahead + step))
    for df in (-1, 1):
        if _on_board(f + df, ahead):
            target = board.at(f + df, ahead)
            if isinstance(target, Piece) and target.color is not color:
                moves.append(Square(f + df, ahead))
    return moves


def _step_moves(
    board: Board, square: Square, color: Color, offsets: Iterable[Tuple[int, int]]
) -> List[Square]:
    moves: List[Square] = []
    for df, dr in offsets:
        f, r = square.file + df, square.rank + dr
        if not _on_board(f, r):
            continue
        target = board.at(f, r)
        if isinstance(target, Piece) and target.color is color:
            continue
        moves.append(Square(f, r))
    return moves


def _slide_moves(
    board: Board, square: Square, color: Color, directions: Iterable[Tuple[int, int]]
) -> List[Square]:
    moves: List[Square] = []
    for df, dr in directions:
        f, r = square.file + df, square.rank + dr
        while _on_board(f, r):
            target = board.at(f, r)
            if isinstance(target, Piece):
                if target.color is not color:
                    moves.append(Square(f, r))
                break
            moves.append(Square(f, r))
            f += df
            r += dr
    return moves


def legal_moves(board: Board, square: Square) -> List[Square]:
    """Destinations for the piece on ``square`` that keep its own king safe.

    Castling destinations (two-file king moves) are appended after the
    regular moves, queenside first.
    """
    p = board[square]
    if not isinstance(p, Piece):
        return []
    color = p.color
    moves = [
        to_sq
        for to_sq in pseudo_moves(board, square)
        if not in_check(apply_move(board, square, to_sq)[0], color)
    ]
    if p.kind is Kind.KING and square == KING_HOME[color]:
        moves.extend(_castling_moves(board, color))
    return moves


def _castling_moves(board: Board, color: Color) -> List[Square]:
    rank = BACK_RANK[color]
    enemy = color.opponent
    rook = Piece(color, Kind.ROOK)
    moves: List[Square] = []
    if board.castling.queenside(color) and board.at(0, rank) == rook:
        if all(board.at(f, rank) is EMPTY for f in (1, 2, 3)) and not any(
            is_attacked_by(board, Square(f, rank), enemy) for f in (2, 3, 4)
        ):
            moves.append(Square(2, rank))
    if board.castling.kingside(color) and board.at(7, rank) == rook:
        if all(board.at(f, rank) is EMPTY for f in (5, 6)) and not any(
            is_attacked_by(board, Square(f, rank), enemy) for f in (4, 5, 6)
        ):
            moves.append(Square(6, rank))
    return moves


def legal_moves_for(board: Board, color: Color) -> List[Move]:
    """All legal moves of ``color``, files 0..7 outer, ranks 0..7 inner."""
    return [
        Move(from_sq, to_sq)
        for from_sq in board.squares(color)
        for to_sq in legal_moves(board, from_sq)
    ]


def has_legal_moves(board: Board, color: Color) -> bool:
    """Return True if ``color`` has at least one legal move."""
    return any(legal_moves(board, sq) for sq in board.squares(color))
