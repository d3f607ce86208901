from __future__ import annotations

from .board import Board, Color, apply_move
from .movegen import legal_moves_for


def perft(board: Board, depth: int, side_to_move: Color = Color.WHITE) -> int:
    """Compute perft node count for ``board`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Counts differ from standard tables once en passant or under-promotion
    would matter, since neither is generated here.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = legal_moves_for(board, side_to_move)
    if depth == 1:
        return len(moves)
    nodes = 0
    for m in moves:
        child, _ = apply_move(board, m.from_sq, m.to_sq)
        nodes += perft(child, depth - 1, side_to_move.opponent)
    return nodes
