from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Optional

from greedy_chess.engine.board import Board, Color, apply_move
from greedy_chess.engine.move import Move
from greedy_chess.engine.movegen import legal_moves_for
from greedy_chess.eval import ScoringProfile, score_board


logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[float]
    nodes: int
    time_ms: int


class SearchService:
    """One-ply greedy move selection.

    Every legal move of the side to move is applied and the resulting board
    scored; white keeps the maximum, black the minimum. Ties go to the move
    generated first. ``best_move`` is None exactly when no legal move exists.
    """

    def __init__(self, profile: ScoringProfile, rng: Optional[random.Random] = None) -> None:
        self.profile = profile
        self.rng = rng

    def search(self, board: Board, color: Color) -> SearchResult:
        start = time.perf_counter()
        best_move: Optional[Move] = None
        best_score: Optional[float] = None
        nodes = 0
        for move in legal_moves_for(board, color):
            child, _ = apply_move(board, move.from_sq, move.to_sq)
            s = score_board(child, self.profile, self.rng)
            nodes += 1
            if (
                best_score is None
                or (color is Color.WHITE and s > best_score)
                or (color is Color.BLACK and s < best_score)
            ):
                best_score = s
                best_move = move
        time_ms = int((time.perf_counter() - start) * 1000)
        if best_move is not None:
            logger.debug(
                "selected %s score=%.3f candidates=%d time_ms=%d",
                best_move.to_text(),
                best_score,
                nodes,
                time_ms,
            )
        else:
            logger.debug("no legal move for %s", color.name.lower())
        return SearchResult(best_move=best_move, score=best_score, nodes=nodes, time_ms=time_ms)
