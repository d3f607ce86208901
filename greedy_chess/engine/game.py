from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from greedy_chess.eval import ScoringProfile
from greedy_chess.search.service import SearchService

from .board import Board, Color, Piece, apply_move, side_to_move_from_fen
from .move import Move, Square
from .movegen import has_legal_moves, in_check, legal_moves


logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    WHITE_WINS = "white_wins"
    BLACK_WINS = "black_wins"
    STALEMATE = "stalemate"

    @classmethod
    def win_for(cls, color: Color) -> "Outcome":
        return cls.WHITE_WINS if color is Color.WHITE else cls.BLACK_WINS


class Phase(str, Enum):
    IN_PROGRESS = "in_progress"
    AWAITING_AUTOMATED_REPLY = "awaiting_automated_reply"
    TERMINAL = "terminal"


STATUS_READY = "Ready."
STATUS_CHECK = "Check."
STATUS_THINKING = "Thinking..."
STATUS_USER_WINS = "Checkmate: you win!"
STATUS_USER_LOSES = "Checkmate: you lost. :-("
STATUS_STALEMATE = "Stalemate."


@dataclass
class Game:
    """One user-versus-automated-player game.

    Responsibility: hold the board and scoring profile, track the user's
    selection, apply user moves, answer them with the automated player, and
    detect checkmate/stalemate. Control only returns to the caller on the
    user's turn or once the game is over.
    """

    board: Board
    profile: ScoringProfile
    user_color: Color = Color.WHITE
    rng: random.Random = field(default_factory=random.Random, repr=False)
    result: Optional[Outcome] = None
    phase: Phase = Phase.IN_PROGRESS
    status: str = STATUS_READY
    selected: Optional[Square] = None
    moves: List[Square] = field(default_factory=list)
    taken_white: List[Piece] = field(default_factory=list)
    taken_black: List[Piece] = field(default_factory=list)
    last_automated_move: Optional[Move] = None
    move_stack: List[Move] = field(default_factory=list)

    @classmethod
    def new(
        cls,
        user_color: Color = Color.WHITE,
        *,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        profile: Optional[ScoringProfile] = None,
    ) -> "Game":
        """Start a game from the initial position with a fresh scoring profile.

        When the user plays black, the automated side makes white's first
        move before this returns.
        """
        rng = rng if rng is not None else random.Random(seed)
        if profile is None:
            profile = ScoringProfile.randomized(rng)
        game = cls(board=Board.startpos(), profile=profile, user_color=user_color, rng=rng)
        logger.info("new game, user plays %s", user_color.name.lower())
        if user_color is Color.BLACK:
            game.run_automated_turn()
        return game

    @classmethod
    def from_fen(
        cls,
        fen: str,
        user_color: Optional[Color] = None,
        *,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        profile: Optional[ScoringProfile] = None,
    ) -> "Game":
        """Load a position. The user defaults to the FEN's side to move.

        The automated side is not asked to move; call
        :meth:`run_automated_turn` for that.
        """
        board = Board.from_fen(fen)
        if user_color is None:
            user_color = side_to_move_from_fen(fen)
        rng = rng if rng is not None else random.Random(seed)
        if profile is None:
            profile = ScoringProfile.randomized(rng)
        game = cls(board=board, profile=profile, user_color=user_color, rng=rng)
        game._update_user_status()
        return game

    def restart(self, user_color: Optional[Color] = None) -> "Game":
        """Return a brand-new game (fresh board and profile) drawing on the same RNG."""
        color = self.user_color if user_color is None else user_color
        logger.info("restart, user plays %s", color.name.lower())
        return Game.new(color, rng=self.rng)

    @property
    def computer_color(self) -> Color:
        return self.user_color.opponent

    def to_fen(self) -> str:
        # Control sits with the user unless the game is over.
        return self.board.to_fen(self.user_color)

    def in_check(self) -> bool:
        return in_check(self.board, self.user_color)

    def select_square(self, square: Square) -> List[Square]:
        """Select the user's piece on ``square`` and return its legal destinations.

        Returns an empty list, leaving nothing selected, if the game is over,
        the square is empty or holds an opponent piece, or the piece cannot move.
        """
        self.clear_selection()
        if self.result is not None:
            return []
        p = self.board[square]
        if not isinstance(p, Piece) or p.color is not self.user_color:
            return []
        moves = legal_moves(self.board, square)
        if moves:
            self.selected = square
            self.moves = moves
        return list(moves)

    def clear_selection(self) -> None:
        self.selected = None
        self.moves = []

    def attempt_user_move(self, destination: Square) -> bool:
        """Move the selected piece to ``destination`` if that is one of its legal moves.

        A valid move is answered by the automated player before returning.
        Anything else just clears the selection. Returns whether a move was made.
        """
        if self.result is not None or self.selected is None or destination not in self.moves:
            self.clear_selection()
            return False
        origin = self.selected
        self.clear_selection()
        self._apply(Move(origin, destination))
        self.phase = Phase.AWAITING_AUTOMATED_REPLY
        self.run_automated_turn()
        return True

    def play(self, move: Move) -> bool:
        """Select ``move.from_sq`` and move it to ``move.to_sq`` in one step."""
        self.select_square(move.from_sq)
        return self.attempt_user_move(move.to_sq)

    def run_automated_turn(self) -> None:
        """Let the automated side move, then settle the game status.

        If the automated side has no legal move the game ends: the user wins
        when it is in check, otherwise it is a stalemate.
        """
        if self.result is not None:
            return
        color = self.computer_color
        self.phase = Phase.AWAITING_AUTOMATED_REPLY
        self.status = STATUS_THINKING
        res = SearchService(self.profile, self.rng).search(self.board, color)
        if res.best_move is None:
            if in_check(self.board, color):
                self._finish(Outcome.win_for(self.user_color), STATUS_USER_WINS)
            else:
                self._finish(Outcome.STALEMATE, STATUS_STALEMATE)
            return
        self._apply(res.best_move)
        self.last_automated_move = res.best_move
        self._update_user_status()

    def _apply(self, move: Move) -> None:
        self.board, captured = apply_move(self.board, move.from_sq, move.to_sq)
        if isinstance(captured, Piece):
            if captured.color is Color.WHITE:
                self.taken_white.append(captured)
            else:
                self.taken_black.append(captured)
        self.move_stack.append(move)

    def _update_user_status(self) -> None:
        if not has_legal_moves(self.board, self.user_color):
            if in_check(self.board, self.user_color):
                self._finish(Outcome.win_for(self.computer_color), STATUS_USER_LOSES)
            else:
                self._finish(Outcome.STALEMATE, STATUS_STALEMATE)
            return
        self.phase = Phase.IN_PROGRESS
        self.status = STATUS_CHECK if in_check(self.board, self.user_color) else STATUS_READY

    def _finish(self, outcome: Outcome, status: str) -> None:
        self.result = outcome
        self.phase = Phase.TERMINAL
        self.status = status
        logger.info("game over: %s", outcome.value)

    def move_history_text(self) -> List[str]:
        return [m.to_text() for m in self.move_stack]


def new_game(
    user_color: Color = Color.WHITE,
    *,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> Game:
    return Game.new(user_color, rng=rng, seed=seed)
