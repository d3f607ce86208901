from __future__ import annotations

import logging
import random
from typing import Dict, Literal, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore
from ...engine.board import Board, Color, side_to_move_from_fen
from ...engine.game import Game
from ...engine.move import Square, parse_move, square_to_str, str_to_square
from ...engine.movegen import in_check
from ...engine.perft import perft as perft_nodes
from ...eval import ScoringProfile, score_board


logger = logging.getLogger(__name__)

ColorCode = Literal["w", "b"]


class NewGameRequest(BaseModel):
    user_color: ColorCode = Field(default="w", description="Side the user plays")


class SelectRequest(BaseModel):
    square: str = Field(..., description="Square holding the user's piece, e.g. e2")


class UserMoveRequest(BaseModel):
    to: str = Field(..., description="Destination square for the selected piece, e.g. e4")


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")
    user_color: Optional[ColorCode] = Field(
        default=None, description="Side the user plays (default: the FEN side to move)"
    )


class PlayRequest(BaseModel):
    move: str = Field(..., description="Move text, e.g. e2e4")


class EvaluateRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class PerftRequest(BaseModel):
    fen: str = Field(..., description="FEN string")
    depth: int = Field(default=1, ge=0, le=4)


class GameSnapshot(BaseModel):
    game_id: str
    fen: str
    user_color: ColorCode
    phase: str
    result: Optional[str]
    status: str
    in_check: bool
    selected: Optional[str]
    legal_destinations: list[str]
    taken_white: list[str]
    taken_black: list[str]
    last_automated_move: Optional[str]
    move_history: list[str]


class EvaluateResponse(BaseModel):
    score: float
    in_check: Dict[ColorCode, bool]


def create_app(seed: Optional[int] = None, log_level: str = "INFO") -> FastAPI:
    app = FastAPI(title="Greedy Chess API", version="0.1.0")

    logging.basicConfig(level=getattr(logging, log_level.upper(), logging.INFO))

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    # Seeds each new game so a seeded server replays identically.
    seeder = random.Random(seed) if seed is not None else None

    def _next_seed() -> Optional[int]:
        return seeder.getrandbits(64) if seeder is not None else None

    def _new_game(user_color: ColorCode) -> Game:
        return Game.new(Color(user_color), seed=_next_seed())

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=GameSnapshot)
    async def create_game(req: Optional[NewGameRequest] = None) -> GameSnapshot:
        req = req or NewGameRequest()
        game_id = store.create(_new_game(req.user_color))
        logger.info("created game %s", game_id)
        return _snapshot(game_id, _require_game(store, game_id))

    @app.get("/api/games/{game_id}/state", response_model=GameSnapshot)
    async def get_state(game_id: str) -> GameSnapshot:
        return _snapshot(game_id, _require_game(store, game_id))

    @app.post("/api/games/{game_id}/select", response_model=GameSnapshot)
    async def select(game_id: str, req: SelectRequest) -> GameSnapshot:
        game = _require_game(store, game_id)
        game.select_square(_parse_square(req.square))
        return _snapshot(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameSnapshot)
    async def user_move(game_id: str, req: UserMoveRequest) -> GameSnapshot:
        game = _require_game(store, game_id)
        _require_in_progress(game)
        game.attempt_user_move(_parse_square(req.to))
        return _snapshot(game_id, game)

    @app.post("/api/games/{game_id}/play", response_model=GameSnapshot)
    async def play(game_id: str, req: PlayRequest) -> GameSnapshot:
        game = _require_game(store, game_id)
        _require_in_progress(game)
        try:
            move = parse_move(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not game.play(move):
            raise HTTPException(status_code=400, detail="illegal move")
        return _snapshot(game_id, game)

    @app.post("/api/games/{game_id}/position", response_model=GameSnapshot)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameSnapshot:
        _require_game(store, game_id)
        color = Color(req.user_color) if req.user_color is not None else None
        try:
            game = Game.from_fen(req.fen, color, seed=_next_seed())
            to_move = side_to_move_from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        # The automated side moves first when the FEN hands it the turn.
        if to_move is not game.user_color:
            game.run_automated_turn()
        store.set(game_id, game)
        return _snapshot(game_id, game)

    @app.post("/api/games/{game_id}/restart", response_model=GameSnapshot)
    async def restart(game_id: str, req: Optional[NewGameRequest] = None) -> GameSnapshot:
        game = _require_game(store, game_id)
        color = req.user_color if req is not None else game.user_color.value
        store.set(game_id, _new_game(color))
        logger.info("restarted game %s", game_id)
        return _snapshot(game_id, _require_game(store, game_id))

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> Response:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return Response(status_code=204)

    @app.post("/api/evaluate", response_model=EvaluateResponse)
    async def evaluate(req: EvaluateRequest) -> EvaluateResponse:
        board = _parse_fen(req.fen)
        return EvaluateResponse(
            score=score_board(board, ScoringProfile.default(noise=0.0)),
            in_check={c.value: in_check(board, c) for c in Color},
        )

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        board = _parse_fen(req.fen)
        try:
            color = side_to_move_from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(board, req.depth, color)}

    return app


def _snapshot(game_id: str, game: Game) -> GameSnapshot:
    last = game.last_automated_move
    return GameSnapshot(
        game_id=game_id,
        fen=game.to_fen(),
        user_color=game.user_color.value,
        phase=game.phase.value,
        result=game.result.value if game.result is not None else None,
        status=game.status,
        in_check=game.in_check(),
        selected=square_to_str(game.selected) if game.selected is not None else None,
        legal_destinations=[square_to_str(sq) for sq in game.moves],
        taken_white=[str(p) for p in game.taken_white],
        taken_black=[str(p) for p in game.taken_black],
        last_automated_move=last.to_text() if last is not None else None,
        move_history=game.move_history_text(),
    )


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _require_in_progress(game: Game) -> None:
    if game.result is not None:
        raise HTTPException(status_code=409, detail=f"game is over: {game.result.value}")


def _parse_square(text: str) -> Square:
    try:
        return str_to_square(text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _parse_fen(fen: str) -> Board:
    try:
        return Board.from_fen(fen)
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid FEN")


# Default app for non-factory servers
app = create_app()
