from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .move import Square


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


class Color(str, Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class Kind(str, Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"


@dataclass(frozen=True)
class Piece:
    color: Color
    kind: Kind

    def __str__(self) -> str:
        """FEN character (uppercase = white, lowercase = black)."""
        ch = self.kind.value
        return ch.upper() if self.color is Color.WHITE else ch


class Empty:
    """Sentinel stored on unoccupied squares. Falsy, so ``if board[sq]`` reads naturally."""

    _instance: Optional["Empty"] = None

    def __new__(cls) -> "Empty":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "EMPTY"

    def __str__(self) -> str:
        return ""


EMPTY = Empty()
Cell = Union[Piece, Empty]


WP = Piece(Color.WHITE, Kind.PAWN)
WN = Piece(Color.WHITE, Kind.KNIGHT)
WB = Piece(Color.WHITE, Kind.BISHOP)
WR = Piece(Color.WHITE, Kind.ROOK)
WQ = Piece(Color.WHITE, Kind.QUEEN)
WK = Piece(Color.WHITE, Kind.KING)
BP = Piece(Color.BLACK, Kind.PAWN)
BN = Piece(Color.BLACK, Kind.KNIGHT)
BB = Piece(Color.BLACK, Kind.BISHOP)
BR = Piece(Color.BLACK, Kind.ROOK)
BQ = Piece(Color.BLACK, Kind.QUEEN)
BK = Piece(Color.BLACK, Kind.KING)
PIECE_ORDER = [WP, WN, WB, WR, WQ, WK, BP, BN, BB, BR, BQ, BK]
CHAR_TO_PIECE: Dict[str, Piece] = {str(p): p for p in PIECE_ORDER}

# Rank a pawn of each color promotes on.
PROMOTION_RANK = {Color.WHITE: 0, Color.BLACK: 7}
BACK_RANK = {Color.WHITE: 7, Color.BLACK: 0}
KING_HOME = {Color.WHITE: Square(4, 7), Color.BLACK: Square(4, 0)}


@dataclass(frozen=True)
class CastlingRights:
    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls(False, False, False, False)

    @classmethod
    def from_fen(cls, field: str) -> "CastlingRights":
        """Parse the FEN castling field (``"KQkq"`` subset or ``"-"``)."""
        if field == "-":
            return cls.none()
        if not field or any(ch not in "KQkq" for ch in field):
            raise ValueError("invalid castling rights")
        return cls(
            white_kingside="K" in field,
            white_queenside="Q" in field,
            black_kingside="k" in field,
            black_queenside="q" in field,
        )

    def to_fen(self) -> str:
        out = ""
        if self.white_kingside:
            out += "K"
        if self.white_queenside:
            out += "Q"
        if self.black_kingside:
            out += "k"
        if self.black_queenside:
            out += "q"
        return out or "-"

    def kingside(self, color: Color) -> bool:
        return self.white_kingside if color is Color.WHITE else self.black_kingside

    def queenside(self, color: Color) -> bool:
        return self.white_queenside if color is Color.WHITE else self.black_queenside


# Rook home square -> CastlingRights field cleared when that square is touched.
ROOK_HOME_RIGHTS: Dict[Square, str] = {
    Square(0, 7): "white_queenside",
    Square(7, 7): "white_kingside",
    Square(0, 0): "black_queenside",
    Square(7, 0): "black_kingside",
}


def _index(sq: Square) -> int:
    return sq.rank * 8 + sq.file


@dataclass(frozen=True)
class Board:
    """Immutable 8x8 position snapshot plus castling rights.

    Notes:
    - ``cells`` holds 64 entries indexed ``rank * 8 + file``; rank 0 is
      Black's back rank.
    - Boards are never mutated; :func:`apply_move` returns a new one.
    - Side to move is not part of the board; the game tracks it.
    """

    cells: Tuple[Cell, ...]
    castling: CastlingRights = CastlingRights()

    def __post_init__(self) -> None:
        if len(self.cells) != 64:
            raise ValueError("board must have 64 cells")

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def empty(cls) -> "Board":
        return cls(cells=(EMPTY,) * 64, castling=CastlingRights.none())

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a FEN string.

        Only the placement and castling fields are read. The castling field
        is optional; without it no castling rights are granted.

        Raises:
            ValueError: If ``fen`` is empty or has invalid placement or
                castling rights.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if not parts:
            raise ValueError("FEN must be a non-empty string")
        if len(parts) > 6:
            raise ValueError("FEN has too many fields")
        rows = parts[0].split("/")
        if len(rows) != 8:
            raise ValueError("FEN board must have 8 ranks")
        cells: List[Cell] = []
        for row in rows:
            width = 0
            for ch in row:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    cells.extend([EMPTY] * n)
                    width += n
                else:
                    if ch not in CHAR_TO_PIECE:
                        raise ValueError(f"invalid piece in FEN: {ch!r}")
                    cells.append(CHAR_TO_PIECE[ch])
                    width += 1
            if width != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")
        castling = CastlingRights.from_fen(parts[2]) if len(parts) >= 3 else CastlingRights.none()
        return cls(cells=tuple(cells), castling=castling)

    def to_fen(self, side_to_move: Color = Color.WHITE) -> str:
        """Serialize into a six-field FEN (en passant and clocks are not tracked)."""
        rows: List[str] = []
        for rank in range(8):
            run = 0
            row = ""
            for file in range(8):
                p = self.cells[rank * 8 + file]
                if not p:
                    run += 1
                    continue
                if run:
                    row += str(run)
                    run = 0
                row += str(p)
            if run:
                row += str(run)
            rows.append(row)
        return f"{'/'.join(rows)} {side_to_move.value} {self.castling.to_fen()} - 0 1"

    def __getitem__(self, sq: Square) -> Cell:
        return self.cells[_index(sq)]

    def at(self, file: int, rank: int) -> Cell:
        return self.cells[rank * 8 + file]

    def squares(self, color: Color) -> Iterator[Square]:
        """Squares holding ``color``'s pieces, files 0..7 outer, ranks 0..7 inner."""
        for file in range(8):
            for rank in range(8):
                p = self.cells[rank * 8 + file]
                if p and p.color is color:
                    yield Square(file, rank)

    def king_square(self, color: Color) -> Optional[Square]:
        king = Piece(color, Kind.KING)
        for sq in self.squares(color):
            if self[sq] == king:
                return sq
        return None

    def __str__(self) -> str:
        lines = []
        for rank in range(8):
            row = [str(self.at(file, rank)) or "." for file in range(8)]
            lines.append(f"{8 - rank} {' '.join(row)}")
        lines.append("  a b c d e f g h")
        return "\n".join(lines)


def side_to_move_from_fen(fen: str) -> Color:
    """Return the side-to-move field of ``fen`` (white when absent)."""
    parts = fen.strip().split()
    if len(parts) < 2:
        return Color.WHITE
    try:
        return Color(parts[1])
    except ValueError:
        raise ValueError("side to move must be 'w' or 'b'") from None


def apply_move(board: Board, from_sq: Square, to_sq: Square) -> Tuple[Board, Cell]:
    """Return ``(new_board, captured)`` for the move ``from_sq -> to_sq``.

    The input board is left untouched. A king moving two files castles and
    drags the matching rook alongside. Castling rights are dropped when the
    king moves or when a rook home square is the origin or the destination.
    Pawns reaching the far rank become queens. ``captured`` is whatever stood
    on ``to_sq`` beforehand (``EMPTY`` if nothing).
    """
    cells = list(board.cells)
    castling = board.castling
    piece = cells[_index(from_sq)]

    if isinstance(piece, Piece) and piece.kind is Kind.KING:
        if abs(to_sq.file - from_sq.file) == 2:
            if to_sq.file > from_sq.file:
                rook_from, rook_to = Square(7, from_sq.rank), Square(to_sq.file - 1, from_sq.rank)
            else:
                rook_from, rook_to = Square(0, from_sq.rank), Square(to_sq.file + 1, from_sq.rank)
            cells[_index(rook_to)] = cells[_index(rook_from)]
            cells[_index(rook_from)] = EMPTY
        if piece.color is Color.WHITE:
            castling = replace(castling, white_kingside=False, white_queenside=False)
        else:
            castling = replace(castling, black_kingside=False, black_queenside=False)

    for sq in (from_sq, to_sq):
        flag = ROOK_HOME_RIGHTS.get(sq)
        if flag is not None:
            castling = replace(castling, **{flag: False})

    if (
        isinstance(piece, Piece)
        and piece.kind is Kind.PAWN
        and to_sq.rank == PROMOTION_RANK[piece.color]
    ):
        piece = Piece(piece.color, Kind.QUEEN)

    captured = cells[_index(to_sq)]
    cells[_index(to_sq)] = piece
    cells[_index(from_sq)] = EMPTY
    return Board(cells=tuple(cells), castling=castling), captured
