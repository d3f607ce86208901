from __future__ import annotations

from dataclasses import dataclass


FILES = "abcdefgh"


@dataclass(frozen=True)
class Square:
    """Board coordinate.

    Attributes:
        file (int): 0..7 for files a..h.
        rank (int): 0..7, where rank 0 is Black's back rank (the 8th rank)
            and rank 7 is White's back rank (the 1st rank).
    """

    file: int
    rank: int

    def __str__(self) -> str:
        return square_to_str(self)


@dataclass(frozen=True)
class Move:
    """A move from one square to another.

    Castling is a two-file king move; promotion is implicit (always a queen).
    """

    from_sq: Square
    to_sq: Square

    def to_text(self) -> str:
        """Serialize the move into long algebraic form such as ``"e2e4"``."""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq)


def parse_move(text: str) -> Move:
    """Parse a long algebraic move string.

    Args:
        text (str): Move such as ``"e2e4"``. A trailing ``q`` is accepted
            (promotion is always to a queen) and ignored.

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or suffix.
    """
    if len(text) not in (4, 5):
        raise ValueError(f"invalid move length: {text!r}")
    if len(text) == 5 and text[4].lower() != "q":
        raise ValueError(f"invalid promotion piece: {text[4]!r}")
    return Move(str_to_square(text[0:2]), str_to_square(text[2:4]))


def str_to_square(s: str) -> Square:
    """Convert algebraic notation into a :class:`Square`.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    return Square(ord(s[0]) - ord("a"), 8 - int(s[1]))


def square_to_str(sq: Square) -> str:
    """Convert a :class:`Square` into algebraic notation.

    Raises:
        ValueError: If the square is off the board.
    """
    if not (0 <= sq.file <= 7 and 0 <= sq.rank <= 7):
        raise ValueError(f"invalid square: {sq!r}")
    return FILES[sq.file] + str(8 - sq.rank)
