# gambit/etl/schemas.py
"""Data models for the ETL pipeline.

A GameRecord is built by a reader from one unit of raw input, handed to
the aggregator once and then dropped. Nothing here holds more than one
game at a time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as Date
from enum import Enum

# Separates mover+move number from the notation in a normalized token: "W12.Nf3"
TOKEN_SEPARATOR = "."


class Color(str, Enum):
    WHITE = "white"
    BLACK = "black"

    @classmethod
    def from_prefix(cls, prefix: str) -> Color | None:
        """'W' -> white, 'B' -> black, anything else -> None."""
        if prefix == "W":
            return cls.WHITE
        if prefix == "B":
            return cls.BLACK
        return None

    @property
    def prefix(self) -> str:
        return "W" if self is Color.WHITE else "B"


class GameResult(str, Enum):
    UNKNOWN = "unknown"
    WHITE_WIN = "white-win"
    BLACK_WIN = "black-win"
    DRAW = "draw"

    @classmethod
    def from_code(cls, code: str | None) -> GameResult:
        return _RESULT_CODES.get((code or "").strip(), cls.UNKNOWN)


_RESULT_CODES = {
    "1-0": GameResult.WHITE_WIN,
    "0-1": GameResult.BLACK_WIN,
    "1/2-1/2": GameResult.DRAW,
}


class Source(str, Enum):
    PRO = "pro"
    RATED = "rated"


@dataclass(frozen=True)
class Move:
    """One half-move.

    `token` is the normalized form shared by both dialects, e.g. "W1.e4" or
    "B12.exd8=Q+". Piece and destination are derived from it on demand.
    """
    ply: int
    mover: Color | None
    token: str

    @property
    def san(self) -> str:
        _, sep, notation = self.token.partition(TOKEN_SEPARATOR)
        return notation if sep else ""

    @property
    def piece(self) -> str | None:
        from .codec import classify_piece

        return classify_piece(self.token)

    @property
    def destination(self) -> str | None:
        from .codec import get_move_rc

        return get_move_rc(self.token)

    @property
    def cell(self) -> str:
        """Destination cell, or the castle sentinel when there is none."""
        from .codec import CASTLE_CELL

        return self.destination or CASTLE_CELL


@dataclass(frozen=True)
class GameRecord:
    """One game as emitted by a reader."""
    sequence_index: int
    date: Date | None
    result: GameResult
    white_elo: int | None
    black_elo: int | None
    move_count: int
    moves: tuple[Move, ...] = field(default_factory=tuple)
    source: Source = Source.PRO

    def rating_for(self, color: Color | None) -> int | None:
        """Rating of the player who made a move of `color`."""
        if color is Color.WHITE:
            return self.white_elo
        if color is Color.BLACK:
            return self.black_elo
        return None
