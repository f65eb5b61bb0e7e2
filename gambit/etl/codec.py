# gambit/etl/codec.py
"""Move codec: turn either dialect's move text into normalized Moves.

Both dialects end up as tokens of the form "<W|B><move number>.<SAN>":

- pro dialect: tokens already look like "W12.Nf3", one per whitespace gap
- rated dialect: "1. e4 { [%clk 0:03:00] } 1... e5 2. Nf3 Nc6" style
  movetext; annotations are dropped and each numbered pair is rebuilt

Piece and destination extraction are heuristics over the token text. They
do not check that a move is legal or even well formed.
"""

from __future__ import annotations

import re
from typing import Iterable

import chess

from .schemas import TOKEN_SEPARATOR, Color, Move

CASTLE_CELL = "castle"

# Glyphs that may trail a move: check, mate and annotation marks
TRAILING_GLYPHS = "+#?!"
PROMOTION_MARKER = "="

# First character of the notation -> piece category.
# Pawns have no letter, the file they move from stands in for it.
PIECES: dict[str, str] = {
    **{file: chess.piece_name(chess.PAWN) for file in chess.FILE_NAMES},
    "N": chess.piece_name(chess.KNIGHT),
    "R": chess.piece_name(chess.ROOK),
    "O": "castling",  # O-O and O-O-O
    "B": chess.piece_name(chess.BISHOP),
    "K": chess.piece_name(chess.KING),
    "Q": chess.piece_name(chess.QUEEN),
}

# Distinct categories in table order: pawn, knight, rook, castling, bishop, king, queen
PIECE_CATEGORIES: tuple[str, ...] = tuple(dict.fromkeys(PIECES.values()))

ANNOTATION_PATTERN = re.compile(r"\{[^}]*\}")

_SAN = r"[A-Za-z][^\s{}()]*"
# White's half of a numbered pair: "12. Nf3" (but not "12... Nf3")
WHITE_MOVE_PATTERN = r"(?P<number>\d+)\.(?!\.)\s*(?P<white>" + _SAN + r")"
# Black's half, possibly after an annotation block and a "12..." marker
BLACK_MOVE_PATTERN = r"\s*(?:\{[^}]*\}\s*)*(?:\d+\.{3}\s*)?(?P<black>" + _SAN + r")"
MOVE_PAIR_PATTERN = re.compile(WHITE_MOVE_PATTERN + r"(?:" + BLACK_MOVE_PATTERN + r")?")


def cell_name(file_index: int, rank_index: int) -> str:
    """cell_name(0, 0) -> "a1", cell_name(7, 7) -> "h8"."""
    return chess.square_name(chess.square(file_index, rank_index))


# File-major: a1, a2, ..., a8, b1, ..., h8
CELLS: tuple[str, ...] = tuple(
    cell_name(f, r) for f in range(len(chess.FILE_NAMES)) for r in range(len(chess.RANK_NAMES))
)


def get_move_rc(token: str) -> str | None:
    """Destination cell of a move, or None when it has none (castling).

    "B3.Nf6" -> "f6", "W44.a8=Q+" -> "a8", "W10.O-O" -> None.
    """
    last = len(token) - 1

    while last > 0 and token[last] in TRAILING_GLYPHS:
        last -= 1

    # Skip "=Q" style promotion suffixes
    if last >= 3 and token[last - 1] == PROMOTION_MARKER:
        last -= 2

    if last - 1 < 0:
        return None

    rowcol = token[last - 1:last + 1]
    if rowcol[0] in chess.FILE_NAMES and rowcol[1] in chess.RANK_NAMES:
        return rowcol
    return None


def classify_piece(token: str) -> str | None:
    """Piece category of a normalized token, None if unrecognized."""
    dot = token.find(TOKEN_SEPARATOR)
    if dot == -1 or dot + 1 >= len(token):
        return None
    return PIECES.get(token[dot + 1])


def make_token(mover: Color, move_number: int, san: str) -> str:
    return f"{mover.prefix}{move_number}{TOKEN_SEPARATOR}{san}"


def parse_pro_token(token: str, ply: int) -> Move:
    """Pro tokens carry the mover in their first character."""
    return Move(ply=ply, mover=Color.from_prefix(token[:1]), token=token)


def parse_pro_moves(tokens: Iterable[str]) -> tuple[Move, ...]:
    return tuple(parse_pro_token(tok, ply) for ply, tok in enumerate(tokens))


def strip_annotations(text: str) -> str:
    return ANNOTATION_PATTERN.sub(" ", text)


def rated_tokens(movetext: str) -> list[str]:
    """Rebuild "W1.e4", "B1.e5", ... tokens from rated-dialect movetext."""
    tokens: list[str] = []
    for match in MOVE_PAIR_PATTERN.finditer(strip_annotations(movetext)):
        number = int(match.group("number"))
        tokens.append(make_token(Color.WHITE, number, match.group("white")))
        if match.group("black"):
            tokens.append(make_token(Color.BLACK, number, match.group("black")))
    return tokens


def parse_rated_moves(movetext: str) -> tuple[Move, ...]:
    return tuple(
        Move(ply=ply, mover=Color.from_prefix(tok[0]), token=tok)
        for ply, tok in enumerate(rated_tokens(movetext))
    )
