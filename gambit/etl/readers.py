# gambit/etl/readers.py
"""Streaming readers for the two game-log formats.

Pro format (one game per line, metadata then "###" then the moves):

    1 2000.03.14 1-0 2851 None 67 date_false ... ### W1.d4 B1.d5 W2.c4 ...

Rated format (PGN export: one tag per line, movetext on its own line):

    [Date "2021.09.01"]
    [Result "1-0"]
    [WhiteElo "1200"]
    [BlackElo "2000"]

    1. e4 { [%clk 0:03:00] } 1... e5 2. Nf3 Nc6 1-0

Files are read line by line and games are produced one at a time, so
memory use does not depend on file size.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date as Date
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, TextIO, Union

from .codec import parse_pro_moves, parse_rated_moves
from .schemas import GameRecord, GameResult, Move, Source

logger = logging.getLogger(__name__)

GameSource = Union[str, Path, TextIO]
GameCallback = Callable[[GameRecord], None]
DoneCallback = Callable[[], None]

COMMENT_MARKER = "#"
PRO_MOVES_MARKER = "###"

DATE_PATTERN = re.compile(r'^\[Date\s+"([0-9]{4})\.([0-9]{2})\.([0-9]{2})"\]$')
ELO_PATTERN = re.compile(r'^\[(White|Black)Elo\s+"([0-9]+)"\]$')
RESULT_PATTERN = re.compile(r'^\[Result\s+"([^"]+)"\]$')
MOVETEXT_PATTERN = re.compile(r"^[0-9]+\.\s*\S")
EVENT_PATTERN = re.compile(r"^\[Event\s")
# Movetext of a game with no moves at all, e.g. an abandoned game
RESULT_ONLY_PATTERN = re.compile(r"^(?:1-0|0-1|1/2-1/2|\*)$")

# Rated games shorter than this are not worth counting
MIN_RATED_MOVES = 2


@contextmanager
def _open_lines(source: GameSource) -> Iterator[Iterable[str]]:
    """Yield an iterable of lines; paths are opened and closed here."""
    if isinstance(source, (str, Path)):
        with open(source, "r", encoding="utf-8", errors="replace") as fh:
            yield fh
    else:
        yield source


def _source_name(source: GameSource) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    return getattr(source, "name", type(source).__name__)


def _parse_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _make_date(year: str, month: str, day: str) -> Optional[Date]:
    try:
        return Date(int(year), int(month), int(day))
    except ValueError:
        return None


def _parse_fixed_width_date(value: Optional[str]) -> Optional[Date]:
    """'2000.03.14' (or '2000-03-14') -> date; None when unreadable."""
    if not value or len(value) < 10:
        return None
    return _make_date(value[0:4], value[5:7], value[8:10])


class _LineCounter:
    """Passes lines through while counting them."""

    def __init__(self, lines: Iterable[str]):
        self._lines = lines
        self.lines = 0

    def __iter__(self) -> Iterator[str]:
        for line in self._lines:
            self.lines += 1
            yield line


class GameReader:
    """Base class: cap handling, callbacks and logging around `parse_lines`."""

    source_kind: Source = Source.PRO

    def parse_lines(self, lines: Iterable[str]) -> Iterator[GameRecord]:
        raise NotImplementedError

    def iter_games(self, source: GameSource, max_games: Optional[int] = None) -> Iterator[GameRecord]:
        """Yield up to `max_games` records (all of them when None)."""
        if max_games is not None and max_games <= 0:
            return

        name = _source_name(source)
        logger.info("Reading %s games from %s", self.source_kind.value, name)
        count = 0
        with _open_lines(source) as lines:
            counted = _LineCounter(lines)
            for record in self.parse_lines(counted):
                yield record
                count += 1
                if max_games is not None and count >= max_games:
                    logger.info("Reached cap of %d games in %s", max_games, name)
                    break
        logger.info("Finished %s: %d games, %d lines read", name, count, counted.lines)

    def read(
        self,
        source: GameSource,
        max_games: Optional[int],
        on_game: GameCallback,
        on_done: Optional[DoneCallback] = None,
    ) -> int:
        """Push each game to `on_game`, then call `on_done` exactly once.

        Returns the number of games delivered.
        """
        count = 0
        for record in self.iter_games(source, max_games):
            on_game(record)
            count += 1
        if on_done is not None:
            on_done()
        return count


class ProGameReader(GameReader):
    """One line per game; blank lines and '#' comments are skipped."""

    source_kind = Source.PRO

    def parse_lines(self, lines: Iterable[str]) -> Iterator[GameRecord]:
        games_seen = 0
        for line in lines:
            record = parse_pro_line(line, fallback_index=games_seen)
            if record is None:
                continue
            games_seen += 1
            yield record


def parse_pro_line(line: str, fallback_index: int = 0) -> Optional[GameRecord]:
    """Parse one pro-format line; None for blank and comment lines."""
    line = line.strip()
    if not line or line.startswith(COMMENT_MARKER):
        return None

    items = line.split()
    if PRO_MOVES_MARKER in items:
        marker = items.index(PRO_MOVES_MARKER)
        fields = items[:marker]
        move_tokens = [tok for tok in items[marker + 1:] if tok != PRO_MOVES_MARKER]
    else:
        fields = items
        move_tokens = []

    def field_at(i: int) -> Optional[str]:
        return fields[i] if i < len(fields) else None

    moves = parse_pro_moves(move_tokens)
    index = _parse_int(field_at(0))
    declared_length = _parse_int(field_at(5))

    return GameRecord(
        sequence_index=index if index is not None else fallback_index,
        date=_parse_fixed_width_date(field_at(1)),
        result=GameResult.from_code(field_at(2)),
        white_elo=_parse_int(field_at(3)),
        black_elo=_parse_int(field_at(4)),
        move_count=declared_length if declared_length is not None else len(moves),
        moves=moves,
        source=Source.PRO,
    )


@dataclass
class _PendingGame:
    """Metadata collected so far for the rated game being read."""
    date: Optional[Date] = None
    result: Optional[str] = None
    white_elo: Optional[int] = None
    black_elo: Optional[int] = None
    moves: tuple[Move, ...] = field(default_factory=tuple)

    def is_complete(self) -> bool:
        return self.date is not None and self.result is not None and len(self.moves) >= MIN_RATED_MOVES


class RatedGameReader(GameReader):
    """Tags accumulate until the movetext line, which closes the game."""

    source_kind = Source.RATED

    def parse_lines(self, lines: Iterable[str]) -> Iterator[GameRecord]:
        pending = _PendingGame()
        index = 0

        for line in lines:
            line = line.strip()

            # A new group or a zero-move game closes whatever came before
            if EVENT_PATTERN.match(line) or RESULT_ONLY_PATTERN.match(line):
                if pending != _PendingGame():
                    logger.debug("Dropping rated game without movetext after game %d", index)
                pending = _PendingGame()
                continue

            match = DATE_PATTERN.match(line)
            if match:
                pending.date = _make_date(*match.groups())

            match = ELO_PATTERN.match(line)
            if match:
                if match.group(1) == "White":
                    pending.white_elo = int(match.group(2))
                else:
                    pending.black_elo = int(match.group(2))

            match = RESULT_PATTERN.match(line)
            if match:
                pending.result = match.group(1)

            if MOVETEXT_PATTERN.match(line):
                pending.moves = parse_rated_moves(line)
                if pending.is_complete():
                    yield GameRecord(
                        sequence_index=index,
                        date=pending.date,
                        result=GameResult.from_code(pending.result),
                        white_elo=pending.white_elo,
                        black_elo=pending.black_elo,
                        move_count=len(pending.moves),
                        moves=pending.moves,
                        source=Source.RATED,
                    )
                    index += 1
                else:
                    logger.debug("Dropping incomplete rated game after game %d", index)
                pending = _PendingGame()
