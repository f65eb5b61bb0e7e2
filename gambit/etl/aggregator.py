# gambit/etl/aggregator.py
"""Data Aggregator: classify every move into the counters it touches.

Pipeline:
pro log ─▶ ProGameReader ─┐
                          ├─▶ DataAggregator.process_game ─▶ CounterTable ─▶ blob
rated log ─▶ RatedGameReader ─┘

Every move bumps, at its ply:
- "total" and, when the mover's rating is known, "total<tier>"
- "pos_<cell>" (or "pos_castle") and "pos_<cell><tier>"
- "<piece>" and "<piece><tier>" when the piece is recognized

The tier comes from the rating of the player who made that move, so a
single game can feed two different tiers. Untiered counters also see
moves whose mover is unrated, which makes them a superset of the tiered
ones rather than their sum.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..config import Settings, get_settings
from .codec import CASTLE_CELL, CELLS, PIECE_CATEGORIES, classify_piece, get_move_rc
from .counters import CounterTable
from .readers import GameSource, ProGameReader, RatedGameReader
from .schemas import GameRecord

logger = logging.getLogger(__name__)

TOTAL_KEY = "total"
POSITION_PREFIX = "pos_"
LOW_SUFFIX = "_low"
MID_SUFFIX = "_mid"
HIGH_SUFFIX = "_hi"
TIER_SUFFIXES: tuple[str, ...] = ("", LOW_SUFFIX, MID_SUFFIX, HIGH_SUFFIX)


def position_key(cell: str, suffix: str = "") -> str:
    """position_key("e4", "_hi") -> "pos_e4_hi"."""
    return f"{POSITION_PREFIX}{cell}{suffix}"


def counter_names() -> list[str]:
    """Every counter name in creation order."""
    names: list[str] = []
    for suffix in TIER_SUFFIXES:
        names.append(TOTAL_KEY + suffix)
        names.extend(piece + suffix for piece in PIECE_CATEGORIES)
        names.extend(position_key(cell, suffix) for cell in CELLS)
        names.append(position_key(CASTLE_CELL, suffix))
    return names


class DataAggregator:
    """Owns the CounterTable and folds games into it one at a time."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.low_tier_ceiling = settings.low_tier_ceiling
        self.high_tier_floor = settings.high_tier_floor
        self.progress_interval = settings.progress_interval

        self.counts = CounterTable()
        self.games_counted = 0
        for name in counter_names():
            self.counts.add(name)

    def rating_tier(self, elo: Optional[int]) -> Optional[str]:
        """Tier suffix for a rating, None when the rating is unknown."""
        if elo is None:
            return None
        if elo < self.low_tier_ceiling:
            return LOW_SUFFIX
        if elo < self.high_tier_floor:
            return MID_SUFFIX
        return HIGH_SUFFIX

    def process_game(self, game: GameRecord) -> None:
        counts = self.counts

        for ply, move in enumerate(game.moves):
            counts.increment(TOTAL_KEY, ply)

            tier = self.rating_tier(game.rating_for(move.mover))
            if tier is not None:
                counts.increment(TOTAL_KEY + tier, ply)

            where = get_move_rc(move.token) or CASTLE_CELL
            counts.increment(position_key(where), ply)
            if tier is not None:
                counts.increment(position_key(where, tier), ply)

            piece = classify_piece(move.token)
            if piece is not None:
                counts.increment(piece, ply)
                if tier is not None:
                    counts.increment(piece + tier, ply)

        self.games_counted += 1
        if self.games_counted % self.progress_interval == 0:
            logger.info("Games: %d", self.games_counted)

    def process_pro_data(self, source: GameSource, quantity: Optional[int] = None) -> int:
        """Read up to `quantity` pro-format games from `source`."""
        return ProGameReader().read(source, quantity, self.process_game)

    def process_rated_data(self, source: GameSource, quantity: Optional[int] = None) -> int:
        """Read up to `quantity` rated-format games from `source`."""
        return RatedGameReader().read(source, quantity, self.process_game)

    def get_output(self) -> list[dict[str, Any]]:
        """All counters as {"name", "data"} pairs, in creation order."""
        return self.counts.to_list()


def run_pipeline(
    pro_source: Optional[GameSource],
    rated_source: Optional[GameSource],
    max_games: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> DataAggregator:
    """Aggregate the pro source fully, then the rated source.

    `max_games` caps each source separately; a None source is skipped.
    """
    aggregator = DataAggregator(settings)

    if pro_source is not None:
        n = aggregator.process_pro_data(pro_source, max_games)
        logger.info("Pro games processed: %d", n)

    if rated_source is not None:
        n = aggregator.process_rated_data(rated_source, max_games)
        logger.info("Rated games processed: %d", n)

    logger.info("Total games processed: %d", aggregator.games_counted)
    return aggregator
