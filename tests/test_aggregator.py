"""
Tests for the DataAggregator and the two-stage pipeline.

Checks the counter invariants: untiered totals cover every move, tiered
counters never exceed them, and castling lands in its own buckets.
"""

import io
import unittest
from datetime import date
from unittest import mock

from gambit.config import Settings
from gambit.etl.aggregator import DataAggregator, counter_names, run_pipeline
from gambit.etl.codec import CELLS, PIECE_CATEGORIES
from gambit.etl.readers import ProGameReader, RatedGameReader
from gambit.etl.schemas import Color, GameRecord, GameResult, Move, Source

RATED_GAME = """\
[Event "Rated Blitz game"]
[Date "2021.09.01"]
[Result "1-0"]
[WhiteElo "1200"]
[BlackElo "2000"]

1. e4 {comment} 1... e5 2. Nf3 Nc6 1-0
"""

PRO_CASTLING_GAME = "3 2001.01.01 1-0 1500 1500 4 date_false ### W1.e4 B1.e5 W2.O-O B2.Nf6\n"

PRO_MIXED = """\
1 2000.03.14 1-0 2851 None 6 ### W1.d4 B1.d5 W2.c4 B2.e6 W3.Nc3 B3.Nf6
2 1999.11.20 1/2-1/2 1100 1600 5 ### W1.e4 B1.e5 W2.Xx9 B2.Nc6 W3.O-O-O
"""


def make_aggregator(**overrides):
    return DataAggregator(Settings(**overrides))


def game(moves, white_elo=None, black_elo=None):
    tokens = [(Color.WHITE if i % 2 == 0 else Color.BLACK, tok) for i, tok in enumerate(moves)]
    return GameRecord(
        sequence_index=0,
        date=date(2020, 1, 1),
        result=GameResult.UNKNOWN,
        white_elo=white_elo,
        black_elo=black_elo,
        move_count=len(moves),
        moves=tuple(Move(ply=i, mover=c, token=t) for i, (c, t) in enumerate(tokens)),
        source=Source.PRO,
    )


class TestCounterSet(unittest.TestCase):

    def test_every_key_exists_up_front(self):
        agg = make_aggregator()
        names = counter_names()

        self.assertEqual(len(names), 4 * (1 + len(PIECE_CATEGORIES) + len(CELLS) + 1))
        self.assertEqual(agg.counts.names(), names)
        self.assertEqual(names[:2], ["total", "pawn"])
        self.assertEqual(names[8], "pos_a1")
        self.assertIn("pos_castle_mid", names)
        self.assertIn("queen_hi", names)

    def test_rating_tiers(self):
        agg = make_aggregator()
        self.assertEqual(agg.rating_tier(1224), "_low")
        self.assertEqual(agg.rating_tier(1225), "_mid")
        self.assertEqual(agg.rating_tier(1874), "_mid")
        self.assertEqual(agg.rating_tier(1875), "_hi")
        self.assertIsNone(agg.rating_tier(None))


class TestProcessGame(unittest.TestCase):

    def test_rated_scenario(self):
        """Tier follows the rating of whoever made each move."""
        agg = make_aggregator()
        (record,) = RatedGameReader().iter_games(io.StringIO(RATED_GAME))
        agg.process_game(record)
        c = agg.counts

        self.assertEqual(len(record.moves), 4)
        # ply 0: white 1200 -> low
        self.assertEqual(c.get("total_low", 0), 1)
        self.assertEqual(c.get("pawn_low", 0), 1)
        self.assertEqual(c.get("pos_e4_low", 0), 1)
        # ply 1: black 2000 -> hi
        self.assertEqual(c.get("total_hi", 1), 1)
        self.assertEqual(c.get("total_low", 1), 0)
        self.assertEqual(c.get("pos_e5_hi", 1), 1)
        # ply 2: white knight to f3
        self.assertEqual(c.get("knight", 2), 1)
        self.assertEqual(c.get("knight_low", 2), 1)
        self.assertEqual(c.get("pos_f3", 2), 1)
        # ply 3: black knight to c6
        self.assertEqual(c.get("knight_hi", 3), 1)
        self.assertEqual(c.get("pos_c6_hi", 3), 1)
        self.assertEqual(agg.games_counted, 1)

    def test_castling_scenario(self):
        """Castling counts as castling and pos_castle, never as a king move."""
        agg = make_aggregator()
        agg.process_pro_data(io.StringIO(PRO_CASTLING_GAME))
        c = agg.counts

        self.assertEqual(c.get("pos_castle", 2), 1)
        self.assertEqual(c.get("pos_castle_mid", 2), 1)
        self.assertEqual(c.get("castling", 2), 1)
        self.assertEqual(c.get("king", 2), 0)
        self.assertEqual(c.get("king_mid", 2), 0)
        for piece in ("pawn", "knight", "rook", "bishop", "queen"):
            self.assertEqual(c.get(piece, 2), 0, piece)

    def test_unknown_rating_only_feeds_untiered(self):
        agg = make_aggregator()
        agg.process_game(game(["W1.e4", "B1.e5"], white_elo=None, black_elo=1500))
        c = agg.counts

        self.assertEqual(c.get("total", 0), 1)
        self.assertEqual(c.get("pawn", 0), 1)
        self.assertEqual(c.get("pos_e4", 0), 1)
        for suffix in ("_low", "_mid", "_hi"):
            self.assertEqual(c.get("total" + suffix, 0), 0)
            self.assertEqual(c.get("pos_e4" + suffix, 0), 0)
        self.assertEqual(c.get("total_mid", 1), 1)

    def test_unclassifiable_move_still_counts_in_total(self):
        agg = make_aggregator()
        agg.process_game(game(["W1.Xe4"], white_elo=1500))
        c = agg.counts

        self.assertEqual(c.get("total", 0), 1)
        self.assertEqual(c.get("pos_e4", 0), 1)
        self.assertEqual(sum(c.get(p, 0) for p in PIECE_CATEGORIES), 0)

    def test_total_covers_pieces_and_tiers(self):
        agg = make_aggregator()
        agg.process_pro_data(io.StringIO(PRO_MIXED))
        agg.process_rated_data(io.StringIO(RATED_GAME))
        c = agg.counts

        for ply in range(8):
            total = c.get("total", ply)
            pieces = sum(c.get(p, ply) for p in PIECE_CATEGORIES)
            tiers = sum(c.get("total" + s, ply) for s in ("_low", "_mid", "_hi"))
            cells = sum(c.get("pos_" + cell, ply) for cell in CELLS + ("castle",))
            self.assertGreaterEqual(total, pieces)
            self.assertLessEqual(tiers, total)
            self.assertEqual(cells, total)

        # "W2.Xx9" at ply 2 is neither a piece nor a square
        self.assertEqual(c.get("total", 2), sum(c.get(p, 2) for p in PIECE_CATEGORIES) + 1)

    def test_progress_logging(self):
        agg = make_aggregator(progress_interval=2)
        with self.assertLogs("gambit.etl.aggregator", level="INFO") as logs:
            agg.process_pro_data(io.StringIO(PRO_MIXED))
        self.assertIn("Games: 2", "\n".join(logs.output))

    def test_output_in_creation_order(self):
        agg = make_aggregator()
        agg.process_rated_data(io.StringIO(RATED_GAME))
        output = agg.get_output()

        self.assertEqual([d["name"] for d in output], counter_names())
        total = next(d for d in output if d["name"] == "total")
        self.assertEqual(total["data"], [1, 1, 1, 1])


class TestPipeline(unittest.TestCase):

    def test_pro_runs_before_rated(self):
        seen = []

        def record(self, g):
            seen.append(g.source)

        with mock.patch.object(DataAggregator, "process_game", autospec=True, side_effect=record):
            run_pipeline(io.StringIO(PRO_MIXED), io.StringIO(RATED_GAME), settings=Settings())

        self.assertEqual(seen, [Source.PRO, Source.PRO, Source.RATED])

    def test_cap_applies_per_source(self):
        agg = run_pipeline(io.StringIO(PRO_MIXED), io.StringIO(RATED_GAME), max_games=1, settings=Settings())
        self.assertEqual(agg.games_counted, 2)

    def test_skipped_sources(self):
        agg = run_pipeline(None, io.StringIO(RATED_GAME), settings=Settings())
        self.assertEqual(agg.games_counted, 1)


if __name__ == "__main__":
    unittest.main()
