"""Tests for settings and logging setup."""

import logging
import os
import unittest
from unittest import mock

from pydantic import ValidationError

from gambit.config import Settings, setup_logging


class TestSettings(unittest.TestCase):

    def test_defaults(self):
        s = Settings()
        self.assertEqual(s.max_games, 100_000_000)
        self.assertEqual(s.low_tier_ceiling, 1225)
        self.assertEqual(s.high_tier_floor, 1875)
        self.assertEqual(s.progress_interval, 100_000)
        self.assertEqual(s.output_path, "data.js")

    def test_environment_override(self):
        with mock.patch.dict(os.environ, {"GAMBIT_MAX_GAMES": "5", "GAMBIT_OUTPUT_PATH": "out.json"}):
            s = Settings()
        self.assertEqual(s.max_games, 5)
        self.assertEqual(s.output_path, "out.json")

    def test_invalid_tiers_rejected(self):
        with self.assertRaises(ValidationError):
            Settings(low_tier_ceiling=2000, high_tier_floor=1000)

    def test_invalid_counts_rejected(self):
        with self.assertRaises(ValidationError):
            Settings(max_games=0)
        with self.assertRaises(ValidationError):
            Settings(progress_interval=-1)


class TestLogging(unittest.TestCase):

    def test_setup_is_idempotent(self):
        root = logging.getLogger()
        before = len(root.handlers)
        setup_logging("DEBUG")
        setup_logging("INFO")
        self.assertLessEqual(len(root.handlers), before + 1)
        self.assertEqual(root.level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
