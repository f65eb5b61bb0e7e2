"""
Gambit - Configuration

Loads settings from environment variables with Pydantic validation and
sets up logging for the ETL run and the UI.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings

LOG_FORMAT = "[%(levelname)s %(asctime)s] %(message)s"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ─── Sources ───
    pro_data_file: str = "data/all_with_filtered_anotations_since1998.txt"
    rated_data_file: str = "data/lichess_db_standard_rated_2021-09.pgn"
    # There are roughly 70 million games, so the default reads everything
    max_games: int = 100_000_000

    # ─── Output ───
    output_path: str = "data.js"

    # ─── Aggregation ───
    progress_interval: int = 100_000
    low_tier_ceiling: int = 1225  # bottom 20%
    high_tier_floor: int = 1875  # top 20%

    # ─── App ───
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_ranges(self) -> "Settings":
        if self.low_tier_ceiling >= self.high_tier_floor:
            raise ValueError("low_tier_ceiling must be below high_tier_floor")
        if self.max_games <= 0:
            raise ValueError("max_games must be positive")
        if self.progress_interval <= 0:
            raise ValueError("progress_interval must be positive")
        return self

    model_config = {"env_prefix": "GAMBIT_", "env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def setup_logging(level: str | int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the root logger once with a consistent format."""
    logger = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    if log_file:
        log_path = Path(log_file).resolve()
        for h in logger.handlers:
            if isinstance(h, logging.FileHandler) and h.baseFilename == str(log_path):
                return logger
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(fh)
    return logger
