# gambit/etl/__init__.py
"""Game-log ETL pipeline.

Modules:
- schemas: Move and GameRecord
- codec: move-text parsing for the pro and rated dialects
- readers: streaming readers for both file formats
- counters: per-ply Counter and the CounterTable
- aggregator: folds games into counters, runs both sources in order
- serializer: writes and loads the output blob
"""

from .schemas import Color, GameRecord, GameResult, Move, Source
from .counters import Counter, CounterTable
from .readers import ProGameReader, RatedGameReader
from .aggregator import DataAggregator, run_pipeline
from .serializer import load_blob, to_blob, write_blob

__all__ = [
    "Color",
    "GameRecord",
    "GameResult",
    "Move",
    "Source",
    "Counter",
    "CounterTable",
    "ProGameReader",
    "RatedGameReader",
    "DataAggregator",
    "run_pipeline",
    "load_blob",
    "to_blob",
    "write_blob",
]
