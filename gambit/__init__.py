"""Gambit: move-by-move statistics over large chess game logs.

Packages:
- etl: stream pro/rated game logs into per-ply counters and write the blob
- views: rebuild chartable series from the blob for the UI
"""

__version__ = "0.1.0"
