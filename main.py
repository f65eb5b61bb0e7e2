#!/usr/bin/env python
"""
Move statistics ETL: pro + rated game logs → per-ply counters → data blob

Expected runtime for the full ~70 million games is close to an hour.
Reads the pro log completely (or up to the cap) before the rated log.
"""
import argparse
import logging
import sys
import time

from gambit.config import get_settings, setup_logging
from gambit.etl.aggregator import run_pipeline
from gambit.etl.serializer import to_blob, write_blob

logger = logging.getLogger(__name__)


def build_parser(settings) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Aggregate per-move statistics from chess game logs")
    ap.add_argument("--pro", default=settings.pro_data_file, help="Pro-format game file")
    ap.add_argument("--rated", default=settings.rated_data_file, help="Rated-format (PGN) game file")
    ap.add_argument("--max-games", type=int, default=settings.max_games, help="Maximum games read from each file")
    ap.add_argument("--out", default=settings.output_path, help="Output blob (.js script or .json)")
    ap.add_argument("--skip-pro", action="store_true", help="Do not read the pro file")
    ap.add_argument("--skip-rated", action="store_true", help="Do not read the rated file")
    ap.add_argument("--log-level", default=settings.log_level, help="Logging level")
    ap.add_argument("--log-file", default=None, help="Also write logs to this file")
    return ap


def main(argv=None) -> int:
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    pro = None if args.skip_pro else args.pro
    rated = None if args.skip_rated else args.rated

    t0 = time.time()
    try:
        aggregator = run_pipeline(pro, rated, max_games=args.max_games, settings=settings)
    except FileNotFoundError as e:
        logger.error("Input file not found: %s", e.filename)
        return 1

    out_path = write_blob(args.out, to_blob(aggregator.counts))
    elapsed = time.time() - t0

    print(f"\nWrote move statistics to: {out_path.resolve()}")
    print(f"Games processed: {aggregator.games_counted}")
    print(f"Counters: {len(aggregator.counts)}")
    print(f"Elapsed: {elapsed:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
