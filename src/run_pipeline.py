# src/run_pipeline.py
import argparse
import json
import logging
import sys

from config import Settings
from db import init_schema
from errors import PipelineError
from loader import load_synthetic
from pipeline import run_pipeline

logger = logging.getLogger("trip-enrich")


def setup_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser():
    parser = argparse.ArgumentParser(prog="trip-enrich", description="Enrich, clean and report on trip data.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run Extract → Enrich → Merge → Clean → Report.")
    run.add_argument("--min-id", type=int, default=None, help="Lowest trip_id to enrich (inclusive).")
    run.add_argument("--max-id", type=int, default=None, help="Highest trip_id to enrich (inclusive).")
    run.add_argument("--purge", action="store_true", help="Delete invalid trips from the store after enrichment.")

    seed = sub.add_parser("seed", help="Insert synthetic trips.")
    seed.add_argument("--rows", type=int, default=1000)
    seed.add_argument("--clear", action="store_true", help="Wipe existing trips and results first.")

    sub.add_parser("init-db", help="Create tables if missing.")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.command == "run":
            settings = Settings.from_env()
            run = run_pipeline(settings, id_range=(args.min_id, args.max_id), purge=args.purge)
            print(json.dumps({"enrichment": run.summary.as_dict(), "removed": run.removed, "reports": run.reports}, indent=2))
        else:
            settings = Settings.from_env(require_api_key=False)
            if args.command == "seed":
                load_synthetic(args.rows, clear_existing=args.clear, dsn=settings.db_dsn)
            elif args.command == "init-db":
                init_schema(settings.db_dsn)
    except PipelineError as e:
        logger.error("Aborted: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
