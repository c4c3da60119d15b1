"""Command line interface built with argparse."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional

from .config import ImportConfig, load_config
from .database.database import create_db_engine, init_db
from .database.store import CountStore
from .io.factors import read_seasonal_factors
from .kinds import CountKind
from .pipeline.run import CountProcessor, process_all

LOGGER = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, default=None, help="JSON configuration file.")
    parser.add_argument("--database-url", default=None)
    parser.add_argument("-v", "--verbose", action="store_true")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import traffic counts and calculate annual average daily volume.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create the database tables.")
    _add_common_arguments(init_parser)

    all_parser = subparsers.add_parser("import-all", help="Import every count file under a data directory.")
    all_parser.add_argument("data_root", type=Path, nargs="?", default=None)
    all_parser.add_argument("--interval", default=None, help="Bin width for individual vehicles (15min or hourly).")
    all_parser.add_argument("--no-aadv", action="store_true")
    _add_common_arguments(all_parser)

    one_parser = subparsers.add_parser("import-one", help="Import a single count file.")
    one_parser.add_argument("path", type=Path)
    one_parser.add_argument("--interval", default=None, help="Bin width for individual vehicles (15min or hourly).")
    one_parser.add_argument("--no-aadv", action="store_true")
    _add_common_arguments(one_parser)

    aadv_parser = subparsers.add_parser("aadv", help="Recalculate AADV for a count already in the database.")
    aadv_parser.add_argument("kind", help="One of: " + ", ".join(kind.value for kind in CountKind))
    aadv_parser.add_argument("recordnum", type=int)
    _add_common_arguments(aadv_parser)

    factors_parser = subparsers.add_parser("factors", help="Insert or update seasonal and axle factors from a CSV.")
    factors_parser.add_argument("path", type=Path, help="CSV with year, month, fc, dayofweek and factor columns.")
    _add_common_arguments(factors_parser)

    log_parser = subparsers.add_parser("log", help="Show import log entries.")
    log_parser.add_argument("recordnum", type=int, nargs="?", default=None)
    _add_common_arguments(log_parser)

    return parser


def _load_config(args: argparse.Namespace) -> ImportConfig:
    config = load_config(args.config)
    if args.database_url:
        config.database_url = args.database_url
    if getattr(args, "data_root", None) is not None:
        config.data_root = Path(args.data_root)
    if getattr(args, "interval", None):
        config.bin_interval = args.interval.lower()
    if getattr(args, "no_aadv", False):
        config.compute_aadv = False
    return config


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    config = _load_config(args)

    if args.command == "init-db":
        init_db(create_db_engine(config.database_url))
        LOGGER.info("Database tables created")
    elif args.command == "import-all":
        if config.data_root is None:
            parser.error("data_root is required (argument or config file)")
        processor = CountProcessor.from_config(config)
        results = process_all(config.data_root, processor)
        print(json.dumps(results, indent=2, default=str))
    elif args.command == "import-one":
        processor = CountProcessor.from_config(config)
        print(json.dumps(processor.process(args.path), indent=2, default=str))
    elif args.command == "aadv":
        try:
            kind = CountKind.from_name(args.kind)
        except ValueError as exc:
            parser.error(str(exc))
        processor = CountProcessor.from_config(config)
        print(json.dumps(processor.calculate_aadv(kind, args.recordnum), indent=2))
    elif args.command == "factors":
        store = CountStore.from_url(config.database_url, create_tables=True)
        inserted, updated = store.upsert_seasonal_factors(read_seasonal_factors(args.path))
        print(json.dumps({"inserted": inserted, "updated": updated}))
    elif args.command == "log":
        processor = CountProcessor.from_config(config)
        for entry in processor.store.import_log(args.recordnum):
            print(f"{entry.datetime} {entry.log_level:<7} {entry.recordnum} {entry.message}")
    else:
        parser.error("Unknown command")


if __name__ == "__main__":
    main()
