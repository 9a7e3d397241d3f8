"""
Command-line entry point.

    regbaseline collect --output baseline.json
    regbaseline compare baseline.json --format html --output drift.html
    regbaseline compare baseline.json --hive HKLM\\SOFTWARE=export/SOFTWARE

Exit status: 0 success/clean, 1 discrepancies found, 2 fatal error.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from baseline.callbacks import LoggingCallbacks
from baseline.collector import BaselineCollector
from baseline.comparator import BaselineComparator
from baseline.serialization import load_baseline, records_to_json, save_baseline
from baseline.targets import get_default_targets, load_targets, targets_to_mapping
from core.app_version import get_app_version
from core.config import AppConfig, load_app_config
from core.enums import ReportFormat
from core.exceptions import RegBaselineError
from core.logging import configure_logging, get_logger
from reports.discrepancies import DiscrepancyReport
from sources import RegistrySource, build_source

LOGGER = get_logger("app.main")

EXIT_OK = 0
EXIT_DRIFT = 1
EXIT_ERROR = 2

SourceFactory = Callable[[Optional[Sequence[str]]], RegistrySource]


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, help="YAML configuration file")
    common.add_argument("--log-dir", type=Path, help="Also write a rotating log file here")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    common.add_argument(
        "--hive",
        action="append",
        metavar="MOUNT=PATH",
        default=[],
        help="Read an offline hive file mounted at a key path instead of the live "
             "registry (repeatable), e.g. HKLM\\SOFTWARE=export/SOFTWARE",
    )
    common.add_argument(
        "--sid-filter",
        help="Value substituted for {SID} in per-user patterns (wildcards allowed; default *)",
    )

    parser = argparse.ArgumentParser(
        prog="regbaseline",
        description="Baseline Windows registry persistence locations and report drift.",
    )
    parser.add_argument("-V", "--version", action="version",
                        version=f"%(prog)s {get_app_version()}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    collect = subparsers.add_parser("collect", parents=[common], help="Capture a baseline")
    collect.add_argument("-o", "--output", type=Path,
                         help="Baseline file to write (default: print JSON to stdout)")
    collect.add_argument("--targets", type=Path,
                         help="YAML file of key patterns and watch-lists (default: built-in list)")

    compare = subparsers.add_parser("compare", parents=[common],
                                    help="Compare the registry against a baseline")
    compare.add_argument("baseline", type=Path, help="Baseline file from 'collect'")
    compare.add_argument("--strict", action="store_true", default=None,
                         help="Also report values removed from watch-all keys")
    compare.add_argument("-f", "--format", choices=[f.value for f in ReportFormat],
                         default=ReportFormat.TABLE.value, help="Report format")
    compare.add_argument("-o", "--output", type=Path,
                         help="Report file to write (default: stdout)")

    return parser


def _setup(args: argparse.Namespace) -> AppConfig:
    config = load_app_config(args.config)
    level = logging.DEBUG if args.verbose else config.logging.level_number
    configure_logging(
        args.log_dir,
        level=level,
        max_bytes=config.logging.log_max_mb * 1024 * 1024,
        backup_count=config.logging.log_backup_count,
    )
    return config


def _watch_targets(args: argparse.Namespace, config: AppConfig) -> Dict[str, List[str]]:
    targets_file = args.targets or config.baseline.targets_file
    if targets_file is not None:
        return targets_to_mapping(load_targets(targets_file))
    return targets_to_mapping(get_default_targets())


def _source_label(args: argparse.Namespace) -> str:
    if args.hive:
        return "offline hives: " + ", ".join(args.hive)
    return "live registry"


def _write_output(text: str, output: Optional[Path]) -> None:
    if output is None:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
    LOGGER.info("Report written to %s", output)


def cmd_collect(args: argparse.Namespace, config: AppConfig, source_factory: SourceFactory) -> int:
    targets = _watch_targets(args, config)
    sid_filter = args.sid_filter or config.baseline.sid_filter
    source = source_factory(args.hive)

    LOGGER.info("Collecting baseline from %s (%d patterns, SID filter %s)",
                _source_label(args), len(targets), sid_filter)
    collector = BaselineCollector(source, callbacks=LoggingCallbacks())
    records = collector.collect(targets, sid_filter=sid_filter)

    if args.output is None:
        _write_output(records_to_json(records), None)
    else:
        save_baseline(records, args.output)
    return EXIT_OK


def cmd_compare(args: argparse.Namespace, config: AppConfig, source_factory: SourceFactory) -> int:
    # Malformed baselines fail here, before any registry access
    records = load_baseline(args.baseline)
    strict = config.baseline.strict if args.strict is None else args.strict
    source = source_factory(args.hive)

    LOGGER.info("Comparing %d baseline records against %s%s",
                len(records), _source_label(args), " (strict)" if strict else "")
    comparator = BaselineComparator(source, strict=strict, callbacks=LoggingCallbacks())
    discrepancies = comparator.compare(records)

    report = DiscrepancyReport(
        discrepancies,
        baseline_path=args.baseline,
        source_label=_source_label(args),
    )
    _write_output(report.render(args.format), args.output)

    if report.is_clean:
        LOGGER.info("No drift detected")
        return EXIT_OK
    LOGGER.warning("%d discrepancies found", len(discrepancies))
    return EXIT_DRIFT


def main(
    argv: Optional[Sequence[str]] = None,
    source_factory: SourceFactory = build_source,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {
        "collect": cmd_collect,
        "compare": cmd_compare,
    }
    try:
        config = _setup(args)
        return commands[args.command](args, config, source_factory)
    except (RegBaselineError, ValueError) as e:
        LOGGER.error("%s", e)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
