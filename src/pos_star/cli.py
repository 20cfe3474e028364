"""Command-line interface for the POS star-schema pipeline.

Subcommands:
    run       Build the star schema from raw exports, persist it, and
              optionally write reports.
    report    Load the persisted star schema and print reports.
    validate  Print the validation report for a raw export.

Exit codes: 0 on success, 1 on pipeline or report failure, 2 on argument
errors.

Examples:
    $ pos-star run --input coffee_sales.csv --data-root data --report all
    $ pos-star report --data-root data --report kpi_summary --start 2023-06-01
    $ pos-star validate --input coffee_sales.csv --delimiter ,
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import pandas as pd

from pos_star.config import DEFAULT_DELIMITER, DataPaths, PipelineConfig
from pos_star.exceptions import ConfigError, PipelineError, PosStarError

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pos-star",
        description="Build a star schema from POS sales exports and report on it.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors.")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--data-root",
        type=str,
        default="data",
        help="Root directory for pipeline data (default: 'data'). "
        "Silver tables go to <data-root>/b_clean/sales, reports to <data-root>/c_processed/sales",
    )
    common.add_argument(
        "--delimiter",
        default=DEFAULT_DELIMITER,
        help=f"Field separator of the raw export (default: {DEFAULT_DELIMITER!r}).",
    )

    reports = argparse.ArgumentParser(add_help=False)
    reports.add_argument(
        "--report",
        action="append",
        default=None,
        help="Report name to run; repeat for several, or 'all'.",
    )
    reports.add_argument("--start", default=None, help="Inclusive start date (YYYY-MM-DD).")
    reports.add_argument("--end", default=None, help="Inclusive end date (YYYY-MM-DD).")
    reports.add_argument(
        "--store",
        action="append",
        type=int,
        default=None,
        help="store_id to include; repeat for several. Default: all stores.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", parents=[common, reports], help="Build and persist the star schema.")
    run.add_argument(
        "--input",
        default=None,
        help="Raw export file. Default: every export in <data-root>/a_raw/sales.",
    )
    run.add_argument(
        "--abort-on-error",
        action="store_true",
        help="Abort on the first unparseable field instead of rejecting the row.",
    )

    sub.add_parser("report", parents=[common, reports], help="Print reports from the persisted schema.")

    validate = sub.add_parser("validate", parents=[common], help="Print the validation report.")
    validate.add_argument("--input", required=True, help="Raw export file.")
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _report_names(args: argparse.Namespace) -> list[str] | None:
    """None means every report."""
    if not args.report or "all" in args.report:
        return None
    return args.report


def _print_report(name: str, df: pd.DataFrame) -> None:
    print(f"\n== {name} ({len(df)} rows) ==")
    if df.empty:
        print("(no rows)")
    else:
        print(df.to_string(index=False))


def _cmd_run(args: argparse.Namespace, paths: DataPaths, config: PipelineConfig) -> int:
    from pos_star.marts.api import run_reports, write_reports
    from pos_star.sales.api import run_file_pipeline

    result = run_file_pipeline(paths, source=args.input, config=config)
    print(json.dumps(result.report.summary, indent=2))
    print(f"Star schema written to: {paths.clean_sales}")

    if args.report is None:
        return 0
    run = run_reports(
        result.schema,
        _report_names(args),
        start_date=args.start,
        end_date=args.end,
        stores=args.store,
        config=config,
    )
    for path in write_reports(paths, run):
        print(f"Report: {path}")
    for name, error in run.errors.items():
        print(f"[ERROR] {name}: {error}", file=sys.stderr)
    return 0 if run.ok else 1


def _cmd_report(args: argparse.Namespace, paths: DataPaths, config: PipelineConfig) -> int:
    from pos_star.marts.api import run_reports
    from pos_star.sales.core import load_star_schema

    schema = load_star_schema(paths)
    run = run_reports(
        schema,
        _report_names(args),
        start_date=args.start,
        end_date=args.end,
        stores=args.store,
        config=config,
    )
    for name, df in run.results.items():
        _print_report(name, df)
    for name, error in run.errors.items():
        print(f"[ERROR] {name}: {error}", file=sys.stderr)
    return 0 if run.ok else 1


def _cmd_validate(args: argparse.Namespace, paths: DataPaths, config: PipelineConfig) -> int:
    from pos_star.qa.api import validate_sales
    from pos_star.sales.raw import load_raw

    report = validate_sales(load_raw(args.input, config), config)
    print(json.dumps(report.summary, indent=2))
    for field, count in report.missing_values.items():
        if count:
            print(f"[WARN ] {field}: {count} missing value(s)")
    for violation in report.integrity_violations:
        print(f"[ERROR] {violation}")
    return 0 if report.ok else 1


COMMANDS = {"run": _cmd_run, "report": _cmd_report, "validate": _cmd_validate}


def main(argv: list[str] | None = None) -> int:
    """Execute the pos-star command-line tool.

    Returns:
        Process exit code.

    """
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return 0 if e.code == 0 else 2

    _configure_logging(args)

    try:
        config = PipelineConfig(
            delimiter=args.delimiter,
            abort_on_first_error=getattr(args, "abort_on_error", False),
        )
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    paths = DataPaths.from_root(Path(args.data_root))
    logger.debug("Running %s with data root %s", args.command, paths.data_root)

    try:
        return COMMANDS[args.command](args, paths, config)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except PipelineError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        print(json.dumps(e.report.summary, indent=2), file=sys.stderr)
        return 1
    except (PosStarError, FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
