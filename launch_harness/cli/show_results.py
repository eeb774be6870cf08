# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
show-results: summarize persisted run reports.

Reads every native JSON and XUnit report below the results directory and
prints a ``Summary: ...`` line. Unreadable reports are skipped and counted.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from launch_harness.cli import configure_logging
from launch_harness.config import HarnessConfig
from launch_harness.output.console import Console
from launch_harness.report.aggregator import ResultAggregator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarize test results of previous runs",
        prog="show-results",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="List every report file, not only the ones with failures",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show per-test failure details and unreadable files",
    )
    parser.add_argument(
        "-o", "--results-dir",
        type=Path,
        metavar="DIR",
        help="Directory containing run reports",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Entry point for show-results."""
    parsed = build_parser().parse_args(args)
    configure_logging(parsed.debug)
    console = Console(color=not parsed.no_color)

    try:
        config = HarnessConfig.from_env().with_overrides(results_dir=parsed.results_dir)
    except ValueError as e:
        console.error(f"Invalid configuration: {e}")
        return 2

    result = ResultAggregator(config.results_dir).aggregate()
    summary = result.summary

    if not result.reports and not result.errors:
        console.info(f"No test results found in {config.results_dir}")
        return 0

    for report in result.reports:
        if parsed.all or not report.summary.successful:
            console.report_file(report)
            if parsed.verbose:
                console.list_failures(report.cases, show_details=True)

    if result.errors:
        console.print()
        console.warning(f"{len(result.errors)} report file(s) could not be read")
        if parsed.verbose:
            for error in result.errors:
                console.dim(f"  {error}")

    console.print()
    console.summary_line(summary)

    return 0 if summary.successful else 1


if __name__ == "__main__":
    sys.exit(main())
