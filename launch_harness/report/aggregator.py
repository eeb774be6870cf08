# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Result aggregation across run reports.

Reads native JSON and XUnit XML reports and merges them into a single
:class:`Summary`. Unreadable files are skipped and counted, never fatal.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from launch_harness.errors import ReportParseError
from launch_harness.report.native import parse_native
from launch_harness.report.results import LoadedReport, Summary
from launch_harness.report.xunit import parse_xunit

logger = logging.getLogger(__name__)

REPORT_SUFFIXES = ('.xml', '.json')


@dataclass
class AggregationResult:
    """Everything read during one aggregation."""

    reports: List[LoadedReport] = field(default_factory=list)
    errors: List[ReportParseError] = field(default_factory=list)

    @property
    def summary(self) -> Summary:
        total = Summary.combine(r.summary for r in self.reports)
        return total + Summary(unreadable=len(self.errors))


def load_report(path: Path) -> LoadedReport:
    """
    Read one report file, choosing the parser by file suffix.

    Raises:
        ReportParseError: If the file cannot be read as a report
    """
    if path.suffix == '.json':
        return parse_native(path)
    if path.suffix == '.xml':
        return parse_xunit(path)
    raise ReportParseError(path, f"unsupported report type {path.suffix!r}")


class ResultAggregator:
    """
    Merges persisted run reports into a summary.

    Example:
        aggregator = ResultAggregator(Path('test_results'))
        print(aggregator.summarize().line())
    """

    def __init__(self, results_dir: Path):
        self.results_dir = Path(results_dir)

    def find_report_files(self) -> List[Path]:
        """All report files below the results directory, sorted by path."""
        if not self.results_dir.is_dir():
            logger.debug("Results directory %s does not exist", self.results_dir)
            return []
        return sorted(
            p for p in self.results_dir.rglob('*')
            if p.suffix in REPORT_SUFFIXES and p.is_file()
        )

    def aggregate(self, paths: Optional[Iterable[Path]] = None) -> AggregationResult:
        """
        Read every report file.

        Args:
            paths: Files to read; defaults to every report file found

        Returns:
            The loaded reports and the errors for files that were skipped
        """
        if paths is None:
            paths = self.find_report_files()

        result = AggregationResult()
        for path in paths:
            try:
                result.reports.append(load_report(Path(path)))
            except ReportParseError as e:
                logger.warning("Skipping unreadable report %s", e)
                result.errors.append(e)
        return result

    def summarize(self, paths: Optional[Iterable[Path]] = None) -> Summary:
        """Aggregate and return only the summary."""
        return self.aggregate(paths).summary
