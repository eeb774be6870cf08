# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Console output utilities for the run-tests and show-results commands.

Provides colored output and formatted test result display.
"""

import sys
from typing import List

from launch_harness.report.results import (
    LoadedReport,
    Outcome,
    RunReport,
    Summary,
    TestCaseResult,
)


class Console:
    """
    Colored console output for test results.

    Colors are only used when the output file is a TTY.
    """

    # ANSI color codes
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    CYAN = '\033[36m'
    GRAY = '\033[90m'

    def __init__(self, color: bool = True, file=None):
        """
        Initialize console output.

        Args:
            color: Whether to use colored output.
            file: Output file (defaults to sys.stdout).
        """
        self._file = file or sys.stdout
        self._use_color = color and self._supports_color()

    def _supports_color(self) -> bool:
        if not hasattr(self._file, 'isatty'):
            return False
        return self._file.isatty()

    def _colorize(self, text: str, color: str) -> str:
        if self._use_color:
            return f"{color}{text}{self.RESET}"
        return text

    def print(self, message: str = '', end: str = '\n') -> None:
        print(message, end=end, file=self._file, flush=True)

    def info(self, message: str) -> None:
        self.print(message)

    def success(self, message: str) -> None:
        self.print(self._colorize(message, self.GREEN))

    def error(self, message: str) -> None:
        self.print(self._colorize(message, self.RED))

    def warning(self, message: str) -> None:
        self.print(self._colorize(message, self.YELLOW))

    def header(self, message: str) -> None:
        self.print(self._colorize(message, self.BOLD))

    def dim(self, message: str) -> None:
        self.print(self._colorize(message, self.GRAY))

    def divider(self, char: str = '=', width: int = 60) -> None:
        self.print(char * width)

    def worker_line(self, process: str, stream: str, line: str) -> None:
        """Echo one line of worker output (--stream-output)."""
        prefix = self._colorize(f"[{process}]", self.CYAN)
        if stream == 'stderr':
            line = self._colorize(line, self.YELLOW)
        self.print(f"{prefix} {line}")

    def test_result(self, case: TestCaseResult) -> None:
        """Print one test outcome line."""
        labels = {
            Outcome.PASS: self._colorize('PASS', self.GREEN),
            Outcome.FAIL: self._colorize('FAIL', self.RED),
            Outcome.ERROR: self._colorize('ERROR', self.RED + self.BOLD),
            Outcome.SKIP: self._colorize('SKIP', self.GRAY),
        }
        phase = self._colorize(f"[{case.phase.value}]", self.GRAY)
        self.print(f"  {labels[case.outcome]}  {phase} {case.test_id} ({case.duration:.1f}s)")

    def list_failures(
        self,
        cases: List[TestCaseResult],
        show_details: bool = False
    ) -> None:
        """
        Print the failed and errored tests.

        Args:
            cases: Cases to list (only failures and errors are printed).
            show_details: Print the full detail instead of its first line.
        """
        problems = [c for c in cases if c.outcome in (Outcome.FAIL, Outcome.ERROR)]
        if not problems:
            return

        self.print()
        self.error("FAILURES:")
        for case in problems:
            self.print(f"  - {case.test_id} [{case.outcome.value}]")
            if not case.detail:
                continue
            if show_details:
                for line in case.detail.rstrip().split('\n'):
                    self.dim(f"      {line}")
            else:
                self.dim(f"      {case.detail.strip().split(chr(10))[0][:100]}")

    def run_summary(self, report: RunReport, show_details: bool = False) -> None:
        """Print the summary of one run."""
        self.print()
        self.divider()
        self.header(f"TEST SUMMARY ({report.suite}, ROS_DOMAIN_ID={report.isolation_id})")
        self.divider()
        self.list_failures(report.cases, show_details=show_details)
        self.print()
        self.summary_line(report.to_summary())
        self.print(f"Duration: {report.duration:.1f}s")

        if report.successful:
            self.success("RESULT: PASSED")
        else:
            self.error("RESULT: FAILED")

    def summary_line(self, summary: Summary) -> None:
        line = summary.line()
        if summary.successful:
            self.success(line)
        else:
            self.error(line)

    def report_file(self, report: LoadedReport) -> None:
        """Print the per-file line of show-results."""
        s = report.summary
        line = (f"{report.path}: {s.tests} tests, {s.errors} errors, "
                f"{s.failures} failures, {s.skipped} skipped")
        if s.successful:
            self.print(line)
        else:
            self.error(line)
