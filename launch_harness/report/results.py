# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Result data structures: per-test outcomes, run reports and summaries.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional


class Phase(Enum):
    """When a test runs relative to the workers' lifetime."""
    ACTIVE = "active"
    POST_SHUTDOWN = "post-shutdown"


class Outcome(Enum):
    """Outcome of a single test case."""
    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"
    SKIP = "skip"


@dataclass(frozen=True)
class TestCaseResult:
    """Result of one test routine. Immutable once created."""

    __test__ = False

    name: str
    phase: Phase
    outcome: Outcome
    duration: float = 0.0
    classname: str = ""
    detail: Optional[str] = None
    """Failure message or traceback; skip reason for skipped tests."""

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.PASS

    @property
    def test_id(self) -> str:
        return f"{self.classname}.{self.name}" if self.classname else self.name

    def summary(self) -> str:
        """Return a one-line summary."""
        icon = {
            Outcome.PASS: "✓",
            Outcome.FAIL: "✗",
            Outcome.ERROR: "!",
            Outcome.SKIP: "-",
        }[self.outcome]
        return f"{icon} {self.test_id} ({self.duration:.1f}s)"


@dataclass
class RunReport:
    """
    Ordered results of one isolated run.

    Counts are always derived from the cases, so
    ``tests == errors + failures + skipped + passed`` holds by construction.
    """

    suite: str
    cases: List[TestCaseResult] = field(default_factory=list)
    isolation_id: Optional[int] = None
    timestamp: datetime = field(default_factory=datetime.now)
    duration: float = 0.0

    def add(self, case: TestCaseResult) -> None:
        self.cases.append(case)

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for c in self.cases if c.outcome is outcome)

    @property
    def tests(self) -> int:
        return len(self.cases)

    @property
    def errors(self) -> int:
        return self._count(Outcome.ERROR)

    @property
    def failures(self) -> int:
        return self._count(Outcome.FAIL)

    @property
    def skipped(self) -> int:
        return self._count(Outcome.SKIP)

    @property
    def passed(self) -> int:
        return self._count(Outcome.PASS)

    @property
    def successful(self) -> bool:
        """True when nothing failed or errored."""
        return self.errors == 0 and self.failures == 0

    def for_phase(self, phase: Phase) -> List[TestCaseResult]:
        return [c for c in self.cases if c.phase is phase]

    def to_summary(self) -> 'Summary':
        return Summary(
            tests=self.tests,
            errors=self.errors,
            failures=self.failures,
            skipped=self.skipped,
            reports=1,
        )


@dataclass(frozen=True)
class Summary:
    """
    Totals across any number of run reports.

    Summaries add field by field, so combining them is commutative and
    associative, and ``Summary()`` is the identity.
    """

    tests: int = 0
    errors: int = 0
    failures: int = 0
    skipped: int = 0
    reports: int = 0
    """Number of report files that contributed."""
    unreadable: int = 0
    """Number of report files that could not be read."""

    @property
    def passed(self) -> int:
        return self.tests - self.errors - self.failures - self.skipped

    @property
    def successful(self) -> bool:
        return self.errors == 0 and self.failures == 0

    def __add__(self, other: 'Summary') -> 'Summary':
        if not isinstance(other, Summary):
            return NotImplemented
        return Summary(
            tests=self.tests + other.tests,
            errors=self.errors + other.errors,
            failures=self.failures + other.failures,
            skipped=self.skipped + other.skipped,
            reports=self.reports + other.reports,
            unreadable=self.unreadable + other.unreadable,
        )

    @classmethod
    def combine(cls, summaries: Iterable['Summary']) -> 'Summary':
        total = cls()
        for summary in summaries:
            total = total + summary
        return total

    def line(self) -> str:
        """The ``Summary: ...`` line printed by ``show-results``."""
        return (
            f"Summary: {self.tests} tests, {self.errors} errors, "
            f"{self.failures} failures, {self.skipped} skipped"
        )


@dataclass
class LoadedReport:
    """A report file read back from disk."""

    path: str
    suite: str
    summary: Summary
    cases: List[TestCaseResult] = field(default_factory=list)

    @property
    def problems(self) -> List[TestCaseResult]:
        """Cases that failed or errored."""
        return [c for c in self.cases if c.outcome in (Outcome.FAIL, Outcome.ERROR)]
