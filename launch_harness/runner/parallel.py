# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Parallel execution of several suites, one isolated process each.

Every suite runs in a child ``run-tests`` process. The parent reserves an
isolation id per child and holds it until the child exits, so concurrently
running suites never share a ROS_DOMAIN_ID.
"""

import logging
import subprocess
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from launch_harness.config import HarnessConfig
from launch_harness.core.test_isolation import build_isolation_env, reserve_isolation_id

logger = logging.getLogger(__name__)


class SuiteStatus(Enum):
    """Status of one child suite run."""
    PASSED = "passed"
    FAILED = "failed"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass
class SuiteRunResult:
    """Outcome of one child suite run."""

    suite: Path
    status: SuiteStatus
    domain_id: int
    duration: float = 0.0
    return_code: int = 0
    output: str = ""

    @property
    def passed(self) -> bool:
        return self.status is SuiteStatus.PASSED


class ParallelSuiteRunner:
    """Runs suite files concurrently in isolated child processes."""

    def __init__(
        self,
        config: HarnessConfig,
        jobs: int = 2,
        filter_pattern: Optional[str] = None,
        on_result: Optional[Callable[[SuiteRunResult], None]] = None
    ):
        if jobs < 1:
            raise ValueError("jobs must be at least 1")
        self.config = config
        self.jobs = jobs
        self.filter_pattern = filter_pattern
        self._on_result = on_result

    def build_command(self, suite: Path) -> List[str]:
        cmd = [
            sys.executable, '-m', 'launch_harness.cli.run_tests',
            str(suite),
            '--results-dir', str(self.config.results_dir),
            '--report-format', self.config.report_format,
            '--timeout', str(self.config.suite_timeout),
            '--test-timeout', str(self.config.test_timeout),
        ]
        if self.filter_pattern:
            cmd.extend(['--filter', self.filter_pattern])
        return cmd

    def run_suite(self, suite: Path) -> SuiteRunResult:
        """Run one suite in a child process holding its own isolation id."""
        # Grace period on top of the child's own suite timeout.
        timeout = self.config.suite_timeout + self.config.shutdown_timeout + 30.0

        with reserve_isolation_id() as lease:
            env = build_isolation_env(lease.config)
            start = time.monotonic()
            try:
                proc = subprocess.run(
                    self.build_command(suite),
                    env=env,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    timeout=timeout,
                )
            except subprocess.TimeoutExpired as e:
                output = e.output if isinstance(e.output, str) else ''
                result = SuiteRunResult(
                    suite=suite,
                    status=SuiteStatus.TIMEOUT,
                    domain_id=lease.domain_id,
                    duration=time.monotonic() - start,
                    return_code=-1,
                    output=output or f"Suite timed out after {timeout:g}s",
                )
            except OSError as e:
                result = SuiteRunResult(
                    suite=suite,
                    status=SuiteStatus.ERROR,
                    domain_id=lease.domain_id,
                    duration=time.monotonic() - start,
                    return_code=-1,
                    output=str(e),
                )
            else:
                if proc.returncode == 0:
                    status = SuiteStatus.PASSED
                elif proc.returncode == 1:
                    status = SuiteStatus.FAILED
                else:
                    status = SuiteStatus.ERROR
                result = SuiteRunResult(
                    suite=suite,
                    status=status,
                    domain_id=lease.domain_id,
                    duration=time.monotonic() - start,
                    return_code=proc.returncode,
                    output=proc.stdout,
                )

        logger.info("Suite %s finished: %s (domain %d)",
                    suite, result.status.value, result.domain_id)
        if self._on_result is not None:
            self._on_result(result)
        return result

    def run(self, suites: List[Path]) -> List[SuiteRunResult]:
        """Run every suite; results come back in the order given."""
        with ThreadPoolExecutor(max_workers=self.jobs) as pool:
            return list(pool.map(self.run_suite, suites))
