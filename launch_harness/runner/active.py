# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Active test runner: tests executed while the workers are running.
"""

import logging
import unittest
from typing import List

from launch_harness.errors import HarnessError
from launch_harness.launcher.launcher import TestLauncher
from launch_harness.report.results import Phase, TestCaseResult
from launch_harness.runner.phase_runner import PhaseRunner

logger = logging.getLogger(__name__)


class ActiveTestRunner(PhaseRunner):
    """
    Runs active tests sequentially against live workers.

    Tests wait for the launcher's readiness signal; each one gets a fresh
    context and is bounded by the per-test timeout.
    """

    phase = Phase.ACTIVE

    def run_against(
        self,
        launcher: TestLauncher,
        tests: List[unittest.TestCase]
    ) -> List[TestCaseResult]:
        """
        Run ``tests`` once ``launcher`` has signalled readiness.

        Raises:
            HarnessError: If readiness was never signalled and the run was
                not cancelled
        """
        if not launcher.ready.is_set() and not self.cancellation.cancelled:
            raise HarnessError("Active tests started before the launcher was ready")
        logger.info("Running %d active test(s)", len(tests))
        return self.run(tests)
