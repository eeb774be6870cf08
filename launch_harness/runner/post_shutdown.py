# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Post-shutdown test runner: tests executed after every worker terminated.
"""

import logging
import unittest
from typing import List

from launch_harness.errors import HarnessError
from launch_harness.launcher.launcher import ProcessInfo
from launch_harness.launcher.worker import WorkerState
from launch_harness.report.results import Phase, TestCaseResult
from launch_harness.runner.phase_runner import PhaseRunner

logger = logging.getLogger(__name__)

POST_SHUTDOWN_ATTR = '__post_shutdown_test__'


def post_shutdown_test():
    """
    Class decorator marking a ``unittest.TestCase`` as post-shutdown.

    Example:
        @post_shutdown_test()
        class TestShutdown(unittest.TestCase):
            def test_exit_codes(self, proc_info):
                assert_exit_codes(proc_info)
    """
    def decorator(cls):
        setattr(cls, POST_SHUTDOWN_ATTR, True)
        return cls
    return decorator


def is_post_shutdown(cls: type) -> bool:
    return bool(getattr(cls, POST_SHUTDOWN_ATTR, False))


class PostShutdownTestRunner(PhaseRunner):
    """Runs assertion routines over the captured exit codes and output."""

    phase = Phase.POST_SHUTDOWN

    def run_after_shutdown(
        self,
        proc_info: ProcessInfo,
        tests: List[unittest.TestCase]
    ) -> List[TestCaseResult]:
        """
        Run ``tests`` once every worker has terminated.

        Raises:
            HarnessError: If any worker is still alive
        """
        if not proc_info.all_terminated:
            alive = [name for name in proc_info
                     if proc_info.state(name) is not WorkerState.TERMINATED]
            raise HarnessError(
                f"Post-shutdown tests need every worker terminated; still alive: {', '.join(alive)}"
            )
        logger.info("Running %d post-shutdown test(s)", len(tests))
        return self.run(tests)
