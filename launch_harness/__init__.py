# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
launch_harness - Isolated launch testing for multi-process systems.

Runs a suite of worker processes in an isolated run, executes tests against
them while they run (active tests) and after they stopped (post-shutdown
tests), and persists a report per run:
- Isolation ids reserved per run, propagated to workers via ROS_DOMAIN_ID
- Output capture with blocking waits on stdout/stderr lines
- Bounded message collectors for topic subscription
- XUnit and native JSON reports, aggregated across runs

Example suite file:
    import unittest
    from launch_harness import SuiteDescription, WorkerSpec, post_shutdown_test
    from launch_harness.assertions import assert_exit_codes

    def generate_test_description():
        return SuiteDescription(workers=[
            WorkerSpec('talker', ['python3', '-u', 'talker.py']),
        ])

    class TestTalker(unittest.TestCase):
        def test_says_hello(self, proc_output):
            proc_output.assert_wait_for('hello', process='talker', timeout=5.0)

    @post_shutdown_test()
    class TestTalkerShutdown(unittest.TestCase):
        def test_exit_code(self, proc_info):
            assert_exit_codes(proc_info)
"""

from launch_harness.errors import (
    HarnessError,
    LaunchError,
    WaitTimeoutError,
    SuiteCancelledError,
    SuiteLoadError,
    ReportParseError,
)
from launch_harness.config import HarnessConfig

from launch_harness.core.test_isolation import (
    IsolationConfig,
    IsolationLease,
    reserve_isolation_id,
    acquire_isolation,
    get_test_isolation_config,
    build_isolation_env,
)
from launch_harness.core.output_stream import OutputStream, ProcessOutput
from launch_harness.core.message_collector import (
    MessageCollector,
    NodeSource,
    OutputTopicSource,
)
from launch_harness.core.wait_helpers import wait_for_duration, wait_until_condition

from launch_harness.launcher.worker import WorkerSpec, WorkerState, WorkerProcess
from launch_harness.launcher.launcher import SuiteDescription, ProcessInfo, TestLauncher

from launch_harness.runner.context import TestContext
from launch_harness.runner.post_shutdown import post_shutdown_test
from launch_harness.runner.suite_loader import LoadedSuite, load_suite
from launch_harness.runner.orchestrator import RunOrchestrator

from launch_harness.report.results import (
    Phase,
    Outcome,
    TestCaseResult,
    RunReport,
    Summary,
)
from launch_harness.report.aggregator import ResultAggregator

from launch_harness.assertions import (
    assert_exit_codes,
    assert_output_contains,
    assert_message_count,
)

__version__ = '0.1.0'
