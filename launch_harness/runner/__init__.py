# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Test execution for one run.

Active tests run while the workers are up, post-shutdown tests after they
stopped. RunOrchestrator sequences both phases for one suite;
ParallelSuiteRunner runs several suites in isolated child processes.
"""

from launch_harness.runner.context import RunCancellation, TestContext
from launch_harness.runner.active import ActiveTestRunner
from launch_harness.runner.post_shutdown import PostShutdownTestRunner, post_shutdown_test
from launch_harness.runner.suite_loader import LoadedSuite, load_suite
from launch_harness.runner.orchestrator import RunOrchestrator
from launch_harness.runner.parallel import ParallelSuiteRunner, SuiteRunResult, SuiteStatus

__all__ = [
    'RunCancellation',
    'TestContext',
    'ActiveTestRunner',
    'PostShutdownTestRunner',
    'post_shutdown_test',
    'LoadedSuite',
    'load_suite',
    'RunOrchestrator',
    'ParallelSuiteRunner',
    'SuiteRunResult',
    'SuiteStatus',
]
