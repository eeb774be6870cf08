# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Run orchestration for one isolated suite run.

Control flow:
    launch workers -> readiness -> active tests -> shutdown workers
    -> post-shutdown tests -> RunReport

A global suite timeout kills every worker, records the in-flight test as
``error`` and the not-yet-run active tests as ``skip``; post-shutdown tests
still run against the killed workers. A timeout during the post-shutdown
phase cancels that phase the same way. A launch failure aborts the run and
records every selected test as ``error``.
"""

import inspect
import logging
import threading
import time
from typing import Any, Callable, Optional

from launch_harness.config import HarnessConfig
from launch_harness.core.output_stream import LineListener, ProcessOutput
from launch_harness.core.test_isolation import IsolationConfig
from launch_harness.errors import LaunchError
from launch_harness.launcher.launcher import SuiteDescription, TestLauncher
from launch_harness.report.results import Outcome, Phase, RunReport, TestCaseResult
from launch_harness.runner.active import ActiveTestRunner
from launch_harness.runner.context import RunCancellation, TestContext
from launch_harness.runner.phase_runner import describe_test
from launch_harness.runner.post_shutdown import PostShutdownTestRunner
from launch_harness.runner.suite_loader import LoadedSuite

logger = logging.getLogger(__name__)


class RunOrchestrator:
    """
    Runs one suite in one isolated run and produces its report.

    Example:
        with reserve_isolation_id() as lease:
            orchestrator = RunOrchestrator(HarnessConfig(), lease.config)
            report = orchestrator.run(load_suite(Path('test_talker.py')))
    """

    def __init__(
        self,
        config: HarnessConfig,
        isolation: IsolationConfig,
        line_echo: Optional[LineListener] = None,
        message_source: Any = None
    ):
        """
        Args:
            config: Timeouts and report settings
            isolation: Isolation of this run
            line_echo: Called for every worker output line (--stream-output)
            message_source: Default message source for collectors
        """
        self.config = config
        self.isolation = isolation
        self._line_echo = line_echo
        self._message_source = message_source
        self.cancellation = RunCancellation()
        # Cancellation of the phase currently running; the watchdog cancels it.
        self._phase_cancellation = self.cancellation
        self._phase_lock = threading.Lock()

    def _describe(self, suite: LoadedSuite) -> SuiteDescription:
        generate = suite.generate_description
        try:
            params = inspect.signature(generate).parameters
            kwargs = {'isolation': self.isolation} if 'isolation' in params else {}
            description = generate(**kwargs)
        except Exception as e:
            raise LaunchError(f"generate_test_description() failed: {e}") from e
        if not isinstance(description, SuiteDescription):
            raise LaunchError(
                f"generate_test_description() returned {type(description).__name__}, "
                f"expected SuiteDescription"
            )
        return description

    def _context_factory(
        self,
        phase: Phase,
        proc_output: ProcessOutput,
        launcher: TestLauncher
    ) -> Callable[[], TestContext]:
        def make_context() -> TestContext:
            return TestContext(
                phase=phase,
                proc_output=proc_output,
                proc_info=launcher.proc_info,
                isolation=self.isolation,
                message_source=self._message_source,
            )
        return make_context

    def _on_suite_timeout(self, launcher: TestLauncher) -> None:
        reason = f"suite timeout after {self.config.suite_timeout:g}s"
        logger.error("Cancelling run: %s", reason)
        with self._phase_lock:
            self.cancellation.cancel(reason)
            self._phase_cancellation.cancel(reason)
        launcher.kill_all()

    @staticmethod
    def _launch_failed(suite: LoadedSuite, error: LaunchError) -> list:
        results = []
        for phase, tests in ((Phase.ACTIVE, suite.active_tests),
                             (Phase.POST_SHUTDOWN, suite.post_shutdown_tests)):
            for test in tests:
                classname, name = describe_test(test)
                results.append(TestCaseResult(
                    name=name,
                    classname=classname,
                    phase=phase,
                    outcome=Outcome.ERROR,
                    detail=f"launch failed: {error}",
                ))
        return results

    def run(self, suite: LoadedSuite, filter_pattern: Optional[str] = None) -> RunReport:
        """
        Run ``suite`` and return its report. Never raises for test failures.

        Args:
            suite: The loaded suite
            filter_pattern: Only run tests matching this ``--filter`` pattern
        """
        suite = suite.filtered(filter_pattern)
        report = RunReport(suite=suite.name, isolation_id=self.isolation.domain_id)
        proc_output = ProcessOutput(cancel_event=self.cancellation.event)
        if self._line_echo is not None:
            proc_output.add_line_listener(self._line_echo)
        launcher = TestLauncher(self.isolation, proc_output)

        watchdog = threading.Timer(
            self.config.suite_timeout, self._on_suite_timeout, args=(launcher,))
        watchdog.daemon = True

        start = time.monotonic()
        watchdog.start()
        try:
            try:
                launcher.launch(self._describe(suite))
            except LaunchError as e:
                logger.error("Launch failed for suite %s: %s", suite.name, e)
                report.cases.extend(self._launch_failed(suite, e))
                return report

            active = ActiveTestRunner(
                self._context_factory(Phase.ACTIVE, proc_output, launcher),
                test_timeout=self.config.test_timeout,
                cancellation=self.cancellation,
            )
            report.cases.extend(active.run_against(launcher, suite.active_tests))

            exit_codes = launcher.shutdown(self.config.shutdown_timeout)
            logger.info("Workers terminated: %s", exit_codes)

            # Post-shutdown tests run even after an earlier cancellation, but
            # a suite timeout firing during this phase still cancels them.
            post_cancellation = RunCancellation()
            with self._phase_lock:
                self._phase_cancellation = post_cancellation
            post = PostShutdownTestRunner(
                self._context_factory(Phase.POST_SHUTDOWN, proc_output, launcher),
                test_timeout=self.config.test_timeout,
                cancellation=post_cancellation,
            )
            report.cases.extend(
                post.run_after_shutdown(launcher.proc_info, suite.post_shutdown_tests))
            return report
        finally:
            watchdog.cancel()
            launcher.kill_all()
            report.duration = time.monotonic() - start
