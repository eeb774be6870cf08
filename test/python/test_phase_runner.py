#!/usr/bin/env python3
# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the phase runners and outcome classification."""

import threading

import pytest

import sample_cases
from launch_harness.core.output_stream import ProcessOutput
from launch_harness.errors import HarnessError
from launch_harness.launcher.launcher import ProcessInfo, TestLauncher
from launch_harness.launcher.worker import WorkerProcess, WorkerSpec
from launch_harness.core.test_isolation import IsolationConfig
from launch_harness.report.results import Outcome, Phase
from launch_harness.runner.active import ActiveTestRunner
from launch_harness.runner.context import RunCancellation
from launch_harness.runner.phase_runner import (
    NOT_RUN_REASON,
    PhaseRunner,
    bind_test_arguments,
    describe_test,
    format_exception,
)
from launch_harness.runner.post_shutdown import (
    PostShutdownTestRunner,
    is_post_shutdown,
    post_shutdown_test,
)


def outcomes_by_name(results):
    return {r.name: r for r in results}


class TestClassification:
    """Tests for mapping test behaviour to outcomes."""

    def test_outcomes(self, context_factory):
        """Each kind of test ending maps to its outcome."""
        runner = PhaseRunner(context_factory, test_timeout=5.0)
        tests = sample_cases.cases(
            sample_cases.Outcomes,
            'test_pass',
            'test_assertion_fails',
            'test_value_error',
            'test_timeout_error',
            'test_skip',
            'test_expected_failure',
            'test_unexpected_success',
        )

        results = outcomes_by_name(runner.run(tests))

        assert results['test_pass'].outcome is Outcome.PASS
        assert results['test_assertion_fails'].outcome is Outcome.FAIL
        assert results['test_value_error'].outcome is Outcome.ERROR
        assert results['test_timeout_error'].outcome is Outcome.FAIL
        assert results['test_skip'].outcome is Outcome.SKIP
        assert results['test_expected_failure'].outcome is Outcome.PASS
        assert results['test_unexpected_success'].outcome is Outcome.FAIL

    def test_detail_starts_with_exception(self, context_factory):
        """Failure detail starts with the exception type and message."""
        runner = PhaseRunner(context_factory)
        [result] = runner.run(sample_cases.cases(sample_cases.Outcomes, 'test_value_error'))

        assert result.detail.startswith("ValueError: boom")
        assert "Traceback" in result.detail

    def test_skip_reason_recorded(self, context_factory):
        """The skip reason becomes the detail."""
        runner = PhaseRunner(context_factory)
        [result] = runner.run(sample_cases.cases(sample_cases.Outcomes, 'test_skip'))

        assert result.detail == "not today"

    def test_results_keep_order_and_phase(self, context_factory):
        """Results come back in run order tagged with the runner's phase."""
        runner = PostShutdownTestRunner(context_factory)
        tests = sample_cases.cases(sample_cases.Outcomes, 'test_skip', 'test_pass')

        results = runner.run(tests)

        assert [r.name for r in results] == ['test_skip', 'test_pass']
        assert all(r.phase is Phase.POST_SHUTDOWN for r in results)
        assert all(r.classname == 'Outcomes' for r in results)

    def test_failure_does_not_stop_later_tests(self, context_factory):
        """A failing test never aborts the following ones."""
        runner = PhaseRunner(context_factory)
        tests = sample_cases.cases(
            sample_cases.Outcomes, 'test_value_error', 'test_assertion_fails', 'test_pass')

        results = runner.run(tests)

        assert [r.outcome for r in results] == [Outcome.ERROR, Outcome.FAIL, Outcome.PASS]

    def test_subtest_failure_wins(self, context_factory):
        """A failing subtest marks the whole test as failed."""
        runner = PhaseRunner(context_factory)
        [result] = runner.run(
            sample_cases.cases(sample_cases.SubTests, 'test_one_subtest_fails'))

        assert result.outcome is Outcome.FAIL
        assert "i=1" in result.detail

    def test_format_exception(self):
        """format_exception puts 'Type: message' first."""
        try:
            raise KeyError('missing')
        except KeyError as e:
            text = format_exception((type(e), e, e.__traceback__))

        assert text.splitlines()[0] == "KeyError: 'missing'"


class TestClassFixtures:
    """Tests for setUpClass handling."""

    def test_setup_class_error(self, context_factory):
        """A failing setUpClass records every test of the class as error."""
        runner = PhaseRunner(context_factory)
        tests = sample_cases.cases(sample_cases.BrokenClassSetup, 'test_one', 'test_two')

        results = runner.run(tests)

        assert [r.outcome for r in results] == [Outcome.ERROR, Outcome.ERROR]
        assert "fixture unavailable" in results[0].detail

    def test_setup_class_skip(self, context_factory):
        """SkipTest in setUpClass skips the whole class."""
        runner = PhaseRunner(context_factory)
        [result] = runner.run(sample_cases.cases(sample_cases.SkippedClassSetup, 'test_one'))

        assert result.outcome is Outcome.SKIP
        assert result.detail == "no hardware"


class TestArgumentBinding:
    """Tests for binding harness values to test parameters."""

    def test_bound_by_name(self, context_factory):
        """Parameters named after harness values receive them."""
        runner = PhaseRunner(context_factory)
        tests = sample_cases.cases(sample_cases.Arguments, 'test_receives_values', 'test_plain')

        results = runner.run(tests)

        assert all(r.outcome is Outcome.PASS for r in results)
        received = sample_cases.Arguments.received
        assert received['proc_output'].condition is context_factory.proc_output.condition
        assert received['isolation'].domain_id == 7
        assert received['context'].proc_output is received['proc_output']

    def test_unrelated_method_untouched(self, context_factory):
        """Methods without harness parameters are left as they are."""
        test = sample_cases.Arguments('test_plain')
        before = test.test_plain

        bind_test_arguments(test, context_factory().arguments())

        assert test.test_plain == before

    def test_describe_test(self):
        """describe_test returns class and method name."""
        test = sample_cases.Outcomes('test_pass')
        assert describe_test(test) == ('Outcomes', 'test_pass')

    def test_collectors_destroyed_after_test(self, context_factory):
        """Collectors created by a test are released when it ends."""
        sample_cases.Collectors.created.clear()
        runner = PhaseRunner(context_factory)

        runner.run(sample_cases.cases(sample_cases.Collectors, 'test_creates_collector'))

        [collector] = sample_cases.Collectors.created
        assert not collector.active


class TestTimeouts:
    """Tests for per-test timeouts and cancellation."""

    def test_per_test_timeout(self, context_factory):
        """A test exceeding the per-test timeout fails."""
        runner = PhaseRunner(context_factory, test_timeout=0.3)
        tests = sample_cases.cases(sample_cases.Slow, 'test_sleeps', 'test_busy')

        results = runner.run(tests)

        assert results[0].outcome is Outcome.FAIL
        assert results[0].detail == "timed out after 0.3s"
        assert results[1].outcome is Outcome.PASS

    def test_cancel_in_flight(self, context_factory):
        """Cancelling the run errors the running test and skips the rest."""
        cancellation = RunCancellation()
        runner = PhaseRunner(context_factory, test_timeout=30.0, cancellation=cancellation)
        tests = sample_cases.cases(sample_cases.Slow, 'test_sleeps', 'test_busy')

        timer = threading.Timer(0.3, cancellation.cancel, args=("suite timeout after 0.3s",))
        timer.start()
        try:
            results = runner.run(tests)
        finally:
            timer.cancel()

        assert results[0].outcome is Outcome.ERROR
        assert results[0].detail == "cancelled: suite timeout after 0.3s"
        assert results[0].duration < 5.0
        assert results[1].outcome is Outcome.SKIP
        assert results[1].detail == NOT_RUN_REASON

    def test_timed_out_output_wait_released(self, context_factory):
        """A timed-out test blocked on worker output stops waiting."""
        context_factory.proc_output.create_streams('talker')
        sample_cases.WaitsForOutput.finished.clear()
        runner = PhaseRunner(context_factory, test_timeout=0.3)

        [result] = runner.run(sample_cases.cases(sample_cases.WaitsForOutput, 'test_waits'))

        assert result.outcome is Outcome.FAIL
        assert sample_cases.WaitsForOutput.finished.wait(2.0)
        assert not context_factory.proc_output.cancel_event.is_set()

    def test_cancelled_before_start(self, context_factory):
        """Nothing runs once the run is cancelled."""
        cancellation = RunCancellation()
        cancellation.cancel("stop")
        runner = PhaseRunner(context_factory, cancellation=cancellation)

        results = runner.run(sample_cases.cases(sample_cases.Outcomes, 'test_pass'))

        assert results[0].outcome is Outcome.SKIP

    def test_cancellation_keeps_first_reason(self):
        """Only the first cancellation reason is kept."""
        cancellation = RunCancellation()
        cancellation.cancel("first")
        cancellation.cancel("second")

        assert cancellation.cancelled
        assert cancellation.reason == "first"


class TestPhaseGuards:
    """Tests for the preconditions of each phase."""

    def test_active_requires_ready_launcher(self, context_factory):
        """Active tests refuse to start before readiness."""
        launcher = TestLauncher(IsolationConfig(domain_id=9), ProcessOutput())
        runner = ActiveTestRunner(context_factory)

        with pytest.raises(HarnessError):
            runner.run_against(launcher, [])

    def test_active_allowed_after_cancel(self, context_factory):
        """A cancelled run may enter the active phase to record skips."""
        launcher = TestLauncher(IsolationConfig(domain_id=9), ProcessOutput())
        cancellation = RunCancellation()
        cancellation.cancel("suite timeout")
        runner = ActiveTestRunner(context_factory, cancellation=cancellation)

        results = runner.run_against(
            launcher, sample_cases.cases(sample_cases.Outcomes, 'test_pass'))

        assert results[0].outcome is Outcome.SKIP

    def test_post_shutdown_requires_terminated_workers(self, context_factory):
        """Post-shutdown tests refuse to run while a worker is alive."""
        worker = WorkerProcess(WorkerSpec('alive', ['true']), ProcessOutput())
        runner = PostShutdownTestRunner(context_factory)

        with pytest.raises(HarnessError, match="alive"):
            runner.run_after_shutdown(ProcessInfo([worker]), [])

    def test_post_shutdown_decorator(self):
        """The decorator marks classes as post-shutdown."""
        @post_shutdown_test()
        class Marked:
            pass

        class Unmarked:
            pass

        assert is_post_shutdown(Marked)
        assert not is_post_shutdown(Unmarked)
