# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Sequential execution of unittest test cases for one phase of a run.

Each test runs on its own thread so that a per-test timeout can be
enforced; the outcome is classified as follows:

- ``AssertionError`` -> fail
- ``TimeoutError`` (including :class:`WaitTimeoutError`) -> fail
- ``unittest.SkipTest`` -> skip
- any other exception -> error
- per-test timeout exceeded -> fail, "timed out after Ns"
- run cancelled while the test was in flight -> error with the reason
"""

import functools
import inspect
import logging
import threading
import time
import traceback
import unittest
from typing import Any, Callable, Dict, List, Optional, Tuple

from launch_harness.report.results import Outcome, Phase, TestCaseResult
from launch_harness.runner.context import RunCancellation, TestContext

logger = logging.getLogger(__name__)

ContextFactory = Callable[[], TestContext]

NOT_RUN_REASON = "not run: suite cancelled"


def format_exception(err: Tuple) -> str:
    """``Type: message`` on the first line, then the traceback."""
    exc_type, exc_value, tb = err
    header = f"{exc_type.__name__}: {exc_value}".rstrip()
    trace = ''.join(traceback.format_exception(exc_type, exc_value, tb))
    return f"{header}\n\n{trace}".rstrip()


def bind_test_arguments(test: unittest.TestCase, available: Dict[str, Any]) -> None:
    """
    Bind harness values to the test method's parameters by name.

    A method declaring ``proc_output`` gets the run's output streams,
    ``proc_info`` the exit codes, and so on. Other parameters are left
    alone.
    """
    method = getattr(test, test._testMethodName)
    try:
        params = inspect.signature(method).parameters
    except (TypeError, ValueError):
        return
    kwargs = {name: available[name] for name in params if name in available}
    if not kwargs:
        return
    bound = functools.partial(method, **kwargs)
    functools.update_wrapper(bound, method)
    setattr(test, test._testMethodName, bound)


def describe_test(test: unittest.TestCase) -> Tuple[str, str]:
    """(classname, method name) of a test case."""
    return type(test).__qualname__, test._testMethodName


class ClassifyingResult(unittest.TestResult):
    """unittest result that keeps the outcome of a single test."""

    def __init__(self):
        super().__init__()
        self.outcome: Optional[Outcome] = None
        self.detail: Optional[str] = None

    def _record(self, outcome: Outcome, detail: Optional[str] = None) -> None:
        # A subtest failure must not be overwritten by the final success.
        if self.outcome in (Outcome.FAIL, Outcome.ERROR):
            return
        self.outcome = outcome
        self.detail = detail

    def addSuccess(self, test):
        super().addSuccess(test)
        self._record(Outcome.PASS)

    def addFailure(self, test, err):
        super().addFailure(test, err)
        self._record(Outcome.FAIL, format_exception(err))

    def addError(self, test, err):
        super().addError(test, err)
        if issubclass(err[0], TimeoutError):
            self._record(Outcome.FAIL, format_exception(err))
        else:
            self._record(Outcome.ERROR, format_exception(err))

    def addSkip(self, test, reason):
        super().addSkip(test, reason)
        self._record(Outcome.SKIP, reason)

    def addExpectedFailure(self, test, err):
        super().addExpectedFailure(test, err)
        self._record(Outcome.PASS)

    def addUnexpectedSuccess(self, test):
        super().addUnexpectedSuccess(test)
        self._record(Outcome.FAIL, "unexpected success")

    def addSubTest(self, test, subtest, err):
        super().addSubTest(test, subtest, err)
        if err is None:
            return
        if issubclass(err[0], (test.failureException, TimeoutError)):
            self._record(Outcome.FAIL, f"{subtest}: {format_exception(err)}")
        else:
            self._record(Outcome.ERROR, f"{subtest}: {format_exception(err)}")


class PhaseRunner:
    """
    Runs the test cases of one phase in order.

    A failing, erroring or timed-out test never stops the following ones.
    Once the run is cancelled, remaining tests are recorded as skipped.
    """

    phase: Phase = Phase.ACTIVE

    def __init__(
        self,
        make_context: ContextFactory,
        test_timeout: float = 60.0,
        cancellation: Optional[RunCancellation] = None
    ):
        self._make_context = make_context
        self.test_timeout = test_timeout
        self.cancellation = cancellation or RunCancellation()
        self.in_flight: Optional[str] = None

    def _result(self, test: unittest.TestCase, outcome: Outcome,
                duration: float = 0.0, detail: Optional[str] = None) -> TestCaseResult:
        classname, name = describe_test(test)
        return TestCaseResult(
            name=name,
            classname=classname,
            phase=self.phase,
            outcome=outcome,
            duration=duration,
            detail=detail,
        )

    def run(self, tests: List[unittest.TestCase]) -> List[TestCaseResult]:
        """Run ``tests`` sequentially, grouping class fixtures per class."""
        results: List[TestCaseResult] = []
        index = 0
        while index < len(tests):
            cls = type(tests[index])
            group = []
            while index < len(tests) and type(tests[index]) is cls:
                group.append(tests[index])
                index += 1
            results.extend(self._run_class(cls, group))
        return results

    def _run_class(self, cls: type, tests: List[unittest.TestCase]) -> List[TestCaseResult]:
        if self.cancellation.cancelled:
            return [self._result(t, Outcome.SKIP, detail=NOT_RUN_REASON) for t in tests]

        try:
            cls.setUpClass()
        except unittest.SkipTest as e:
            return [self._result(t, Outcome.SKIP, detail=str(e)) for t in tests]
        except Exception as e:
            detail = f"setUpClass failed: {format_exception((type(e), e, e.__traceback__))}"
            logger.error("setUpClass of %s failed: %s", cls.__qualname__, e)
            return [self._result(t, Outcome.ERROR, detail=detail) for t in tests]

        results = [self.run_test(test) for test in tests]

        try:
            cls.tearDownClass()
        except Exception as e:
            logger.error("tearDownClass of %s failed: %s", cls.__qualname__, e)
        return results

    def run_test(self, test: unittest.TestCase) -> TestCaseResult:
        """Run a single test in a fresh context with the per-test timeout."""
        if self.cancellation.cancelled:
            return self._result(test, Outcome.SKIP, detail=NOT_RUN_REASON)

        classname, name = describe_test(test)
        self.in_flight = f"{classname}.{name}"
        context = self._make_context()
        # Per-test cancellation so abandoned tests stop waiting.
        test_cancel = RunCancellation()
        context.use_cancellation(test_cancel)
        bind_test_arguments(test, context.arguments())

        result = ClassifyingResult()
        worker = threading.Thread(
            target=test.run, args=(result,), name=f"test-{name}", daemon=True)

        start = time.monotonic()
        worker.start()
        deadline = start + self.test_timeout
        while worker.is_alive():
            remaining = deadline - time.monotonic()
            if remaining <= 0 or self.cancellation.cancelled:
                break
            worker.join(min(remaining, 0.05))
        duration = time.monotonic() - start

        try:
            if self.cancellation.cancelled:
                test_cancel.cancel(self.cancellation.reason or "cancelled")
                worker.join(1.0)
                reason = self.cancellation.reason or "cancelled"
                logger.error("Test %s cancelled: %s", self.in_flight, reason)
                return self._result(test, Outcome.ERROR, duration, f"cancelled: {reason}")

            if worker.is_alive():
                test_cancel.cancel("test timeout")
                logger.error("Test %s timed out after %.1fs", self.in_flight, self.test_timeout)
                return self._result(
                    test, Outcome.FAIL, duration,
                    f"timed out after {self.test_timeout:g}s")

            if result.outcome is None:
                return self._result(test, Outcome.ERROR, duration, "test produced no result")
            return self._result(test, result.outcome, duration, result.detail)
        finally:
            context.teardown()
            self.in_flight = None
