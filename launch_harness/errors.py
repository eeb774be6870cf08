# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Exception hierarchy for launch_harness.

Assertion failures inside test routines are plain ``AssertionError`` and are
recorded as ``fail``. Any exception that is neither an assertion failure nor
a ``TimeoutError`` is recorded as ``error``.
"""


class HarnessError(Exception):
    """Base class for all harness errors."""


class LaunchError(HarnessError):
    """A worker process could not be started. Fatal to the run."""


class WaitTimeoutError(HarnessError, TimeoutError):
    """A bounded wait on output or messages expired."""


class SuiteCancelledError(HarnessError):
    """The global suite timeout expired while a test was running."""


class SuiteLoadError(HarnessError):
    """A suite file could not be imported or is missing its description."""


class ReportParseError(HarnessError):
    """A persisted report file is missing, unreadable or malformed."""

    def __init__(self, path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
