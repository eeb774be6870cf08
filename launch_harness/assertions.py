# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Assertion helpers for active and post-shutdown tests.

All helpers raise ``AssertionError`` so that a failing check is recorded as
``fail`` rather than ``error``.
"""

from typing import Iterable, Optional

from launch_harness.core.message_collector import MessageCollector
from launch_harness.core.output_stream import Expected, ProcessOutput
from launch_harness.launcher.launcher import ProcessInfo


def assert_exit_codes(
    proc_info: ProcessInfo,
    allowable_exit_codes: Iterable[int] = (0,),
    process: Optional[str] = None
) -> None:
    """
    Check that workers exited with an allowed code.

    Args:
        proc_info: Exit codes by worker name
        allowable_exit_codes: Codes counted as success
        process: Only check this worker

    Raises:
        AssertionError: Naming every worker with an unexpected code
    """
    allowed = set(allowable_exit_codes)
    names = [process] if process is not None else list(proc_info)

    offending = []
    for name in names:
        if name not in proc_info:
            raise AssertionError(f"Unknown worker {name!r}")
        code = proc_info[name]
        if code not in allowed:
            offending.append(f"{name} exited with code {code}")

    if offending:
        expected = ', '.join(str(c) for c in sorted(allowed))
        raise AssertionError(
            f"Unexpected exit code(s) (allowed: {expected}): {'; '.join(offending)}"
        )


def assert_output_contains(
    proc_output: ProcessOutput,
    expected: Expected,
    process: Optional[str] = None,
    stream: Optional[str] = None
) -> str:
    """
    Check captured output for a matching line, without waiting.

    Meant for post-shutdown tests, when no more output can arrive.

    Returns:
        The first matching line
    """
    for candidate in proc_output.select(process, stream):
        line = candidate.find(expected)
        if line is not None:
            return line
    where = process or 'any worker'
    pattern = getattr(expected, 'pattern', expected)
    raise AssertionError(f"{pattern!r} not found in output of {where}")


def assert_message_count(
    collector: MessageCollector,
    min_count: int,
    window_sec: float
) -> list:
    """
    Observe ``collector`` for ``window_sec`` and require ``min_count`` messages.

    Returns:
        The messages held at the end of the window
    """
    messages = collector.observe(window_sec)
    if len(messages) < min_count:
        raise AssertionError(
            f"Expected at least {min_count} message(s) on {collector.topic} "
            f"within {window_sec}s, got {len(messages)}"
        )
    return messages
