# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Wait helpers for bounded observation windows.

The waits in a test routine are the only places a run blocks, so every
helper returns early once the run's cancellation event is set.
"""

import threading
import time
from typing import Callable, Optional


def wait_for_duration(
    duration_sec: float,
    cancel_event: Optional[threading.Event] = None
) -> bool:
    """
    Block for a fixed duration.

    Args:
        duration_sec: How long to wait (seconds)
        cancel_event: Optional event that ends the wait early

    Returns:
        True if the full duration elapsed, False if cancelled
    """
    if cancel_event is None:
        time.sleep(max(duration_sec, 0.0))
        return True
    return not cancel_event.wait(max(duration_sec, 0.0))


def wait_until_condition(
    condition: Callable[[], bool],
    timeout_sec: float,
    poll_interval_sec: float = 0.01,
    cancel_event: Optional[threading.Event] = None
) -> bool:
    """
    Poll until a condition is met or timeout occurs.

    Args:
        condition: Function returning True when condition is met
        timeout_sec: Maximum time to wait (seconds)
        poll_interval_sec: Interval between checks (seconds)
        cancel_event: Optional event that ends the wait early

    Returns:
        True if condition was met, False on timeout or cancellation
    """
    deadline = time.monotonic() + timeout_sec
    while True:
        if condition():
            return True
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        if not wait_for_duration(min(poll_interval_sec, remaining), cancel_event):
            return condition()
