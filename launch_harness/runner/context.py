# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Per-test fixture handed to test routines.

Every test gets a fresh :class:`TestContext`; collectors created through it
are destroyed when the test ends, so no subscription leaks into the next
test.
"""

import threading
from typing import Any, Dict, List, Optional, Type

from launch_harness.core.message_collector import (
    DEFAULT_CAPACITY,
    MessageCollector,
    OutputTopicSource,
)
from launch_harness.core.output_stream import ProcessOutput
from launch_harness.core.test_isolation import IsolationConfig
from launch_harness.core.wait_helpers import wait_for_duration
from launch_harness.launcher.launcher import ProcessInfo
from launch_harness.report.results import Phase


class RunCancellation:
    """Cancellation flag of a run, with the reason it was cancelled."""

    def __init__(self):
        self.event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str) -> None:
        if not self.event.is_set():
            self.reason = reason
            self.event.set()

    @property
    def cancelled(self) -> bool:
        return self.event.is_set()


class TestContext:
    """
    Fixture state of a single test.

    Test methods receive it by declaring a ``context`` parameter:

        def test_chatter_rate(self, context):
            collector = context.create_message_collector('/chatter', capacity=200)
            messages = collector.observe(2.0)
            self.assertGreater(len(messages), 100)
    """

    __test__ = False

    def __init__(
        self,
        phase: Phase,
        proc_output: ProcessOutput,
        proc_info: ProcessInfo,
        isolation: IsolationConfig,
        cancellation: Optional[RunCancellation] = None,
        message_source: Any = None
    ):
        self.phase = phase
        self.proc_output = proc_output
        self.proc_info = proc_info
        self.isolation = isolation
        self.cancellation = cancellation or RunCancellation()
        self._message_source = message_source
        self._collectors: List[MessageCollector] = []

    def create_message_collector(
        self,
        topic: str,
        msg_type: Optional[Type] = None,
        capacity: int = DEFAULT_CAPACITY,
        process: Optional[str] = None,
        source: Any = None
    ) -> MessageCollector:
        """
        Subscribe a bounded collector to ``topic`` for this test only.

        Args:
            topic: Topic name
            msg_type: Optional message type
            capacity: Maximum number of messages kept
            process: Only read messages printed by this worker
            source: Message source overriding the run's default
        """
        if source is None:
            if process is None and self._message_source is not None:
                source = self._message_source
            else:
                source = OutputTopicSource(self.proc_output, process)
        collector = MessageCollector(
            source,
            topic,
            msg_type=msg_type,
            capacity=capacity,
            cancel_event=self.cancellation.event,
        )
        self._collectors.append(collector)
        return collector

    @property
    def collectors(self) -> List[MessageCollector]:
        return list(self._collectors)

    def wait_for_duration(self, duration_sec: float) -> bool:
        """Wait, returning False early if the run is cancelled."""
        return wait_for_duration(duration_sec, self.cancellation.event)

    def arguments(self) -> Dict[str, Any]:
        """Values test methods can request by parameter name."""
        return {
            'context': self,
            'proc_output': self.proc_output,
            'proc_info': self.proc_info,
            'isolation': self.isolation,
        }

    def use_cancellation(self, cancellation: RunCancellation) -> None:
        """Make every wait of this test end once ``cancellation`` fires."""
        self.cancellation = cancellation
        self.proc_output = self.proc_output.with_cancel_event(cancellation.event)

    def teardown(self) -> None:
        """Release every subscription created by this test."""
        for collector in self._collectors:
            collector.destroy()
        self._collectors.clear()
