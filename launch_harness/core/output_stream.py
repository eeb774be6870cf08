# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Captured output of worker processes.

Every worker gets one :class:`OutputStream` per standard stream. All streams
of a run share a condition variable so a test can wait for a line on any
of them.
"""

import copy
import itertools
import threading
import time
from typing import Callable, Dict, List, Optional, Pattern, Union

from launch_harness.errors import SuiteCancelledError, WaitTimeoutError

Expected = Union[str, Pattern[str]]
LineListener = Callable[[str, str, str], None]

STREAMS = ('stdout', 'stderr')


def _matches(expected: Expected, line: str) -> bool:
    if isinstance(expected, str):
        return expected in line
    return expected.search(line) is not None


class OutputStream:
    """Lines captured from one stream of one worker."""

    def __init__(self, owner: 'ProcessOutput', process: str, stream: str):
        self._owner = owner
        self.process = process
        self.stream = stream
        self._lines: List[str] = []
        self._closed = False

    def append(self, line: str) -> None:
        """Record a line (without trailing newline) and wake waiters."""
        with self._owner.condition:
            self._lines.append(line)
            self._owner.condition.notify_all()
        self._owner._dispatch(self.process, self.stream, line)

    def close(self) -> None:
        """Mark end of stream."""
        with self._owner.condition:
            self._closed = True
            self._owner.condition.notify_all()

    @property
    def closed(self) -> bool:
        return self._closed

    def lines(self) -> List[str]:
        with self._owner.condition:
            return list(self._lines)

    def text(self) -> str:
        return '\n'.join(self.lines())

    def find(self, expected: Expected) -> Optional[str]:
        """Return the first captured line matching ``expected``."""
        with self._owner.condition:
            for line in self._lines:
                if _matches(expected, line):
                    return line
        return None


class ProcessOutput:
    """
    Output streams of every worker in a run.

    Passed to test routines as ``proc_output``.

    Example:
        def test_node_starts(self, proc_output):
            proc_output.assert_wait_for('Publishing', process='talker', timeout=5)
    """

    def __init__(self, cancel_event: Optional[threading.Event] = None):
        self.condition = threading.Condition()
        self.cancel_event = cancel_event or threading.Event()
        self._streams: Dict[str, Dict[str, OutputStream]] = {}
        self._listeners: Dict[int, LineListener] = {}
        self._handles = itertools.count()
        self._listener_lock = threading.Lock()

    def create_streams(self, process: str) -> Dict[str, OutputStream]:
        """Create the stdout/stderr streams of a worker."""
        with self.condition:
            if process in self._streams:
                raise ValueError(f"Duplicate worker name: {process}")
            streams = {name: OutputStream(self, process, name) for name in STREAMS}
            self._streams[process] = streams
            return streams

    @property
    def processes(self) -> List[str]:
        with self.condition:
            return list(self._streams)

    def get(self, process: str, stream: str = 'stdout') -> OutputStream:
        with self.condition:
            try:
                return self._streams[process][stream]
            except KeyError:
                raise KeyError(f"No {stream} captured for worker {process!r}") from None

    def select(
        self,
        process: Optional[str] = None,
        stream: Optional[str] = None
    ) -> List[OutputStream]:
        """Streams matching an optional worker name and stream name."""
        with self.condition:
            if process is not None and process not in self._streams:
                raise KeyError(f"Unknown worker {process!r}")
            names = [process] if process is not None else list(self._streams)
            kinds = [stream] if stream is not None else list(STREAMS)
            return [self._streams[n][k] for n in names for k in kinds]

    def with_cancel_event(self, cancel_event: threading.Event) -> 'ProcessOutput':
        """
        View of the same streams whose waits end when ``cancel_event`` is set.

        The view shares captured lines, listeners and the condition variable
        with this object; only cancellation differs.
        """
        view = copy.copy(self)
        view.cancel_event = cancel_event
        return view

    def add_line_listener(self, listener: LineListener) -> int:
        """
        Call ``listener(process, stream, line)`` for every new line.

        Returns:
            Handle for :meth:`remove_line_listener`
        """
        with self._listener_lock:
            handle = next(self._handles)
            self._listeners[handle] = listener
            return handle

    def remove_line_listener(self, handle: int) -> None:
        with self._listener_lock:
            self._listeners.pop(handle, None)

    def _dispatch(self, process: str, stream: str, line: str) -> None:
        with self._listener_lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            listener(process, stream, line)

    def wait_for(
        self,
        expected: Expected,
        process: Optional[str] = None,
        stream: Optional[str] = None,
        timeout: float = 10.0
    ) -> Optional[str]:
        """
        Wait until a line matching ``expected`` has been captured.

        Lines captured before the call count too. Plain strings match as
        substrings, compiled patterns with ``search``.

        Returns:
            The matching line, or None on timeout, cancellation, or once
            every selected stream has closed without a match
        """
        streams = self.select(process, stream)
        deadline = time.monotonic() + timeout

        with self.condition:
            while True:
                for candidate in streams:
                    for line in candidate._lines:
                        if _matches(expected, line):
                            return line
                if all(s.closed for s in streams) or self.cancel_event.is_set():
                    return None
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
                self.condition.wait(min(remaining, 0.1))

    def assert_wait_for(
        self,
        expected: Expected,
        process: Optional[str] = None,
        stream: Optional[str] = None,
        timeout: float = 10.0
    ) -> str:
        """
        Like :meth:`wait_for`, but raise when nothing matches.

        Raises:
            WaitTimeoutError: If no matching line appears in time
            SuiteCancelledError: If the run was cancelled while waiting
        """
        line = self.wait_for(expected, process=process, stream=stream, timeout=timeout)
        if line is None:
            if self.cancel_event.is_set():
                raise SuiteCancelledError(f"wait for {expected!r} cancelled")
            where = process or 'any worker'
            if stream:
                where = f"{where} ({stream})"
            pattern = getattr(expected, 'pattern', expected)
            raise WaitTimeoutError(
                f"{pattern!r} not found in output of {where} within {timeout}s"
            )
        return line
