# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Thread-safe, bounded message collector.

A collector subscribes to a topic through a message source and keeps the
most recent ``capacity`` messages for later inspection during tests.
Two sources are provided:

- :class:`NodeSource` subscribes through an rclpy-style node
- :class:`OutputTopicSource` reads JSON lines printed by workers,
  ``{"topic": "/chatter", "data": ...}``
"""

import json
import threading
from collections import deque
from typing import Any, Callable, Deque, Generic, List, Optional, Type, TypeVar

from launch_harness.core.output_stream import ProcessOutput
from launch_harness.core.wait_helpers import wait_for_duration, wait_until_condition

MsgT = TypeVar('MsgT')

DEFAULT_CAPACITY = 100


class NodeSource:
    """
    Message source backed by a ROS 2 node.

    Only ``create_subscription`` / ``destroy_subscription`` are used, so any
    object with the rclpy node interface works.
    """

    def __init__(self, node: Any, qos_depth: int = DEFAULT_CAPACITY):
        self._node = node
        self._qos_depth = qos_depth

    def subscribe(self, topic: str, callback: Callable[[Any], None],
                  msg_type: Optional[type] = None) -> Any:
        if msg_type is None:
            raise ValueError("NodeSource needs a message type to subscribe")
        return self._node.create_subscription(
            msg_type, topic, callback, self._qos_depth)

    def unsubscribe(self, handle: Any) -> None:
        self._node.destroy_subscription(handle)


class OutputTopicSource:
    """
    Message source reading JSON lines from worker output.

    Lines that are not JSON objects with a ``topic`` key are ignored. When a
    message type is given, the ``data`` payload is passed to it as keyword
    arguments (dict payload) or as the single argument.
    """

    def __init__(self, proc_output: ProcessOutput, process: Optional[str] = None):
        self._proc_output = proc_output
        self._process = process

    def subscribe(self, topic: str, callback: Callable[[Any], None],
                  msg_type: Optional[type] = None) -> int:
        def on_line(process: str, stream: str, line: str) -> None:
            if self._process is not None and process != self._process:
                return
            if stream != 'stdout' or not line.startswith('{'):
                return
            try:
                record = json.loads(line)
            except ValueError:
                return
            if not isinstance(record, dict) or record.get('topic') != topic:
                return
            data = record.get('data')
            if msg_type is not None:
                data = msg_type(**data) if isinstance(data, dict) else msg_type(data)
            callback(data)

        return self._proc_output.add_line_listener(on_line)

    def unsubscribe(self, handle: int) -> None:
        self._proc_output.remove_line_listener(handle)


class MessageCollector(Generic[MsgT]):
    """
    Bounded, thread-safe message collector for one topic.

    When more than ``capacity`` messages arrive the oldest are dropped;
    ``received`` keeps counting every message seen.

    Example:
        collector = MessageCollector(source, '/chatter', capacity=200)
        messages = collector.observe(2.0)
        assert len(messages) > 100
    """

    def __init__(
        self,
        source: Any,
        topic: str,
        msg_type: Optional[Type[MsgT]] = None,
        capacity: int = DEFAULT_CAPACITY,
        callback: Optional[Callable[[MsgT], None]] = None,
        cancel_event: Optional[threading.Event] = None
    ):
        """
        Create a message collector.

        Args:
            source: Message source with subscribe/unsubscribe
            topic: Topic to subscribe to
            msg_type: Optional message type class
            capacity: Maximum number of messages kept
            callback: Optional callback invoked on each message
            cancel_event: Event that ends waits early
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._source = source
        self._topic = topic
        self._msg_type = msg_type
        self._callback = callback
        self._cancel_event = cancel_event
        self._messages: Deque[MsgT] = deque(maxlen=capacity)
        self._received = 0
        self._lock = threading.Lock()
        self._subscription = source.subscribe(topic, self._on_message, msg_type)

    def _on_message(self, msg: MsgT) -> None:
        with self._lock:
            self._messages.append(msg)
            self._received += 1

        if self._callback is not None:
            self._callback(msg)

    def get_messages(self) -> List[MsgT]:
        """Copy of the messages currently held."""
        with self._lock:
            return list(self._messages)

    def get_latest(self) -> Optional[MsgT]:
        with self._lock:
            return self._messages[-1] if self._messages else None

    def count(self) -> int:
        with self._lock:
            return len(self._messages)

    @property
    def received(self) -> int:
        """Total number of messages seen, including dropped ones."""
        with self._lock:
            return self._received

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._received - len(self._messages)

    @property
    def capacity(self) -> int:
        return self._messages.maxlen

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()

    def wait_for_messages(self, min_count: int, timeout_sec: float) -> bool:
        """
        Block until at least ``min_count`` messages are held.

        Returns:
            True if the count was reached, False on timeout or cancellation
        """
        return wait_until_condition(
            lambda: self.count() >= min_count,
            timeout_sec,
            cancel_event=self._cancel_event,
        )

    def observe(self, window_sec: float) -> List[MsgT]:
        """
        Collect for a fixed observation window and return the messages.

        Returns early, with whatever arrived so far, when the run is
        cancelled.
        """
        wait_for_duration(window_sec, self._cancel_event)
        return self.get_messages()

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def msg_type(self) -> Optional[Type[MsgT]]:
        return self._msg_type

    @property
    def active(self) -> bool:
        return self._subscription is not None

    def destroy(self) -> None:
        """
        Release the subscription.

        Safe to call multiple times; subsequent calls are no-ops.
        Does not clear collected messages.
        """
        if self._subscription is not None:
            self._source.unsubscribe(self._subscription)
            self._subscription = None
