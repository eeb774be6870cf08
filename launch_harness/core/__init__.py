# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""Isolation, output capture and message collection."""

from launch_harness.core.test_isolation import (
    IsolationConfig,
    IsolationLease,
    reserve_isolation_id,
    acquire_isolation,
    get_test_isolation_config,
    build_isolation_env,
)
from launch_harness.core.output_stream import OutputStream, ProcessOutput
from launch_harness.core.message_collector import (
    MessageCollector,
    NodeSource,
    OutputTopicSource,
)
from launch_harness.core.wait_helpers import wait_for_duration, wait_until_condition
