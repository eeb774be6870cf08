# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""Worker process lifecycle and suite launching."""

from launch_harness.launcher.worker import WorkerSpec, WorkerState, WorkerProcess
from launch_harness.launcher.launcher import SuiteDescription, ProcessInfo, TestLauncher

__all__ = [
    'WorkerSpec',
    'WorkerState',
    'WorkerProcess',
    'SuiteDescription',
    'ProcessInfo',
    'TestLauncher',
]
