# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures for launch_harness unit tests."""

import sys
from pathlib import Path

import pytest

from launch_harness.core.output_stream import ProcessOutput
from launch_harness.core.test_isolation import IsolationConfig
from launch_harness.launcher.launcher import ProcessInfo
from launch_harness.pytest_plugin import isolation_lease, results_dir  # noqa: F401
from launch_harness.report.results import Phase
from launch_harness.runner.context import TestContext

SUITES_DIR = Path(__file__).parent / 'suites'


@pytest.fixture
def suites_dir() -> Path:
    """Directory holding the suite files used by end-to-end tests."""
    return SUITES_DIR


@pytest.fixture
def python_worker(tmp_path):
    """
    Factory writing a worker script to tmp_path.

    Returns the command line running it with the current interpreter.
    """
    def make(name: str, source: str):
        script = tmp_path / f"{name}.py"
        script.write_text(source)
        return [sys.executable, '-u', str(script)]
    return make


@pytest.fixture
def context_factory():
    """Factory for standalone TestContext objects without any worker."""
    proc_output = ProcessOutput()

    def make():
        return TestContext(
            phase=Phase.ACTIVE,
            proc_output=proc_output,
            proc_info=ProcessInfo([]),
            isolation=IsolationConfig(domain_id=7),
        )
    make.proc_output = proc_output
    return make
