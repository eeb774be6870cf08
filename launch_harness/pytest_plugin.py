# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Pytest fixtures for code that launches workers from plain pytest tests.

Enable in a conftest.py:

    pytest_plugins = ['launch_harness.pytest_plugin']

    def test_talker(isolation_lease, results_dir):
        orchestrator = RunOrchestrator(
            HarnessConfig(results_dir=results_dir), isolation_lease.config)
        ...
"""

from pathlib import Path
from typing import Iterator

import pytest

from launch_harness.core.test_isolation import IsolationLease, reserve_isolation_id


@pytest.fixture
def isolation_lease() -> Iterator[IsolationLease]:
    """
    Reserve an isolation id for one test.

    The id stays reserved until the test finishes, so tests running in
    parallel pytest workers never share a ROS_DOMAIN_ID.
    """
    lease = reserve_isolation_id()
    yield lease
    lease.release()


@pytest.fixture
def results_dir(tmp_path) -> Path:
    """Empty directory for run reports, removed with the test's tmp_path."""
    path = tmp_path / 'test_results'
    path.mkdir()
    return path
