# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Test launcher for starting and stopping the workers of a run.

Starts every worker described by a :class:`SuiteDescription`, waits the
readiness delay and then signals, exactly once, that active tests may
begin.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional

from launch_harness.core.output_stream import ProcessOutput
from launch_harness.core.test_isolation import IsolationConfig, build_isolation_env
from launch_harness.core.wait_helpers import wait_for_duration
from launch_harness.errors import LaunchError
from launch_harness.launcher.worker import WorkerProcess, WorkerSpec, WorkerState

logger = logging.getLogger(__name__)


@dataclass
class SuiteDescription:
    """What a suite needs running before its active tests start."""

    workers: List[WorkerSpec] = field(default_factory=list)
    """Workers to start, in order."""

    ready_delay: float = 1.0
    """Seconds to wait after every worker started before tests begin."""


class ProcessInfo(Mapping[str, Optional[int]]):
    """
    Exit codes of the workers of a run, by worker name.

    Passed to post-shutdown tests as ``proc_info``.
    """

    def __init__(self, workers: List[WorkerProcess]):
        self._workers = {w.name: w for w in workers}

    def __getitem__(self, name: str) -> Optional[int]:
        return self._workers[name].exit_code

    def __iter__(self) -> Iterator[str]:
        return iter(self._workers)

    def __len__(self) -> int:
        return len(self._workers)

    def state(self, name: str) -> WorkerState:
        return self._workers[name].state

    @property
    def all_terminated(self) -> bool:
        return all(w.state is WorkerState.TERMINATED for w in self._workers.values())

    def __repr__(self) -> str:
        return f"ProcessInfo({dict(self)})"


class TestLauncher:
    """
    Starts the workers of one isolated run.

    Example:
        launcher = TestLauncher(isolation, proc_output)
        launcher.launch(SuiteDescription(
            workers=[WorkerSpec('talker', ['ros2', 'run', 'demo_nodes_py', 'talker'])],
            ready_delay=2.0,
        ))

        # Run active tests...

        launcher.shutdown()
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        isolation: IsolationConfig,
        proc_output: Optional[ProcessOutput] = None,
        base_env: Optional[Mapping[str, str]] = None
    ):
        self.isolation = isolation
        self.proc_output = proc_output or ProcessOutput()
        self._env = build_isolation_env(isolation, base_env)
        self._workers: List[WorkerProcess] = []
        self._launched = False
        self.ready = threading.Event()
        self._ready_signals = 0

    @property
    def workers(self) -> List[WorkerProcess]:
        return list(self._workers)

    @property
    def proc_info(self) -> ProcessInfo:
        return ProcessInfo(self._workers)

    @property
    def ready_signals(self) -> int:
        """How many times readiness was signalled (0 or 1)."""
        return self._ready_signals

    def launch(self, description: SuiteDescription) -> None:
        """
        Start every worker, wait the readiness delay, signal readiness.

        If the run is cancelled during the delay, readiness is not signalled.

        Raises:
            LaunchError: If any worker fails to start; workers already
                started are stopped first
        """
        if self._launched:
            raise LaunchError("Launcher has already launched its workers")
        self._launched = True

        try:
            for spec in description.workers:
                try:
                    worker = WorkerProcess(spec, self.proc_output)
                except ValueError as e:
                    raise LaunchError(str(e)) from e
                self._workers.append(worker)
                worker.start(self._env)
        except LaunchError:
            logger.error("Launch failed, stopping %d started worker(s)",
                         sum(1 for w in self._workers if w.state is WorkerState.RUNNING))
            self.kill_all()
            raise

        logger.info("Started %d worker(s) with %s=%d, waiting %.1fs for readiness",
                    len(self._workers), 'ROS_DOMAIN_ID', self.isolation.domain_id,
                    description.ready_delay)

        if wait_for_duration(description.ready_delay, self.proc_output.cancel_event):
            self._signal_ready()

    def _signal_ready(self) -> None:
        if not self.ready.is_set():
            self._ready_signals += 1
            self.ready.set()

    def wait_until_ready(self, timeout_sec: Optional[float] = None) -> bool:
        return self.ready.wait(timeout_sec)

    def shutdown(self, timeout_sec: float = 10.0) -> Dict[str, Optional[int]]:
        """
        Stop every worker (SIGINT, then SIGKILL after ``timeout_sec``).

        Returns:
            Exit code by worker name
        """
        for worker in self._workers:
            worker.stop(timeout_sec)
        return dict(self.proc_info)

    def kill_all(self) -> None:
        """Forcefully terminate every worker."""
        for worker in self._workers:
            if worker.state is WorkerState.TERMINATED:
                continue
            if worker.state is WorkerState.STARTING:
                worker.stop()
            else:
                worker.kill()

    def all_terminated(self) -> bool:
        return self.proc_info.all_terminated

    def __enter__(self) -> 'TestLauncher':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.kill_all()
