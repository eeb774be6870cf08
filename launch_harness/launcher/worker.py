# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Worker processes started by the test launcher.

A worker is a long-running process under test (typically a robot node).
Its stdout and stderr are read line by line on background threads into
:class:`OutputStream` buffers.
"""

import logging
import os
import signal
import subprocess
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, IO, List, Mapping, Optional

from launch_harness.core.output_stream import OutputStream, ProcessOutput
from launch_harness.errors import LaunchError

logger = logging.getLogger(__name__)


@dataclass
class WorkerSpec:
    """Declarative description of one worker."""

    name: str
    """Unique worker name within the run."""

    cmd: List[str]
    """Command line (executable and arguments)."""

    env: Dict[str, str] = field(default_factory=dict)
    """Extra environment variables on top of the isolation environment."""

    cwd: Optional[str] = None
    """Working directory."""


class WorkerState(Enum):
    """Lifecycle state of a worker."""
    STARTING = "starting"
    RUNNING = "running"
    TERMINATED = "terminated"


class WorkerProcess:
    """
    One running worker.

    Owned by the launcher for its whole lifetime. Moves through
    ``starting -> running -> terminated``; the exit code is known once
    terminated.
    """

    def __init__(self, spec: WorkerSpec, proc_output: ProcessOutput):
        self.spec = spec
        self.state = WorkerState.STARTING
        self._process: Optional[subprocess.Popen] = None
        self._exit_code: Optional[int] = None
        self._readers: List[threading.Thread] = []
        self._streams = proc_output.create_streams(spec.name)

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process is not None else None

    @property
    def exit_code(self) -> Optional[int]:
        return self._exit_code

    @property
    def stdout(self) -> OutputStream:
        return self._streams['stdout']

    @property
    def stderr(self) -> OutputStream:
        return self._streams['stderr']

    def start(self, base_env: Mapping[str, str]) -> None:
        """
        Spawn the process in its own process group.

        Raises:
            LaunchError: If the process cannot be spawned
        """
        if self.state is not WorkerState.STARTING:
            raise LaunchError(f"Worker {self.name!r} was already started")

        env = dict(base_env)
        env.update(self.spec.env)

        try:
            self._process = subprocess.Popen(
                self.spec.cmd,
                env=env,
                cwd=self.spec.cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors='replace',
                start_new_session=True,  # own process group for cleanup
            )
        except (OSError, ValueError) as e:
            self._mark_terminated(None)
            raise LaunchError(f"Failed to start worker {self.name!r}: {e}") from e

        for pipe, stream in ((self._process.stdout, self.stdout),
                             (self._process.stderr, self.stderr)):
            reader = threading.Thread(
                target=self._pump,
                args=(pipe, stream),
                name=f"{self.name}-{stream.stream}",
                daemon=True,
            )
            reader.start()
            self._readers.append(reader)

        self.state = WorkerState.RUNNING
        logger.info("Started worker %s (pid %d)", self.name, self._process.pid)

    @staticmethod
    def _pump(pipe: IO[str], stream: OutputStream) -> None:
        try:
            for line in pipe:
                stream.append(line.rstrip('\r\n'))
        finally:
            pipe.close()
            stream.close()

    def poll(self) -> Optional[int]:
        """Return the exit code if the process has exited, without blocking."""
        if self._process is None:
            return self._exit_code
        return self._process.poll()

    def is_running(self) -> bool:
        return self.state is WorkerState.RUNNING and self.poll() is None

    def stop(self, timeout_sec: float = 10.0) -> Optional[int]:
        """
        Stop the worker.

        Sends SIGINT to the process group first, then SIGKILL if the worker
        is still alive after ``timeout_sec``.

        Returns:
            The exit code
        """
        if self.state is WorkerState.TERMINATED:
            return self._exit_code
        if self._process is None:
            self._mark_terminated(None)
            return None

        if self._process.poll() is None:
            self._signal_group(signal.SIGINT)
            try:
                self._process.wait(timeout=timeout_sec)
            except subprocess.TimeoutExpired:
                logger.warning("Worker %s ignored SIGINT, killing it", self.name)
                return self.kill()

        return self._finish()

    def kill(self) -> Optional[int]:
        """Forcefully terminate the worker's process group."""
        if self._process is None or self.state is WorkerState.TERMINATED:
            return self._exit_code
        if self._process.poll() is None:
            self._signal_group(signal.SIGKILL)
        return self._finish()

    def _signal_group(self, sig: int) -> None:
        try:
            os.killpg(os.getpgid(self._process.pid), sig)
        except ProcessLookupError:
            pass

    def _finish(self) -> Optional[int]:
        code = self._process.wait()
        for reader in self._readers:
            reader.join(timeout=5.0)
        self._mark_terminated(code)
        return code

    def _mark_terminated(self, code: Optional[int]) -> None:
        if self.state is not WorkerState.TERMINATED:
            self._exit_code = code
            self.state = WorkerState.TERMINATED
            logger.info("Worker %s terminated with exit code %s", self.name, code)
            if self._process is None:
                self.stdout.close()
                self.stderr.close()

    def __repr__(self) -> str:
        return f"WorkerProcess({self.name!r}, state={self.state.value}, exit_code={self._exit_code})"
