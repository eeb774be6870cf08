# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Harness configuration.

Defaults are overridden by environment variables, which are in turn
overridden by command-line flags.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

RESULTS_DIR_ENV = 'LAUNCH_HARNESS_RESULTS_DIR'
TEST_TIMEOUT_ENV = 'LAUNCH_HARNESS_TEST_TIMEOUT'
SUITE_TIMEOUT_ENV = 'LAUNCH_HARNESS_SUITE_TIMEOUT'
REPORT_FORMAT_ENV = 'LAUNCH_HARNESS_REPORT_FORMAT'

REPORT_FORMATS = ('xunit', 'json')


@dataclass(frozen=True)
class HarnessConfig:
    """Settings shared by ``run-tests`` and ``show-results``."""

    results_dir: Path = Path('test_results')
    """Directory where run reports are persisted and read back."""

    test_timeout: float = 60.0
    """Per-test timeout in seconds."""

    suite_timeout: float = 600.0
    """Global timeout for a whole run in seconds."""

    shutdown_timeout: float = 10.0
    """Grace period between SIGINT and SIGKILL when stopping workers."""

    report_format: str = 'xunit'
    """Format of the persisted run report ('xunit' or 'json')."""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'HarnessConfig':
        """
        Build a config from environment variables.

        Unset variables keep the dataclass defaults.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        environ = os.environ if environ is None else environ
        config = cls()

        if environ.get(RESULTS_DIR_ENV):
            config = replace(config, results_dir=Path(environ[RESULTS_DIR_ENV]))
        if environ.get(TEST_TIMEOUT_ENV):
            config = replace(config, test_timeout=_positive_float(
                TEST_TIMEOUT_ENV, environ[TEST_TIMEOUT_ENV]))
        if environ.get(SUITE_TIMEOUT_ENV):
            config = replace(config, suite_timeout=_positive_float(
                SUITE_TIMEOUT_ENV, environ[SUITE_TIMEOUT_ENV]))
        if environ.get(REPORT_FORMAT_ENV):
            config = replace(config, report_format=environ[REPORT_FORMAT_ENV])

        config.validate()
        return config

    def with_overrides(self, **overrides) -> 'HarnessConfig':
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        config = replace(self, **changes)
        config.validate()
        return config

    def validate(self) -> None:
        if self.report_format not in REPORT_FORMATS:
            raise ValueError(
                f"report format must be one of {', '.join(REPORT_FORMATS)}, "
                f"got {self.report_format!r}"
            )
        if self.test_timeout <= 0 or self.suite_timeout <= 0:
            raise ValueError("timeouts must be positive")


def _positive_float(name: str, value: str) -> float:
    try:
        parsed = float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return parsed
