# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Command-line entry points.

Provides commands:
- run-tests: Run one isolated suite (or several in parallel)
- show-results: Summarize persisted run reports
"""

import logging


def configure_logging(debug: bool = False) -> None:
    """Route library log records to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
