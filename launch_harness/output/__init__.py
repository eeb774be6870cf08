# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""Output formatting for the command-line tools."""

from launch_harness.output.console import Console

__all__ = ['Console']
