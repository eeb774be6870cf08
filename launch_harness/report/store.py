# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""Persisting run reports into the results directory."""

import re
from pathlib import Path

from launch_harness.report.native import write_native
from launch_harness.report.results import RunReport
from launch_harness.report.xunit import write_xunit

_UNSAFE = re.compile(r'[^A-Za-z0-9_.-]+')


def report_path(results_dir: Path, report: RunReport, report_format: str) -> Path:
    """
    Path of the report file for one run.

    Layout: ``<results_dir>/<suite>/<suite>_d<id>_<timestamp>.<ext>``, unique
    per run because concurrent runs hold different isolation ids.
    """
    suite = _UNSAFE.sub('_', report.suite) or 'suite'
    stamp = report.timestamp.strftime('%Y%m%d-%H%M%S-%f')
    domain = f"_d{report.isolation_id}" if report.isolation_id is not None else ''
    ext = 'xml' if report_format == 'xunit' else 'json'
    return Path(results_dir) / suite / f"{suite}{domain}_{stamp}.{ext}"


def persist_report(report: RunReport, results_dir: Path, report_format: str = 'xunit') -> Path:
    """Write the report in the requested format and return its path."""
    path = report_path(results_dir, report, report_format)
    if report_format == 'xunit':
        return write_xunit(report, path)
    if report_format == 'json':
        return write_native(report, path)
    raise ValueError(f"Unknown report format: {report_format!r}")
