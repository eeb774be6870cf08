# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""Run reports: models, XUnit and native JSON codecs, aggregation."""

from launch_harness.report.results import (
    Phase,
    Outcome,
    TestCaseResult,
    RunReport,
    Summary,
    LoadedReport,
)
from launch_harness.report.xunit import render_xunit, write_xunit, parse_xunit
from launch_harness.report.native import write_native, parse_native
from launch_harness.report.aggregator import AggregationResult, ResultAggregator, load_report
from launch_harness.report.store import persist_report, report_path
