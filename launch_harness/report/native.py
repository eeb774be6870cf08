# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Native JSON run report.

Layout::

    {
      "format": "launch_harness/1",
      "suite": "test_talker",
      "isolation_id": 42,
      "timestamp": "2026-01-01T12:00:00",
      "duration": 3.2,
      "counts": {"tests": 2, "errors": 0, "failures": 1, "skipped": 0, "passed": 1},
      "cases": [
        {"name": "test_hello", "classname": "TestTalker", "phase": "active",
         "outcome": "fail", "duration": 1.0, "detail": "..."}
      ]
    }
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from launch_harness.errors import ReportParseError
from launch_harness.report.results import (
    LoadedReport,
    Outcome,
    Phase,
    RunReport,
    Summary,
    TestCaseResult,
)

FORMAT_TAG = 'launch_harness/1'

_COUNT_KEYS = ('tests', 'errors', 'failures', 'skipped')


def report_to_dict(report: RunReport) -> Dict[str, Any]:
    return {
        'format': FORMAT_TAG,
        'suite': report.suite,
        'isolation_id': report.isolation_id,
        'timestamp': report.timestamp.isoformat(timespec='seconds'),
        'duration': round(report.duration, 3),
        'counts': {
            'tests': report.tests,
            'errors': report.errors,
            'failures': report.failures,
            'skipped': report.skipped,
            'passed': report.passed,
        },
        'cases': [
            {
                'name': case.name,
                'classname': case.classname,
                'phase': case.phase.value,
                'outcome': case.outcome.value,
                'duration': round(case.duration, 3),
                'detail': case.detail,
            }
            for case in report.cases
        ],
    }


def write_native(report: RunReport, path: Path) -> Path:
    """Write ``report`` to ``path`` atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + '.tmp')
    with open(tmp, 'w', encoding='utf-8') as f:
        json.dump(report_to_dict(report), f, indent=2)
    tmp.replace(path)
    return path


def _parse_case(path: Path, raw: Any) -> TestCaseResult:
    if not isinstance(raw, dict):
        raise ReportParseError(path, "case entry is not an object")
    detail = raw.get('detail')
    if detail is not None and not isinstance(detail, str):
        raise ReportParseError(path, "case detail must be a string")
    try:
        return TestCaseResult(
            name=str(raw['name']),
            classname=str(raw.get('classname') or ''),
            phase=Phase(raw.get('phase', Phase.ACTIVE.value)),
            outcome=Outcome(raw['outcome']),
            duration=float(raw.get('duration') or 0.0),
            detail=detail,
        )
    except KeyError as e:
        raise ReportParseError(path, f"case is missing {e.args[0]!r}") from None
    except (TypeError, ValueError) as e:
        raise ReportParseError(path, f"invalid case: {e}") from None


def parse_native(path: Path) -> LoadedReport:
    """
    Read a native JSON report.

    The ``counts`` object is authoritative. When ``cases`` are present they
    must agree with it.

    Raises:
        ReportParseError: If the file is unreadable or malformed
    """
    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ReportParseError(path, f"cannot read file: {e}") from e
    except (ValueError, RecursionError) as e:
        raise ReportParseError(path, f"invalid JSON: {e}") from e

    if not isinstance(data, dict) or data.get('format') != FORMAT_TAG:
        raise ReportParseError(path, "not a launch_harness report")

    counts = data.get('counts')
    if not isinstance(counts, dict):
        raise ReportParseError(path, "missing 'counts' object")

    values = {}
    for key in _COUNT_KEYS:
        value = counts.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ReportParseError(path, f"count {key!r} must be a non-negative integer")
        values[key] = value
    summary = Summary(reports=1, **values)
    if summary.passed < 0:
        raise ReportParseError(path, "more errors, failures and skips than tests")

    raw_cases = data.get('cases', [])
    if not isinstance(raw_cases, list):
        raise ReportParseError(path, "'cases' is not a list")
    cases: List[TestCaseResult] = [_parse_case(path, raw) for raw in raw_cases]

    if cases:
        derived = RunReport(suite='', cases=cases).to_summary()
        if derived != summary:
            raise ReportParseError(path, "counts do not match the recorded cases")

    return LoadedReport(
        path=str(path),
        suite=str(data.get('suite') or path.stem),
        summary=summary,
        cases=cases,
    )
