# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
XUnit (JUnit XML) report writing and parsing.

Written reports follow the layout produced by pytest and launch_testing,
so CI dashboards and ``colcon test-result`` read them too. The parser
accepts ``<testsuites>`` or ``<testsuite>`` roots from any of those tools.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Tuple
from xml.dom.minidom import parseString

from launch_harness.errors import ReportParseError
from launch_harness.report.results import (
    LoadedReport,
    Outcome,
    Phase,
    RunReport,
    Summary,
    TestCaseResult,
)

_OUTCOME_TAGS = {
    Outcome.FAIL: 'failure',
    Outcome.ERROR: 'error',
    Outcome.SKIP: 'skipped',
}


def _first_line(text: Optional[str]) -> str:
    if not text:
        return ''
    return text.strip().split('\n')[0][:200]


def _set_counts(element: ET.Element, report: RunReport) -> None:
    element.set('tests', str(report.tests))
    element.set('errors', str(report.errors))
    element.set('failures', str(report.failures))
    element.set('skipped', str(report.skipped))
    element.set('time', f"{report.duration:.3f}")


def _add_property(parent: ET.Element, name: str, value: str) -> None:
    properties = parent.find('properties')
    if properties is None:
        properties = ET.SubElement(parent, 'properties')
    prop = ET.SubElement(properties, 'property')
    prop.set('name', name)
    prop.set('value', value)


def render_xunit(report: RunReport) -> str:
    """Render a run report as pretty-printed XUnit XML."""
    testsuites = ET.Element('testsuites')
    testsuites.set('name', report.suite)
    _set_counts(testsuites, report)

    testsuite = ET.SubElement(testsuites, 'testsuite')
    testsuite.set('name', report.suite)
    _set_counts(testsuite, report)
    testsuite.set('timestamp', report.timestamp.isoformat(timespec='seconds'))
    if report.isolation_id is not None:
        _add_property(testsuite, 'isolation_id', str(report.isolation_id))

    for case in report.cases:
        testcase = ET.SubElement(testsuite, 'testcase')
        testcase.set('name', case.name)
        testcase.set('classname', case.classname or report.suite)
        testcase.set('time', f"{case.duration:.3f}")
        _add_property(testcase, 'phase', case.phase.value)

        tag = _OUTCOME_TAGS.get(case.outcome)
        if tag is not None:
            child = ET.SubElement(testcase, tag)
            child.set('message', _first_line(case.detail))
            if case.detail and case.outcome is not Outcome.SKIP:
                child.text = case.detail

    return parseString(ET.tostring(testsuites)).toprettyxml(indent='  ')


def write_xunit(report: RunReport, path: Path) -> Path:
    """Write ``report`` to ``path`` atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + '.tmp')
    tmp.write_text(render_xunit(report), encoding='utf-8')
    tmp.replace(path)
    return path


def _int_attr(path: Path, element: ET.Element, names: Tuple[str, ...],
              default: int) -> int:
    for name in names:
        raw = element.get(name)
        if raw is None:
            continue
        try:
            value = int(raw)
        except ValueError:
            raise ReportParseError(path, f"attribute {name}={raw!r} is not an integer") from None
        if value < 0:
            raise ReportParseError(path, f"attribute {name}={raw!r} is negative")
        return value
    return default


def _float_attr(path: Path, element: ET.Element, name: str) -> float:
    raw = element.get(name)
    if raw is None or raw == '':
        return 0.0
    try:
        return float(raw.replace(',', ''))
    except ValueError:
        raise ReportParseError(path, f"attribute {name}={raw!r} is not a number") from None


def _parse_case(path: Path, testcase: ET.Element) -> TestCaseResult:
    outcome = Outcome.PASS
    detail = None
    for candidate, tag in _OUTCOME_TAGS.items():
        child = testcase.find(tag)
        if child is not None:
            outcome = candidate
            message = child.get('message') or ''
            text = (child.text or '').strip()
            detail = text or message or None
            break

    phase = Phase.ACTIVE
    for prop in testcase.findall('properties/property'):
        if prop.get('name') == 'phase':
            try:
                phase = Phase(prop.get('value'))
            except ValueError:
                raise ReportParseError(path, f"unknown phase {prop.get('value')!r}") from None

    return TestCaseResult(
        name=testcase.get('name', ''),
        classname=testcase.get('classname', ''),
        phase=phase,
        outcome=outcome,
        duration=_float_attr(path, testcase, 'time'),
        detail=detail,
    )


def parse_xunit(path: Path) -> LoadedReport:
    """
    Read an XUnit file.

    Suite-level count attributes are authoritative; a missing attribute is
    derived from the ``<testcase>`` children.

    Raises:
        ReportParseError: If the file is unreadable or not valid XUnit
    """
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, RecursionError) as e:
        raise ReportParseError(path, f"invalid XML: {e}") from e
    except OSError as e:
        raise ReportParseError(path, f"cannot read file: {e}") from e

    if root.tag == 'testsuites':
        suites = root.iter('testsuite')
    elif root.tag == 'testsuite':
        suites = [root]
    else:
        raise ReportParseError(path, f"unexpected root element <{root.tag}>")

    total = Summary()
    cases: List[TestCaseResult] = []
    suite_name = root.get('name') or path.stem

    for suite in suites:
        suite_cases = [_parse_case(path, tc) for tc in suite.findall('testcase')]

        def derived(outcome: Outcome) -> int:
            return sum(1 for c in suite_cases if c.outcome is outcome)

        counts = Summary(
            tests=_int_attr(path, suite, ('tests',), len(suite_cases)),
            errors=_int_attr(path, suite, ('errors',), derived(Outcome.ERROR)),
            failures=_int_attr(path, suite, ('failures',), derived(Outcome.FAIL)),
            skipped=_int_attr(path, suite, ('skipped', 'skip'), derived(Outcome.SKIP)),
        )
        if counts.passed < 0:
            raise ReportParseError(
                path, f"suite {suite.get('name')!r} has more problems than tests")

        total = total + counts
        cases.extend(suite_cases)

    return LoadedReport(
        path=str(path),
        suite=suite_name,
        summary=Summary(
            tests=total.tests,
            errors=total.errors,
            failures=total.failures,
            skipped=total.skipped,
            reports=1,
        ),
        cases=cases,
    )
