#!/usr/bin/env python3
# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the run-tests and show-results commands."""

import json
import sys

import pytest

from launch_harness.cli import run_tests, show_results
from launch_harness.config import HarnessConfig
from launch_harness.report.native import FORMAT_TAG
from launch_harness.report.aggregator import ResultAggregator
from launch_harness.runner.parallel import ParallelSuiteRunner, SuiteStatus

PASSING_XML = (
    '<testsuites><testsuite name="ok" tests="2" errors="0" failures="0" skipped="1">'
    '<testcase name="test_a"/><testcase name="test_b"><skipped/></testcase>'
    '</testsuite></testsuites>'
)

FAILING_XML = (
    '<testsuites><testsuite name="bad" tests="1" errors="0" failures="1" skipped="0">'
    '<testcase name="test_rate" classname="TestChatter">'
    '<failure message="AssertionError: 50 not greater than 100">'
    'AssertionError: 50 not greater than 100\n\nTraceback (most recent call last):'
    '</failure></testcase>'
    '</testsuite></testsuites>'
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('ROS_DOMAIN_ID', 'LAUNCH_HARNESS_RESULTS_DIR',
                 'LAUNCH_HARNESS_TEST_TIMEOUT', 'LAUNCH_HARNESS_SUITE_TIMEOUT',
                 'LAUNCH_HARNESS_REPORT_FORMAT'):
        monkeypatch.delenv(name, raising=False)


class TestRunTests:
    """Tests for run-tests."""

    def test_passing_suite(self, suites_dir, results_dir, capsys):
        """All tests passing exits 0 and writes one report."""
        code = run_tests.main([
            str(suites_dir / 'passing_suite.py'),
            '--results-dir', str(results_dir),
            '--no-color',
        ])

        out = capsys.readouterr().out
        assert code == 0
        assert "RESULT: PASSED" in out
        assert "Summary: 3 tests, 0 errors, 0 failures, 1 skipped" in out
        files = ResultAggregator(results_dir).find_report_files()
        assert len(files) == 1
        assert files[0].suffix == '.xml'

    def test_failing_test_exits_1(self, suites_dir, results_dir, capsys):
        """A failing test makes the exit code 1."""
        code = run_tests.main([
            str(suites_dir / 'chatter_suite.py'),
            '--filter', 'test_chatter_rate*',
            '--results-dir', str(results_dir),
            '--report-format', 'json',
        ])

        out = capsys.readouterr().out
        assert code == 1
        assert "TestChatter.test_chatter_rate_above_100" in out
        assert "RESULT: FAILED" in out
        summary = ResultAggregator(results_dir).summarize()
        assert (summary.tests, summary.failures) == (1, 1)

    def test_stream_output(self, suites_dir, results_dir, capsys):
        """--stream-output echoes worker lines with the worker name."""
        code = run_tests.main([
            str(suites_dir / 'passing_suite.py'),
            '--stream-output',
            '--domain-id', '201',
            '--results-dir', str(results_dir),
        ])

        out = capsys.readouterr().out
        assert code == 0
        assert "[echo] echo up 201" in out

    def test_no_matching_tests(self, suites_dir, results_dir, capsys):
        """A filter matching nothing runs nothing."""
        code = run_tests.main([
            str(suites_dir / 'passing_suite.py'),
            '--filter', 'nothing_matches_this',
            '--results-dir', str(results_dir),
        ])

        assert code == 0
        assert "No tests" in capsys.readouterr().out
        assert ResultAggregator(results_dir).find_report_files() == []

    def test_missing_suite_exits_2(self, tmp_path, capsys):
        """Setup problems exit with code 2."""
        code = run_tests.main([str(tmp_path / 'absent.py')])

        assert code == 2
        assert "not found" in capsys.readouterr().out

    def test_invalid_timeout_exits_2(self, suites_dir):
        """An invalid timeout is a usage error."""
        assert run_tests.main([str(suites_dir / 'passing_suite.py'), '--timeout', '0']) == 2

    def test_report_format_choices(self, suites_dir):
        """Unknown report formats are rejected by the parser."""
        with pytest.raises(SystemExit):
            run_tests.main([str(suites_dir / 'passing_suite.py'), '--report-format', 'yaml'])


class TestParallelRuns:
    """Tests for running several suites at once."""

    def test_build_command(self, tmp_path):
        """Children get the run settings on their command line."""
        config = HarnessConfig(results_dir=tmp_path, test_timeout=5.0)
        runner = ParallelSuiteRunner(config, jobs=2, filter_pattern='test_a')

        cmd = runner.build_command(tmp_path / 'x_suite.py')

        assert cmd[:3] == [sys.executable, '-m', 'launch_harness.cli.run_tests']
        assert cmd[cmd.index('--test-timeout') + 1] == '5.0'
        assert cmd[-2:] == ['--filter', 'test_a']

    def test_invalid_jobs(self):
        """At least one job is needed."""
        with pytest.raises(ValueError):
            ParallelSuiteRunner(HarnessConfig(), jobs=0)

    def test_two_suites_in_parallel(self, suites_dir, results_dir):
        """Each child runs with its own isolation id."""
        seen = []
        runner = ParallelSuiteRunner(
            HarnessConfig(results_dir=results_dir), jobs=2, on_result=seen.append)

        results = runner.run([suites_dir / 'passing_suite.py',
                              suites_dir / 'broken_launch_suite.py'])

        assert [r.status for r in results] == [SuiteStatus.PASSED, SuiteStatus.FAILED]
        assert results[0].domain_id != results[1].domain_id
        assert f"ROS_DOMAIN_ID={results[0].domain_id}" in results[0].output
        assert len(seen) == 2
        assert len(ResultAggregator(results_dir).find_report_files()) == 2


class TestShowResults:
    """Tests for show-results."""

    def write_reports(self, results_dir):
        (results_dir / 'ok.xml').write_text(PASSING_XML)
        (results_dir / 'bad1.xml').write_text(FAILING_XML)
        (results_dir / 'bad2.xml').write_text(FAILING_XML)

    def test_summary(self, results_dir, capsys):
        """Failing files are listed, then the summary line."""
        self.write_reports(results_dir)

        code = show_results.main(['--results-dir', str(results_dir)])

        out = capsys.readouterr().out
        assert code == 1
        assert "bad1.xml: 1 tests, 0 errors, 1 failures, 0 skipped" in out
        assert "ok.xml" not in out
        assert out.rstrip().endswith("Summary: 4 tests, 0 errors, 2 failures, 1 skipped")

    def test_all(self, results_dir, capsys):
        """--all lists passing files too."""
        self.write_reports(results_dir)

        show_results.main(['--results-dir', str(results_dir), '--all'])

        assert "ok.xml: 2 tests, 0 errors, 0 failures, 1 skipped" in capsys.readouterr().out

    def test_verbose(self, results_dir, capsys):
        """--verbose prints failure details."""
        self.write_reports(results_dir)

        show_results.main(['--results-dir', str(results_dir), '--verbose'])

        out = capsys.readouterr().out
        assert "TestChatter.test_rate [fail]" in out
        assert "Traceback (most recent call last):" in out

    def test_unreadable_counted(self, results_dir, capsys):
        """Unreadable files are reported but do not fail the command."""
        (results_dir / 'ok.xml').write_text(PASSING_XML)
        (results_dir / 'broken.json').write_text('{')

        code = show_results.main(['--results-dir', str(results_dir)])

        out = capsys.readouterr().out
        assert code == 0
        assert "1 report file(s) could not be read" in out
        assert "Summary: 2 tests, 0 errors, 0 failures, 1 skipped" in out

    def test_verbose_non_string_detail(self, results_dir, capsys):
        """A report with a non-string detail is unreadable, not a crash."""
        (results_dir / 'ok.xml').write_text(PASSING_XML)
        (results_dir / 'odd.json').write_text(json.dumps({
            'format': FORMAT_TAG,
            'counts': {'tests': 1, 'errors': 0, 'failures': 1, 'skipped': 0},
            'cases': [{'name': 'test_rate', 'outcome': 'fail', 'detail': 42}],
        }))

        code = show_results.main(['--results-dir', str(results_dir), '--verbose', '--no-color'])

        out = capsys.readouterr().out
        assert code == 0
        assert "1 report file(s) could not be read" in out
        assert "detail must be a string" in out

    def test_no_results(self, tmp_path, capsys):
        """An empty results directory is not an error."""
        code = show_results.main(['--results-dir', str(tmp_path / 'none')])

        assert code == 0
        assert "No test results found" in capsys.readouterr().out

    def test_environment_results_dir(self, results_dir, monkeypatch, capsys):
        """The results directory can come from the environment."""
        (results_dir / 'bad.xml').write_text(FAILING_XML)
        monkeypatch.setenv('LAUNCH_HARNESS_RESULTS_DIR', str(results_dir))

        assert show_results.main([]) == 1
        assert "Summary: 1 tests, 0 errors, 1 failures, 0 skipped" in capsys.readouterr().out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
