# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Loading of suite files.

A suite file is a Python module defining ``generate_test_description()``
(returning a :class:`SuiteDescription`) and ``unittest.TestCase`` classes.
Classes decorated with ``@post_shutdown_test()`` run after the workers
stopped; all others are active tests.
"""

import fnmatch
import importlib.util
import inspect
import itertools
import unittest
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Callable, List, Optional

from launch_harness.errors import SuiteLoadError
from launch_harness.runner.post_shutdown import is_post_shutdown

DESCRIPTION_FUNCTION = 'generate_test_description'

_module_counter = itertools.count()


@dataclass
class LoadedSuite:
    """A suite file, imported."""

    name: str
    path: Path
    generate_description: Callable
    active_tests: List[unittest.TestCase] = field(default_factory=list)
    post_shutdown_tests: List[unittest.TestCase] = field(default_factory=list)

    @property
    def all_tests(self) -> List[unittest.TestCase]:
        return self.active_tests + self.post_shutdown_tests

    def filtered(self, pattern: Optional[str]) -> 'LoadedSuite':
        """Copy keeping only tests whose id matches ``pattern``."""
        if not pattern:
            return self
        return LoadedSuite(
            name=self.name,
            path=self.path,
            generate_description=self.generate_description,
            active_tests=[t for t in self.active_tests if matches_filter(t, pattern)],
            post_shutdown_tests=[
                t for t in self.post_shutdown_tests if matches_filter(t, pattern)],
        )


def matches_filter(test: unittest.TestCase, pattern: str) -> bool:
    """
    Match a test against a ``--filter`` pattern.

    The pattern is a glob matched against ``Class.method`` and ``method``;
    without glob characters it matches as a substring.
    """
    if not any(ch in pattern for ch in '*?['):
        pattern = f"*{pattern}*"
    method = test._testMethodName
    full = f"{type(test).__qualname__}.{method}"
    return fnmatch.fnmatchcase(full, pattern) or fnmatch.fnmatchcase(method, pattern)


def _import_file(path: Path) -> ModuleType:
    module_name = f"launch_harness_suite_{next(_module_counter)}_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise SuiteLoadError(f"Cannot import suite file {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise SuiteLoadError(f"Importing {path} failed: {e}") from e
    return module


def collect_test_cases(module: ModuleType) -> List[unittest.TestCase]:
    """Instantiate every test method of the module's TestCase classes, in definition order."""
    loader = unittest.TestLoader()
    tests: List[unittest.TestCase] = []
    for obj in vars(module).values():
        if (inspect.isclass(obj) and issubclass(obj, unittest.TestCase)
                and obj.__module__ == module.__name__):
            tests.extend(obj(name) for name in loader.getTestCaseNames(obj))
    return tests


def load_suite(path: Path) -> LoadedSuite:
    """
    Import a suite file and sort its tests into phases.

    Raises:
        SuiteLoadError: If the file does not exist, fails to import or has
            no ``generate_test_description()``
    """
    path = Path(path)
    if not path.is_file():
        raise SuiteLoadError(f"Suite file not found: {path}")

    module = _import_file(path)
    generate = getattr(module, DESCRIPTION_FUNCTION, None)
    if not callable(generate):
        raise SuiteLoadError(f"{path} does not define {DESCRIPTION_FUNCTION}()")

    suite = LoadedSuite(name=path.stem, path=path, generate_description=generate)
    for test in collect_test_cases(module):
        if is_post_shutdown(type(test)):
            suite.post_shutdown_tests.append(test)
        else:
            suite.active_tests.append(test)
    return suite
