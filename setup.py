# Copyright 2026 The launch_harness Authors
# SPDX-License-Identifier: Apache-2.0

"""
Setup file for launch_harness package.

Installs the Python package with its run-tests and show-results commands.
"""

from setuptools import setup, find_packages

setup(
    name='launch_harness',
    version='0.1.0',
    packages=find_packages(exclude=['test', 'test.*']),
    python_requires='>=3.8',
    install_requires=['setuptools'],
    extras_require={
        'test': [
            'pytest>=7.0',
            'hypothesis>=6.0',
        ],
    },
    zip_safe=True,
    author='John',
    author_email='john@example.com',
    maintainer='John',
    maintainer_email='john@example.com',
    description='Isolated launch testing for multi-process systems',
    license='Apache-2.0',
    entry_points={
        'console_scripts': [
            'run-tests = launch_harness.cli.run_tests:main',
            'show-results = launch_harness.cli.show_results:main',
        ],
    },
)
