"""Command-line interface modules for pupil preprocessing.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from pupilpp.cli.run_pupil_pp import run_pupil_pp, main

__all__ = ['run_pupil_pp', 'main']
