#!/usr/bin/env python3
"""Pupil preprocessing runner.

Usage:
    python scripts/run_pupil_pp.py session.nc --config scripts/user_config.py
    python scripts/run_pupil_pp.py session.nc --channel pupil_l --channel-combine pupil_r
    python scripts/run_pupil_pp.py session.nc --stats-out stats.parquet -v

Thin wrapper around pupilpp.cli.run_pupil_pp; installing the package also
provides the ``pupilpp`` command.
"""

import sys

from pupilpp.cli.run_pupil_pp import main


if __name__ == "__main__":
    sys.exit(main())
