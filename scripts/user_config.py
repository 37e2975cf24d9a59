"""Pupil preprocessing user configuration.

This is the user-facing configuration file. Modify settings here to customize
the preprocessing. Defaults for everything not listed here live in
pupilpp.schemas.param.ParamConfig.

Usage:
    python scripts/run_pupil_pp.py session.nc --config scripts/user_config.py
    python scripts/run_pupil_pp.py session.nc --config scripts/user_config.py --channel pupil_r
    python scripts/run_pupil_pp.py session.nc --config scripts/user_config.py --channel-combine pupil_r
"""

CONFIG = {
    # ========================================================================
    # CHANNEL SELECTION
    # ========================================================================
    "CHANNEL": "pupil",          # index, channel type, or "pupil" (best eye)
    "CHANNEL_COMBINE": "none",   # second eye to average with, or "none"
    "CHANNEL_ACTION": "add",     # "add" or "replace"

    # ========================================================================
    # VALIDITY FILTER
    # ========================================================================
    "PUPIL_MIN": 1.5,            # plausible diameter range (mm)
    "PUPIL_MAX": 9.0,
    "SPEED_MAX": 10.0,           # max dilation speed (mm/s)
    "gap": {
        "min_duration": 0.075,   # seconds of invalid data that count as a gap
        "margin_before": 0.05,   # seconds dropped before each gap
        "margin_after": 0.05,    # seconds dropped after each gap
    },
    "TREND_THRESHOLD": 0.5,      # max deviation from the trend (mm)
    "TREND_PASSES": 4,

    # ========================================================================
    # RECONSTRUCTION
    # ========================================================================
    "OUTPUT_SAMPLE_RATE": 1000,  # Hz
    "lowpass": {"cutoff": 4.0, "order": 4},
    "INTERP_MAX_GAP": None,      # seconds; None bridges every gap

    # ========================================================================
    # SEGMENTS
    # ========================================================================
    "SEGMENTS": [
        # {"start": 0.0, "end": 10.0, "name": "baseline"},
    ],

    "LOG_LEVEL": "INFO",
}
