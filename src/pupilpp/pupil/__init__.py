"""Pupil preprocessing core.

- validity_filter: Five-stage artifact detection (validity mask)
- trend: Moving-average trend used by the trendline stage
- reconstructor: Interpolation, low-pass filtering and padding of one eye
- combiner: Mean of the left and right eye
- segment_stats: Per-segment summary statistics
- models: Value types passed between the stages
"""

from pupilpp.pupil.models import (
    RawChannel,
    ValidSampleInfo,
    SmoothSignal,
    Segment,
    SegmentStatsRecord,
    SingleEye,
    Combined,
    Success,
    Degraded,
)
from pupilpp.pupil.validity_filter import PupilValidityFilter
from pupilpp.pupil.reconstructor import SignalReconstructor
from pupilpp.pupil.combiner import EyeCombiner
from pupilpp.pupil.segment_stats import SegmentStatsCalculator, segments_to_frame

__all__ = [
    "RawChannel",
    "ValidSampleInfo",
    "SmoothSignal",
    "Segment",
    "SegmentStatsRecord",
    "SingleEye",
    "Combined",
    "Success",
    "Degraded",
    "PupilValidityFilter",
    "SignalReconstructor",
    "EyeCombiner",
    "SegmentStatsCalculator",
    "segments_to_frame",
]
