"""Test SegmentStatsCalculator."""

import logging
from types import SimpleNamespace

import numpy as np
import pytest

from pupilpp.contracts import InvalidInputError
from pupilpp.pupil.combiner import EyeCombiner
from pupilpp.pupil.reconstructor import SignalReconstructor
from pupilpp.pupil.segment_stats import SegmentStatsCalculator, segments_to_frame
from pupilpp.schemas.user import UserLowpassConfig
from tests.helpers.synthetic import make_raw, smooth_trace

pytestmark = pytest.mark.unit


def _seg(start, end, name="seg"):
    return SimpleNamespace(start=start, end=end, name=name)


@pytest.fixture
def ten_hz_config(make_config):
    return make_config(OUTPUT_SAMPLE_RATE=10, lowpass=UserLowpassConfig(disable=True))


@pytest.fixture
def hundred_seconds(ten_hz_config):
    """Single-eye signal spanning [0, 100] s at 10 Hz, all samples valid."""
    raw = make_raw(np.full(1000, 4.0), sample_rate=10.0)
    return SignalReconstructor(ten_hz_config).reconstruct(raw, np.ones(1000, dtype=bool)).signal


class TestSegmentBounds:

    def test_scenario_segment_starting_before_recording_is_clamped(self, ten_hz_config,
                                                                    hundred_seconds, caplog):
        """Segment {start: -5, end: 10, name: "pre"} is clamped to [0, 10]."""
        calc = SegmentStatsCalculator(ten_hz_config)

        with caplog.at_level(logging.WARNING):
            (seg,) = calc.compute(hundred_seconds, [_seg(-5.0, 10.0, "pre")])

        assert "clamped" in caplog.text
        assert (seg.start, seg.end, seg.name) == (-5.0, 10.0, "pre")
        # samples at t = 0.0, 0.1, ..., 10.0
        assert seg.smooth_stats["left"].sample_count == 101
        assert seg.valid_stats["left"].sample_count == 101
        assert seg.smooth_stats["left"].mean_diameter == pytest.approx(4.0)
        assert seg.smooth_stats["left"].missing_or_valid_percent == 0.0
        assert seg.valid_stats["left"].missing_or_valid_percent == 100.0

    def test_segment_outside_recording_is_empty(self, ten_hz_config, hundred_seconds, caplog):
        calc = SegmentStatsCalculator(ten_hz_config)

        with caplog.at_level(logging.WARNING):
            (seg,) = calc.compute(hundred_seconds, [_seg(200.0, 300.0, "late")])

        assert "outside the recording" in caplog.text
        for stats in (seg.smooth_stats, seg.valid_stats):
            assert stats["left"].sample_count == 0
            assert np.isnan(stats["left"].mean_diameter)

    def test_segment_inside_recording_is_not_logged(self, ten_hz_config, hundred_seconds, caplog):
        with caplog.at_level(logging.WARNING):
            SegmentStatsCalculator(ten_hz_config).compute(hundred_seconds, [_seg(1.0, 2.0)])

        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_start_after_end_is_invalid_input(self, ten_hz_config, hundred_seconds):
        with pytest.raises(InvalidInputError, match="ends"):
            SegmentStatsCalculator(ten_hz_config).compute(hundred_seconds, [_seg(5.0, 1.0)])

    def test_no_segments(self, ten_hz_config, hundred_seconds):
        assert SegmentStatsCalculator(ten_hz_config).compute(hundred_seconds) == []

    def test_configured_segments_are_default(self, make_config, hundred_seconds):
        config = make_config(SEGMENTS=[{"start": 0, "end": 1, "name": "first"}])

        (seg,) = SegmentStatsCalculator(config).compute(hundred_seconds)

        assert seg.name == "first"


class TestViews:

    def test_missing_and_valid_percentages(self, ten_hz_config):
        values = np.full(1000, 4.0)
        values[500:] = 6.0
        raw = make_raw(values, sample_rate=10.0)
        mask = np.zeros(1000, dtype=bool)
        mask[500:] = True
        signal = SignalReconstructor(ten_hz_config).reconstruct(raw, mask).signal

        first, second = SegmentStatsCalculator(ten_hz_config).compute(
            signal, [_seg(0.0, 49.9, "first"), _seg(50.0, 59.9, "second")]
        )

        assert first.smooth_stats["left"].sample_count == 500
        assert first.smooth_stats["left"].missing_or_valid_percent == 100.0
        assert np.isnan(first.smooth_stats["left"].mean_diameter)
        assert first.valid_stats["left"].sample_count == 0
        assert first.valid_stats["left"].missing_or_valid_percent == 0.0

        assert second.smooth_stats["left"].sample_count == 100
        assert second.smooth_stats["left"].missing_or_valid_percent == 0.0
        assert second.valid_stats["left"].mean_diameter == pytest.approx(6.0)
        assert second.valid_stats["left"].min_diameter == pytest.approx(6.0)
        assert second.valid_stats["left"].max_diameter == pytest.approx(6.0)

    @pytest.mark.parametrize("out_rate", [100, 150, 1000])
    def test_valid_count_never_exceeds_smooth_count(self, make_config, out_rate):
        config = make_config(OUTPUT_SAMPLE_RATE=out_rate)
        rng = np.random.default_rng(1)
        values = smooth_trace(2000, 100.0)
        raw = make_raw(values)
        mask = rng.random(2000) > 0.3
        signal = SignalReconstructor(config).reconstruct(raw, mask).signal
        segments = [_seg(s, s + d) for s, d in [(0.0, 1.0), (2.5, 3.3), (7.1, 0.05), (-1.0, 30.0)]]

        for seg in SegmentStatsCalculator(config).compute(signal, segments):
            assert seg.valid_stats["left"].sample_count <= seg.smooth_stats["left"].sample_count

    def test_combined_signal_reports_every_role(self, make_config):
        config = make_config(OUTPUT_SAMPLE_RATE=100, lowpass=UserLowpassConfig(disable=True))
        left = make_raw(np.full(500, 4.0), eye="l")
        right = make_raw(np.full(500, 5.0), eye="r")
        mask = np.ones(500, dtype=bool)
        signal = EyeCombiner(config).combine((left, mask), (right, mask)).signal

        (seg,) = SegmentStatsCalculator(config).compute(signal, [_seg(0.0, 1.0)])

        assert set(seg.smooth_stats) == {"left", "right", "mean"}
        assert set(seg.valid_stats) == {"left", "right", "mean"}
        assert seg.smooth_stats["left"].mean_diameter == pytest.approx(4.0)
        assert seg.smooth_stats["right"].mean_diameter == pytest.approx(5.0)
        assert seg.smooth_stats["mean"].mean_diameter == pytest.approx(4.5)
        assert seg.valid_stats["mean"].mean_diameter == pytest.approx(4.5)


class TestFrame:

    def test_one_row_per_segment(self, ten_hz_config, hundred_seconds):
        segments = SegmentStatsCalculator(ten_hz_config).compute(
            hundred_seconds, [_seg(0.0, 1.0, "a"), _seg(1.0, 2.0, "b")]
        )

        df = segments_to_frame(segments)

        assert df["name"].tolist() == ["a", "b"]
        assert "left_smooth_mean_diameter" in df.columns
        assert "left_smooth_missing_percent" in df.columns
        assert "left_valid_valid_percent" in df.columns
        assert "left_valid_sample_count" in df.columns
        assert df.loc[0, "left_smooth_sample_count"] == 11

    def test_empty(self):
        assert segments_to_frame([]).empty
