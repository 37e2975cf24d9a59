"""Test SignalReconstructor."""

import numpy as np
import pytest

from pupilpp.contracts import InvalidInputError
from pupilpp.pupil.models import Degraded, SingleEye, Success
from pupilpp.pupil.reconstructor import SignalReconstructor
from pupilpp.pupil.validity_filter import PupilValidityFilter
from pupilpp.schemas.user import UserLowpassConfig
from tests.helpers.synthetic import make_raw, smooth_trace

pytestmark = pytest.mark.unit


class TestOutputLength:

    @pytest.mark.parametrize("src_rate, out_rate, n, expected", [
        (100.0, 1000.0, 1234, 12340),
        (60.0, 1000.0, 777, 12950),
        (250.0, 333.0, 999, 1331),
        (500.0, 500.0, 1001, 1001),
        (10.0, 10.0, 1000, 1000),
    ])
    def test_length_law(self, make_config, src_rate, out_rate, n, expected):
        raw = make_raw(smooth_trace(n, src_rate), sample_rate=src_rate)
        mask = np.ones(n, dtype=bool)

        result = SignalReconstructor(make_config(OUTPUT_SAMPLE_RATE=out_rate)).reconstruct(raw, mask)

        assert isinstance(result, Success)
        assert result.signal.values.size == expected
        assert result.signal.sample_rate == out_rate

    def test_length_law_when_degraded(self, internal_config):
        raw = make_raw(np.full(777, 4.0), sample_rate=60.0)
        mask = np.zeros(777, dtype=bool)

        result = SignalReconstructor(internal_config).reconstruct(raw, mask)

        assert result.signal.values.size == 12950

    @pytest.mark.parametrize("src_rate, out_rate", [(500.0, 100.0), (1000.0, 999.0)])
    def test_output_rate_below_source_rate_is_rejected(self, make_config, src_rate, out_rate):
        raw = make_raw(smooth_trace(2000, src_rate), sample_rate=src_rate)
        reconstructor = SignalReconstructor(make_config(OUTPUT_SAMPLE_RATE=out_rate))

        with pytest.raises(InvalidInputError, match="below the source rate"):
            reconstructor.reconstruct(raw, np.ones(2000, dtype=bool))


class TestReconstruction:

    def test_scenario_bridges_range_artifact(self, make_config):
        """1000 samples at 10 Hz, [500, 520) above range, output at 10 Hz."""
        config = make_config(OUTPUT_SAMPLE_RATE=10)
        values = smooth_trace(1000, 10.0, freq=0.05)
        values[500:520] = 12.0
        raw = make_raw(values, sample_rate=10.0)
        mask = PupilValidityFilter(config).filter(raw)

        result = SignalReconstructor(config).reconstruct(raw, mask)

        out = result.signal.values
        assert isinstance(result, Success)
        assert out.size == 1000
        assert np.isfinite(out).all()
        # the bridge follows the surrounding signal, not the artifact
        assert out[500:520].max() < 4.5
        assert out[500:520].min() > 3.5

    def test_missing_markers_outside_valid_extent(self, internal_config):
        raw = make_raw(smooth_trace(500, 100.0))
        mask = np.zeros(500, dtype=bool)
        mask[100:400] = True

        out = SignalReconstructor(internal_config).reconstruct(raw, mask).signal.values

        assert out.size == 5000
        assert np.isnan(out[:1000]).all()
        assert np.isfinite(out[1000:3991]).all()
        assert np.isnan(out[3991:]).all()

    def test_valid_samples_are_recorded(self, internal_config):
        raw = make_raw(smooth_trace(500, 100.0))
        mask = np.zeros(500, dtype=bool)
        mask[100:400] = True

        signal = SignalReconstructor(internal_config).reconstruct(raw, mask).signal
        info = signal.valid_samples["left"]

        np.testing.assert_array_equal(info.indices, np.arange(100, 400))
        np.testing.assert_array_equal(info.values, raw.values[100:400])
        assert info.fraction_valid == pytest.approx(0.6)
        assert signal.role == SingleEye("l")
        assert signal.unit == "mm"

    def test_without_lowpass_valid_samples_are_reproduced(self, make_config):
        config = make_config(OUTPUT_SAMPLE_RATE=100, lowpass=UserLowpassConfig(disable=True))
        raw = make_raw(smooth_trace(300, 100.0))
        mask = np.ones(300, dtype=bool)
        mask[150:160] = False

        out = SignalReconstructor(config).reconstruct(raw, mask).signal.values

        np.testing.assert_allclose(out[mask], raw.values[mask])

    def test_lowpass_removes_fast_oscillation(self, make_config):
        config = make_config(OUTPUT_SAMPLE_RATE=100)
        t = np.arange(1000) / 100.0
        values = 4.0 + 0.05 * np.sin(2 * np.pi * 20.0 * t)  # 20 Hz, far above the 4 Hz cutoff
        raw = make_raw(values)

        out = SignalReconstructor(config).reconstruct(raw, np.ones(1000, dtype=bool)).signal.values

        assert np.abs(out[100:-100] - 4.0).max() < 0.01

    def test_interp_max_gap_blanks_long_gaps(self, make_config):
        config = make_config(OUTPUT_SAMPLE_RATE=100, INTERP_MAX_GAP=0.5)
        raw = make_raw(smooth_trace(600, 100.0))
        mask = np.ones(600, dtype=bool)
        mask[200:300] = False   # 1 s gap
        mask[400:420] = False   # 0.2 s gap, still bridged

        out = SignalReconstructor(config).reconstruct(raw, mask).signal.values

        assert np.flatnonzero(np.isnan(out)).tolist() == list(range(200, 300))


class TestDegraded:

    def test_scenario_all_below_range(self, internal_config):
        raw = make_raw(np.full(500, 0.5))
        mask = PupilValidityFilter(internal_config).filter(raw)

        result = SignalReconstructor(internal_config).reconstruct(raw, mask)

        assert isinstance(result, Degraded)
        assert result.degraded
        assert result.signal.values.size == 5000
        assert np.isnan(result.signal.values).all()
        assert "left" in result.reason

    def test_single_valid_sample(self, internal_config):
        raw = make_raw(smooth_trace(100, 100.0), eye="r")
        mask = np.zeros(100, dtype=bool)
        mask[50] = True

        result = SignalReconstructor(internal_config).reconstruct(raw, mask)

        assert isinstance(result, Degraded)
        assert "right" in result.reason
        assert result.signal.valid_samples["right"].indices.tolist() == [50]

    def test_degraded_is_logged(self, internal_config, caplog):
        raw = make_raw(np.full(100, 0.5))

        with caplog.at_level("WARNING", logger="pupilpp"):
            SignalReconstructor(internal_config).reconstruct(raw, np.zeros(100, dtype=bool))

        assert "Degraded reconstruction" in caplog.text
