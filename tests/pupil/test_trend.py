"""Test the moving-average trend used by the trendline stage."""

import numpy as np
import pytest

from pupilpp.pupil.trend import moving_average_trend, trend_deviation

pytestmark = pytest.mark.unit


def test_linear_series_is_preserved_away_from_edges():
    """A centred average of a straight line is the line itself."""
    times = np.arange(100) * 0.01
    values = 2.0 * times

    smoothed = moving_average_trend(times, values, window=0.105)

    np.testing.assert_allclose(smoothed[10:90], values[10:90], atol=1e-9)


def test_average_does_not_cross_long_gaps():
    times = np.array([0.0, 0.01, 0.02, 5.0, 5.01])
    values = np.array([1.0, 1.0, 1.0, 9.0, 9.0])

    smoothed = moving_average_trend(times, values, window=0.5)

    np.testing.assert_allclose(smoothed, values)


def test_deviation_is_zero_for_constant_signal():
    times = np.arange(50) / 100.0
    raw = np.full(50, 4.0)
    valid = np.ones(50, dtype=bool)

    np.testing.assert_allclose(trend_deviation(raw, times, valid, 0.5), 0.0)


def test_deviation_uses_only_valid_samples():
    """An outlier excluded from the trend shows its full deviation."""
    times = np.arange(50) / 100.0
    raw = np.full(50, 4.0)
    raw[25] = 6.0
    valid = np.ones(50, dtype=bool)
    valid[25] = False

    deviation = trend_deviation(raw, times, valid, 0.5)

    assert deviation[25] == pytest.approx(2.0)
    np.testing.assert_allclose(np.delete(deviation, 25), 0.0)
