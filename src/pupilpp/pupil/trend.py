"""Trend estimation for the trendline deviation filter.

The trend is a centred, time-windowed moving average of the currently valid
samples, linearly interpolated back onto every sample time. It only serves
as a reference for outlier detection and is never part of the output.
"""

import numpy as np

__all__ = ['moving_average_trend', 'trend_deviation']


def moving_average_trend(times: np.ndarray, values: np.ndarray, window: float) -> np.ndarray:
    """Centred moving average over irregularly spaced samples.

    Each sample is replaced by the mean of all samples whose time lies within
    ``window / 2`` seconds of it. Gaps shrink the effective sample count but
    never pull in values from the other side of a long gap.

    Parameters
    ----------
    times : np.ndarray
        Sample times in seconds, strictly increasing.
    values : np.ndarray
        Sample values aligned with ``times``.
    window : float
        Full window width in seconds.

    Returns
    -------
    np.ndarray
        Smoothed values aligned with ``times``.
    """
    half = window / 2.0
    csum = np.concatenate(([0.0], np.cumsum(values, dtype=float)))
    lo = np.searchsorted(times, times - half, side="left")
    hi = np.searchsorted(times, times + half, side="right")
    return (csum[hi] - csum[lo]) / (hi - lo)


def trend_deviation(raw: np.ndarray, times: np.ndarray, valid: np.ndarray,
                    window: float) -> np.ndarray:
    """Absolute deviation of every sample from the trend of the valid ones.

    Parameters
    ----------
    raw : np.ndarray
        Raw diameter series.
    times : np.ndarray
        Time of each raw sample in seconds.
    valid : np.ndarray
        Boolean mask of samples the trend is built from. At least two
        samples must be valid.
    window : float
        Smoothing window in seconds.

    Returns
    -------
    np.ndarray
        ``|raw - trend|`` at every sample time.
    """
    t_valid = times[valid]
    smoothed = moving_average_trend(t_valid, raw[valid], window)
    trend = np.interp(times, t_valid, smoothed)
    return np.abs(raw - trend)
