"""Determine which raw pupil samples are usable.

This module implements the first half of the preprocessing described by
Kret & Sjak-Shie (2018): a chain of artifact detectors that mark samples as
valid or invalid. The chain never re-validates a sample; every stage can only
turn ``True`` into ``False``.

Stages (in order):
1. Range filter: diameters outside a plausible physical range
2. Speed filter: implausibly fast dilation/constriction between samples
3. Edge filter: fringes before and after temporal gaps (blinks)
4. Trendline filter: samples far from a smoothed trend, iterated
5. Isolated-island filter: short valid fragments tightly bracketed by gaps
"""

import logging
from typing import TYPE_CHECKING, Dict

import numpy as np

from pupilpp.contracts import assert_monotone_invalidation, assert_validity_mask
from pupilpp.pupil.models import RawChannel
from pupilpp.pupil.pupil_utils import find_runs, seconds_to_samples
from pupilpp.pupil.trend import trend_deviation

if TYPE_CHECKING:
    from pupilpp.schemas import InternalConfig

__all__ = ['PupilValidityFilter', 'STAGES']

logger = logging.getLogger(__name__)

STAGES = ("range", "speed", "edge", "trend", "isolated_islands")

# float slack when comparing durations derived from sample counts
_EPS = 1e-9


class PupilValidityFilter:
    """Config-driven validity mask computation for one eye.

    The filter holds no per-recording state: one instance can process any
    number of channels, in any order.

    Examples
    --------
    >>> from pupilpp.schemas import resolve_config, ParamConfig
    >>> vf = PupilValidityFilter(resolve_config(ParamConfig()))
    >>> mask = vf.filter(raw_channel)
    >>> mask.mean()  # fraction of valid samples
    """

    def __init__(self, config: "InternalConfig"):
        """Store config.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration. Only the ``range``,
            ``speed``, ``gap``, ``trend`` and ``isolated_islands`` sections
            are read.
        """
        self.range_min = config.range.min
        self.range_max = config.range.max
        self.speed_max = config.speed.max
        self.gap_min_duration = config.gap.min_duration
        self.gap_margin_before = config.gap.margin_before
        self.gap_margin_after = config.gap.margin_after
        self.trend_threshold = config.trend.deviation_threshold
        self.trend_window = config.trend.smoothing_window
        self.trend_passes = config.trend.passes
        self.island_min_size = config.isolated_islands.min_size
        self.island_max_gap = config.isolated_islands.max_gap

        logger.debug("PupilValidityFilter initialized: range=[%s, %s], speed_max=%s, trend_passes=%s",
                     self.range_min, self.range_max, self.speed_max, self.trend_passes)

    def filter(self, raw: RawChannel) -> np.ndarray:
        """Compute the validity mask of one raw channel.

        Returns
        -------
        np.ndarray
            Read-only boolean array, index-aligned with ``raw.values``.
            May be all False; data quality never raises here.
        """
        return self.filter_stages(raw)[STAGES[-1]]

    def filter_stages(self, raw: RawChannel) -> Dict[str, np.ndarray]:
        """Run every stage and return the mask after each one.

        Returns
        -------
        dict
            Stage name -> read-only boolean mask, in stage order.
        """
        values = raw.values
        sr = raw.sample_rate
        n = raw.n_samples

        masks = {}
        valid = self._range_filter(values)
        masks["range"] = valid
        valid = self._speed_filter(values, valid, sr)
        masks["speed"] = valid
        valid = self._edge_filter(valid, sr)
        masks["edge"] = valid
        valid = self._trend_filter(values, valid, sr)
        masks["trend"] = valid
        valid = self._isolated_island_filter(valid, sr)
        masks["isolated_islands"] = valid

        previous = None
        for stage, mask in masks.items():
            mask.setflags(write=False)
            assert_validity_mask(mask, n)
            if previous is not None:
                assert_monotone_invalidation(previous, mask, stage)
            previous = mask

        logger.debug("Validity filter (%s): %d of %d samples valid",
                     raw.chantype or raw.eye_label, int(valid.sum()), n)
        return masks

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _range_filter(self, values: np.ndarray) -> np.ndarray:
        """Invalidate non-finite samples and samples outside [min, max]."""
        finite = np.isfinite(values)
        valid = finite.copy()
        valid[finite] = (values[finite] >= self.range_min) & (values[finite] <= self.range_max)
        self._log_removed("Range", finite, valid)
        return valid

    def _speed_filter(self, values: np.ndarray, valid: np.ndarray, sr: float) -> np.ndarray:
        """Invalidate both ends of every too-fast step between valid samples.

        Steps touching an already invalid sample are not evaluated.
        """
        out = valid.copy()
        if values.size < 2:
            return out

        pair_valid = valid[:-1] & valid[1:]
        speed = np.zeros(values.size - 1)
        speed[pair_valid] = np.abs(np.diff(values)[pair_valid]) * sr
        too_fast = speed > self.speed_max

        out[:-1][too_fast] = False
        out[1:][too_fast] = False
        self._log_removed("Speed", valid, out)
        return out

    def _edge_filter(self, valid: np.ndarray, sr: float) -> np.ndarray:
        """Invalidate the margins around every gap of sufficient duration."""
        out = valid.copy()
        n_before = seconds_to_samples(self.gap_margin_before, sr)
        n_after = seconds_to_samples(self.gap_margin_after, sr)
        if n_before == 0 and n_after == 0:
            return out

        starts, stops = find_runs(~valid)
        long_enough = (stops - starts) / sr >= self.gap_min_duration - _EPS
        for start, stop in zip(starts[long_enough], stops[long_enough]):
            out[max(0, start - n_before):start] = False
            out[stop:stop + n_after] = False

        self._log_removed("Edge", valid, out)
        return out

    def _trend_filter(self, values: np.ndarray, valid: np.ndarray, sr: float) -> np.ndarray:
        """Iteratively invalidate samples deviating from the valid-sample trend."""
        out = valid.copy()
        times = np.arange(values.size) / sr

        for i in range(self.trend_passes):
            if out.sum() < 2:
                logger.debug("Trend filter: fewer than 2 valid samples, stopping at pass %d", i + 1)
                break

            deviation = trend_deviation(values, times, out, self.trend_window)
            outliers = out & (deviation > self.trend_threshold)
            n_outliers = int(outliers.sum())
            logger.debug("Trend filter pass %d: %d outliers", i + 1, n_outliers)
            if n_outliers == 0:
                break
            out &= ~outliers

        return out

    def _isolated_island_filter(self, valid: np.ndarray, sr: float) -> np.ndarray:
        """Invalidate short islands whose neighbouring gaps are both short."""
        out = valid.copy()
        starts, stops = find_runs(valid)
        if starts.size == 0:
            return out

        prev_stops = np.concatenate(([0], stops[:-1]))
        next_starts = np.concatenate((starts[1:], [valid.size]))

        duration = (stops - starts) / sr
        gap_before = (starts - prev_stops) / sr
        gap_after = (next_starts - stops) / sr

        isolated = (
            (duration < self.island_min_size - _EPS)
            & (gap_before < self.island_max_gap - _EPS)
            & (gap_after < self.island_max_gap - _EPS)
        )
        for start, stop in zip(starts[isolated], stops[isolated]):
            out[start:stop] = False

        self._log_removed("Isolated-island", valid, out)
        return out

    @staticmethod
    def _log_removed(stage: str, before: np.ndarray, after: np.ndarray) -> None:
        removed = int(before.sum() - after.sum())
        if removed > 0:
            logger.debug("%s filter: removed %d samples", stage, removed)
