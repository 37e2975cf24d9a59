"""Summary statistics of a reconstructed signal over named time windows.

Every segment is summarised twice per eye-role:

- the smooth view: output samples of the reconstructed signal, with the
  percentage of missing output samples;
- the valid view: raw samples that survived the validity filter, with the
  percentage of valid raw samples.

Segment bounds outside the recording are clamped to it (with a warning).
"""

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional

import numpy as np
import pandas as pd

from pupilpp.contracts import InvalidInputError
from pupilpp.pupil.models import Segment, SegmentStatsRecord, SmoothSignal, ValidSampleInfo

if TYPE_CHECKING:
    from pupilpp.schemas import InternalConfig

__all__ = ['SegmentStatsCalculator', 'segments_to_frame']

logger = logging.getLogger(__name__)

# float slack for inclusive window bounds
_EPS = 1e-9


def _summarise(values: np.ndarray, count: int, percent: float) -> SegmentStatsRecord:
    finite = values[~np.isnan(values)]
    if finite.size == 0:
        return SegmentStatsRecord(np.nan, np.nan, np.nan, percent, int(count))
    return SegmentStatsRecord(
        mean_diameter=float(finite.mean()),
        min_diameter=float(finite.min()),
        max_diameter=float(finite.max()),
        missing_or_valid_percent=percent,
        sample_count=int(count),
    )


_EMPTY = SegmentStatsRecord(np.nan, np.nan, np.nan, np.nan, 0)


class SegmentStatsCalculator:
    """Compute per-segment statistics for single-eye and combined signals."""

    def __init__(self, config: "InternalConfig"):
        self.segments = config.segments

    def compute(self, signal: SmoothSignal, segments: Optional[Iterable] = None) -> List[Segment]:
        """Compute statistics for every segment.

        Parameters
        ----------
        signal : SmoothSignal
            Reconstructed signal; its role decides which eye-roles are reported.
        segments : iterable, optional
            Objects with ``start``, ``end`` and ``name``. Defaults to the
            configured segments.

        Returns
        -------
        list of Segment
            Empty when there are no segments.

        Raises
        ------
        InvalidInputError
            If a segment ends before it starts.
        """
        segments = list(self.segments if segments is None else segments)
        for seg in segments:
            if seg.start > seg.end:
                raise InvalidInputError(
                    f"segment '{seg.name}' ends ({seg.end} s) before it starts ({seg.start} s)"
                )
        if not segments:
            return []

        role_names = signal.role.names
        extent = signal.n_source_samples / signal.source_sample_rate
        out_times = np.arange(signal.values.size) / signal.sample_rate
        raw_times = np.arange(signal.n_source_samples) / signal.source_sample_rate

        results = []
        for seg in segments:
            start, end = self._clamp(seg, extent)
            if start > end:
                logger.warning("Segment '%s' [%s, %s] lies outside the recording [0, %s]",
                               seg.name, seg.start, seg.end, extent)
                empty = {name: _EMPTY for name in role_names}
                results.append(Segment(seg.start, seg.end, seg.name, dict(empty), dict(empty)))
                continue

            in_out = (out_times >= start - _EPS) & (out_times <= end + _EPS)
            n_raw = int(np.count_nonzero((raw_times >= start - _EPS) & (raw_times <= end + _EPS)))

            smooth_stats = {}
            valid_stats = {}
            for name in role_names:
                smooth_stats[name] = self._smooth_view(signal.components[name], in_out)
                valid_stats[name] = self._valid_view(
                    signal.valid_samples[name], signal.source_sample_rate, start, end, n_raw
                )
            results.append(Segment(seg.start, seg.end, seg.name, smooth_stats, valid_stats))

        logger.debug("Computed statistics for %d segments (%s)", len(results), ", ".join(role_names))
        return results

    @staticmethod
    def _clamp(seg, extent: float):
        start = max(seg.start, 0.0)
        end = min(seg.end, extent)
        if (start, end) != (seg.start, seg.end) and start <= end:
            logger.warning("Segment '%s' [%s, %s] clamped to [%s, %s]",
                           seg.name, seg.start, seg.end, start, end)
        return start, end

    @staticmethod
    def _smooth_view(values: np.ndarray, in_range: np.ndarray) -> SegmentStatsRecord:
        window = values[in_range]
        count = window.size
        if count == 0:
            return _EMPTY
        missing = 100.0 * np.count_nonzero(np.isnan(window)) / count
        return _summarise(window, count, missing)

    @staticmethod
    def _valid_view(info: ValidSampleInfo, source_rate: float, start: float, end: float,
                    n_raw: int) -> SegmentStatsRecord:
        t = info.indices / source_rate
        sel = (t >= start - _EPS) & (t <= end + _EPS)
        window = info.values[sel]
        if n_raw == 0:
            return _EMPTY
        return _summarise(window, window.size, 100.0 * window.size / n_raw)


def segments_to_frame(segments: List[Segment]) -> pd.DataFrame:
    """One row per segment, columns ``<role>_<view>_<stat>``.

    Examples
    --------
    >>> df = segments_to_frame(signal.segments)
    >>> df[["name", "mean_smooth_mean_diameter"]]
    """
    return pd.DataFrame([seg.to_header() for seg in segments])
