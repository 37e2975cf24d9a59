"""Combine the left and right eye into one mean pupil signal."""

import logging
from typing import TYPE_CHECKING, Tuple

import numpy as np

from pupilpp.contracts import (
    EyeLabelConflict,
    LengthMismatch,
    SampleRateMismatch,
    UnitMismatch,
)
from pupilpp.pupil.models import (
    Combined,
    Degraded,
    RawChannel,
    ReconstructionResult,
    SmoothSignal,
    Success,
    ValidSampleInfo,
)
from pupilpp.pupil.reconstructor import SignalReconstructor

if TYPE_CHECKING:
    from pupilpp.schemas import InternalConfig

__all__ = ['EyeCombiner', 'nan_pair_mean']

logger = logging.getLogger(__name__)

EyeInput = Tuple[RawChannel, np.ndarray]


def nan_pair_mean(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Element-wise mean of two series ignoring NaN.

    Where only one series has a value that value is used; where both are
    NaN the result is NaN.
    """
    a_nan = np.isnan(a)
    b_nan = np.isnan(b)
    return np.where(a_nan, b, np.where(b_nan, a, (a + b) / 2.0))


class EyeCombiner:
    """Reconstruct both eyes and merge them into a ``Combined`` signal.

    Preconditions are checked before any numeric work, each failing with its
    own InvalidInputError subclass:

    1. the two channels come from different eyes (``EyeLabelConflict``)
    2. they share the sampling rate (``SampleRateMismatch``)
    3. they share the unit (``UnitMismatch``)
    4. they have the same number of samples (``LengthMismatch``)
    """

    def __init__(self, config: "InternalConfig"):
        self.reconstructor = SignalReconstructor(config)

    def combine(self, first: EyeInput, second: EyeInput) -> ReconstructionResult:
        """Combine two single-eye inputs.

        Parameters
        ----------
        first, second : tuple of (RawChannel, np.ndarray)
            Raw channel and validity mask of each eye, in any order.

        Returns
        -------
        Success or Degraded
            Degraded when at least one eye could not be reconstructed.
        """
        if self.check_pair(first[0], second[0]) == "l":
            (raw_l, mask_l), (raw_r, mask_r) = first, second
        else:
            (raw_l, mask_l), (raw_r, mask_r) = second, first

        result_l = self.reconstructor.reconstruct(raw_l, mask_l)
        result_r = self.reconstructor.reconstruct(raw_r, mask_r)
        sig_l = result_l.signal
        sig_r = result_r.signal

        mean = nan_pair_mean(sig_l.values, sig_r.values)
        signal = SmoothSignal(
            sample_rate=sig_l.sample_rate,
            values=mean,
            role=Combined(),
            valid_samples={
                "left": sig_l.valid_samples["left"],
                "right": sig_r.valid_samples["right"],
                "mean": self._combined_valid_samples(raw_l, mask_l, raw_r, mask_r),
            },
            components={"left": sig_l.values, "right": sig_r.values, "mean": mean},
            source_sample_rate=raw_l.sample_rate,
            n_source_samples=raw_l.n_samples,
            unit=raw_l.unit,
        )

        reasons = [r.reason for r in (result_l, result_r) if r.degraded]
        if reasons:
            logger.warning("Combined signal is degraded: %s", "; ".join(reasons))
            return Degraded(signal, "; ".join(reasons))

        logger.info("Combined left and right eye: %.1f%% of mean signal missing",
                    100.0 * signal.missing_fraction)
        return Success(signal)

    @staticmethod
    def check_pair(raw_a: RawChannel, raw_b: RawChannel) -> str:
        """Validate that two channels can be combined.

        Returns
        -------
        str
            Eye label of ``raw_a``.

        Raises
        ------
        InvalidInputError
            The subclass naming the first failed precondition.
        """
        if raw_a.eye_label == raw_b.eye_label:
            raise EyeLabelConflict(
                f"cannot combine two channels of the same eye ('{raw_a.eye_label}')"
            )
        if raw_a.sample_rate != raw_b.sample_rate:
            raise SampleRateMismatch(
                f"cannot combine channels sampled at {raw_a.sample_rate} Hz and {raw_b.sample_rate} Hz"
            )
        if raw_a.unit != raw_b.unit:
            raise UnitMismatch(
                f"cannot combine channels in units '{raw_a.unit}' and '{raw_b.unit}'"
            )
        if raw_a.n_samples != raw_b.n_samples:
            raise LengthMismatch(
                f"cannot combine channels of {raw_a.n_samples} and {raw_b.n_samples} samples"
            )
        return raw_a.eye_label

    @staticmethod
    def _combined_valid_samples(raw_l: RawChannel, mask_l: np.ndarray,
                                raw_r: RawChannel, mask_r: np.ndarray) -> ValidSampleInfo:
        """Raw samples valid in at least one eye, averaged where both are."""
        indices = np.flatnonzero(mask_l | mask_r)
        left = np.where(mask_l[indices], raw_l.values[indices], np.nan)
        right = np.where(mask_r[indices], raw_r.values[indices], np.nan)
        n = raw_l.n_samples
        return ValidSampleInfo(
            values=nan_pair_mean(left, right),
            indices=indices,
            fraction_valid=float(indices.size / n) if n else 0.0,
        )
