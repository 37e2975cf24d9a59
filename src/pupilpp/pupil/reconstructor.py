"""Rebuild a continuous, uniformly sampled pupil signal from the valid samples.

The valid samples of one eye are interpolated with a shape-preserving cubic
(PCHIP) onto a uniform grid at the output rate, low-pass filtered with a
zero-phase Butterworth filter and padded with missing markers so that the
output covers exactly the duration of the raw recording.

The output rate is never below the source rate: reconstruction upsamples.
"""

import logging
from typing import TYPE_CHECKING, Tuple

import numpy as np
from scipy.interpolate import PchipInterpolator
from scipy.signal import butter, sosfiltfilt

from pupilpp.contracts import InvalidInputError, expected_output_length
from pupilpp.pupil.models import (
    EYE_NAMES,
    Degraded,
    RawChannel,
    ReconstructionResult,
    SingleEye,
    SmoothSignal,
    Success,
    ValidSampleInfo,
)
from pupilpp.pupil.pupil_utils import round_half_up

if TYPE_CHECKING:
    from pupilpp.schemas import InternalConfig

__all__ = ['SignalReconstructor']

logger = logging.getLogger(__name__)


class SignalReconstructor:
    """Interpolate, filter and pad the valid samples of one eye.

    Poor data never raises here: fewer than two valid samples, or a numerical
    failure while building the signal, yield a ``Degraded`` result holding an
    all-missing signal of the correct length.
    """

    def __init__(self, config: "InternalConfig"):
        self.output_sample_rate = config.output_sample_rate
        self.lowpass_cutoff = config.lowpass.cutoff
        self.lowpass_order = config.lowpass.order
        self.interp_max_gap = config.interp_max_gap

        logger.debug("SignalReconstructor initialized: output_rate=%s Hz, lowpass=%s Hz (order %d)",
                     self.output_sample_rate, self.lowpass_cutoff, self.lowpass_order)

    def reconstruct(self, raw: RawChannel, mask: np.ndarray) -> ReconstructionResult:
        """Reconstruct one eye.

        Parameters
        ----------
        raw : RawChannel
            Raw recording of one eye.
        mask : np.ndarray
            Validity mask from PupilValidityFilter, aligned with ``raw.values``.

        Returns
        -------
        Success or Degraded
            The wrapped SmoothSignal always has
            ``round(output_rate / raw.sample_rate * raw.n_samples)`` samples.

        Raises
        ------
        InvalidInputError
            If the output rate is below the source rate.
        """
        self.check_sample_rate(raw)
        eye = EYE_NAMES[raw.eye_label]
        info = ValidSampleInfo.from_mask(raw.values, mask)
        total = expected_output_length(raw.n_samples, raw.sample_rate, self.output_sample_rate)

        if info.indices.size < 2:
            reason = (f"{eye} eye: {info.indices.size} valid samples of {raw.n_samples}, "
                      "at least 2 are needed for interpolation")
            return self._degraded(raw, info, total, reason)

        try:
            interior, leading = self._build_interior(info, raw.sample_rate)
        except (ValueError, FloatingPointError, np.linalg.LinAlgError) as e:
            return self._degraded(raw, info, total, f"{eye} eye: reconstruction failed ({e})")

        values = self._pad(interior, leading, total)
        logger.debug("Reconstructed %s eye: %d valid of %d raw samples -> %d output samples",
                     eye, info.indices.size, raw.n_samples, total)
        return Success(self._signal(raw, info, values))

    def check_sample_rate(self, raw: RawChannel) -> None:
        """Reject a channel sampled faster than the output rate.

        Raises
        ------
        InvalidInputError
            If ``output_sample_rate`` is below ``raw.sample_rate``.
        """
        if self.output_sample_rate < raw.sample_rate:
            raise InvalidInputError(
                f"output sample rate {self.output_sample_rate} Hz is below the source rate "
                f"{raw.sample_rate} Hz of channel '{raw.chantype or raw.eye_label}'; "
                "reconstruction only upsamples"
            )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _build_interior(self, info: ValidSampleInfo, source_rate: float) -> Tuple[np.ndarray, int]:
        """Uniform signal between the first and last valid sample.

        Returns
        -------
        interior : np.ndarray
            Interpolated (and filtered) samples.
        leading : int
            Output index of the first interior sample.
        """
        fs = self.output_sample_rate
        t_valid = info.indices / source_rate
        t_first = t_valid[0]
        t_last = t_valid[-1]

        n_interior = int(np.floor((t_last - t_first) * fs + 1e-9)) + 1
        grid = t_first + np.arange(n_interior) / fs

        interior = PchipInterpolator(t_valid, info.values)(grid)

        if self.lowpass_cutoff is not None and interior.size > 2:
            interior = self._lowpass(interior, fs)

        if self.interp_max_gap is not None:
            self._blank_long_gaps(interior, grid, t_valid)

        return interior, round_half_up(t_first * fs)

    def _lowpass(self, series: np.ndarray, fs: float) -> np.ndarray:
        """Zero-phase Butterworth low-pass (forward-backward, second-order sections)."""
        sos = butter(self.lowpass_order, self.lowpass_cutoff, btype="low", output="sos", fs=fs)
        padlen = min(3 * (2 * sos.shape[0] + 1), series.size - 1)
        return sosfiltfilt(sos, series, padlen=padlen)

    def _blank_long_gaps(self, interior: np.ndarray, grid: np.ndarray, t_valid: np.ndarray) -> None:
        """Set grid samples strictly inside over-long gaps to NaN, in place."""
        gaps = np.diff(t_valid)
        for k in np.flatnonzero(gaps > self.interp_max_gap + 1e-12):
            inside = (grid > t_valid[k] + 1e-9) & (grid < t_valid[k + 1] - 1e-9)
            interior[inside] = np.nan

    @staticmethod
    def _pad(interior: np.ndarray, leading: int, total: int) -> np.ndarray:
        """Surround the interior with missing markers to reach ``total`` samples."""
        leading = min(leading, total)
        interior = interior[:total - leading]
        trailing = total - leading - interior.size
        return np.concatenate((np.full(leading, np.nan), interior, np.full(trailing, np.nan)))

    def _signal(self, raw: RawChannel, info: ValidSampleInfo, values: np.ndarray) -> SmoothSignal:
        eye = EYE_NAMES[raw.eye_label]
        return SmoothSignal(
            sample_rate=self.output_sample_rate,
            values=values,
            role=SingleEye(raw.eye_label),
            valid_samples={eye: info},
            components={eye: values},
            source_sample_rate=raw.sample_rate,
            n_source_samples=raw.n_samples,
            unit=raw.unit,
        )

    def _degraded(self, raw: RawChannel, info: ValidSampleInfo, total: int, reason: str) -> Degraded:
        logger.warning("Degraded reconstruction of channel '%s': %s",
                       raw.chantype or raw.eye_label, reason)
        return Degraded(self._signal(raw, info, np.full(total, np.nan)), reason)
