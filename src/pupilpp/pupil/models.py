"""Value types flowing through the pupil preprocessing core.

Every array held by these types is stored as a read-only numpy array, so a
value handed from one stage to the next cannot be modified in place by a
later stage.
"""

from dataclasses import dataclass, field
from typing import Union

import numpy as np

__all__ = [
    'RawChannel',
    'ValidSampleInfo',
    'SmoothSignal',
    'Segment',
    'SegmentStatsRecord',
    'SingleEye',
    'Combined',
    'EyeRole',
    'Success',
    'Degraded',
    'ReconstructionResult',
    'EYE_NAMES',
]

EYE_NAMES = {"l": "left", "r": "right", "c": "mean"}


def _frozen_array(values, dtype=float) -> np.ndarray:
    arr = np.array(values, dtype=dtype, copy=True).reshape(-1)
    arr.setflags(write=False)
    return arr


# =============================================================================
# Inputs
# =============================================================================

@dataclass(frozen=True)
class RawChannel:
    """One eye's raw pupil recording.

    Parameters
    ----------
    sample_rate : float
        Sampling rate in Hz, strictly positive.
    unit : str
        Physical unit of ``values`` (e.g. ``"mm"``).
    values : array-like
        Diameter samples; NaN marks samples the recorder could not measure.
    eye_label : str
        ``"l"`` or ``"r"``.
    chantype : str
        Channel type in the session file (e.g. ``"pupil_l"``).
    """
    sample_rate: float
    unit: str
    values: np.ndarray
    eye_label: str
    chantype: str = ""

    def __post_init__(self):
        if not self.sample_rate > 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.eye_label not in ("l", "r"):
            raise ValueError(f"eye_label must be 'l' or 'r', got {self.eye_label!r}")
        object.__setattr__(self, "values", _frozen_array(self.values))

    @property
    def n_samples(self) -> int:
        return int(self.values.size)


# =============================================================================
# Eye roles
# =============================================================================

@dataclass(frozen=True)
class SingleEye:
    """Signal originating from one eye."""
    label: str

    @property
    def names(self) -> tuple:
        return (EYE_NAMES[self.label],)


@dataclass(frozen=True)
class Combined:
    """Mean of the left and right eye."""

    @property
    def names(self) -> tuple:
        return ("left", "right", "mean")


EyeRole = Union[SingleEye, Combined]


# =============================================================================
# Reconstruction outputs
# =============================================================================

@dataclass(frozen=True)
class ValidSampleInfo:
    """The subset of raw samples that survived the validity filter."""
    values: np.ndarray
    indices: np.ndarray
    fraction_valid: float

    def __post_init__(self):
        object.__setattr__(self, "values", _frozen_array(self.values))
        object.__setattr__(self, "indices", _frozen_array(self.indices, dtype=np.int64))

    @classmethod
    def from_mask(cls, raw_values: np.ndarray, mask: np.ndarray) -> "ValidSampleInfo":
        indices = np.flatnonzero(mask)
        fraction = float(indices.size / mask.size) if mask.size else 0.0
        return cls(values=np.asarray(raw_values)[indices], indices=indices, fraction_valid=fraction)

    def to_header(self) -> dict:
        """JSON-friendly representation stored in the output channel header."""
        return {
            "data": self.values.tolist(),
            "sample_indices": self.indices.tolist(),
            "valid_percentage": 100.0 * self.fraction_valid,
        }


@dataclass(frozen=True)
class SegmentStatsRecord:
    """Summary of one segment for one eye-role and one view."""
    mean_diameter: float
    min_diameter: float
    max_diameter: float
    missing_or_valid_percent: float
    sample_count: int


@dataclass(frozen=True)
class Segment:
    """Named analysis window with its statistics.

    ``smooth_stats`` and ``valid_stats`` map eye-role names (``"left"``,
    ``"right"``, ``"mean"``) to the statistics of the smooth-signal view and
    the valid-samples view.
    """
    start: float
    end: float
    name: str
    smooth_stats: dict = field(default_factory=dict)
    valid_stats: dict = field(default_factory=dict)

    def to_header(self) -> dict:
        out = {"start": self.start, "end": self.end, "name": self.name}
        for view, stats in (("smooth", self.smooth_stats), ("valid", self.valid_stats)):
            for role, record in stats.items():
                prefix = f"{role}_{view}"
                out[f"{prefix}_mean_diameter"] = record.mean_diameter
                out[f"{prefix}_min_diameter"] = record.min_diameter
                out[f"{prefix}_max_diameter"] = record.max_diameter
                suffix = "missing_percent" if view == "smooth" else "valid_percent"
                out[f"{prefix}_{suffix}"] = record.missing_or_valid_percent
                out[f"{prefix}_sample_count"] = record.sample_count
        return out


@dataclass(frozen=True)
class SmoothSignal:
    """Reconstructed, uniformly sampled pupil signal.

    Parameters
    ----------
    sample_rate : float
        Output sampling rate in Hz.
    values : np.ndarray
        Output samples; NaN is the missing marker.
    role : EyeRole
        Which eye(s) the values come from.
    valid_samples : dict
        Eye-role name -> ValidSampleInfo.
    components : dict
        Eye-role name -> smooth series of the same length as ``values``.
        For a single eye it holds ``values`` under that eye's name; for a
        combined signal it holds ``left``, ``right`` and ``mean``.
    source_sample_rate : float
        Sampling rate of the raw channel(s).
    n_source_samples : int
        Length of the raw channel(s).
    unit : str
    segments : tuple of Segment
    """
    sample_rate: float
    values: np.ndarray
    role: EyeRole
    valid_samples: dict
    components: dict
    source_sample_rate: float
    n_source_samples: int
    unit: str = ""
    segments: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "values", _frozen_array(self.values))
        object.__setattr__(
            self, "components", {k: _frozen_array(v) for k, v in self.components.items()}
        )

    @property
    def missing_fraction(self) -> float:
        if self.values.size == 0:
            return 1.0
        return float(np.mean(np.isnan(self.values)))

    def with_segments(self, segments) -> "SmoothSignal":
        """Return a copy carrying the given segment statistics."""
        return SmoothSignal(
            sample_rate=self.sample_rate,
            values=self.values,
            role=self.role,
            valid_samples=self.valid_samples,
            components=self.components,
            source_sample_rate=self.source_sample_rate,
            n_source_samples=self.n_source_samples,
            unit=self.unit,
            segments=tuple(segments),
        )


@dataclass(frozen=True)
class Success:
    """Reconstruction completed normally."""
    signal: SmoothSignal

    @property
    def degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class Degraded:
    """Reconstruction fell back to an all-missing (or partly missing) signal."""
    signal: SmoothSignal
    reason: str

    @property
    def degraded(self) -> bool:
        return True


ReconstructionResult = Union[Success, Degraded]
