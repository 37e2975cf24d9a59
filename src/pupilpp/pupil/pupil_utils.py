"""Utility functions shared by the pupil preprocessing stages.

Centralized helper functions for:
- Run-length detection on boolean masks (gaps and islands)
- Half-up rounding used by every sample-count computation
- Channel type parsing (which eye a channel records, derived output types)
"""

import math
from typing import Tuple

import numpy as np

__all__ = [
    'find_runs',
    'round_half_up',
    'seconds_to_samples',
    'get_eye',
    'preprocessed_chantype',
]


# ============================================================================
# ARRAY UTILITIES
# ============================================================================

def find_runs(mask: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Locate maximal runs of True values.

    Parameters
    ----------
    mask : np.ndarray
        1D boolean array.

    Returns
    -------
    starts, stops : np.ndarray
        Start index (inclusive) and stop index (exclusive) of each run, in
        ascending order. Both are empty when the mask has no True value.

    Examples
    --------
    >>> find_runs(np.array([0, 1, 1, 0, 1], dtype=bool))
    (array([1, 4]), array([3, 5]))
    """
    mask = np.asarray(mask, dtype=bool)
    padded = np.concatenate(([False], mask, [False])).astype(np.int8)
    edges = np.diff(padded)
    starts = np.flatnonzero(edges == 1)
    stops = np.flatnonzero(edges == -1)
    return starts, stops


def round_half_up(x: float) -> int:
    """Round to the nearest integer with halves rounded up.

    Unlike the builtin ``round``, 2.5 becomes 3.
    """
    return int(math.floor(x + 0.5))


def seconds_to_samples(seconds: float, sample_rate: float) -> int:
    """Number of whole samples that fit in ``seconds``."""
    # tolerance absorbs float noise such as 0.05 * 1000 = 50.00000000000001
    return int(math.floor(seconds * sample_rate + 1e-9))


# ============================================================================
# CHANNEL TYPE UTILITIES
# ============================================================================

def get_eye(chantype: str) -> str:
    """Detect which eye a channel type refers to.

    Parameters
    ----------
    chantype : str
        Channel type such as ``pupil_l``, ``pupil_pp_r`` or ``pupil_pp_c``.

    Returns
    -------
    str
        ``"l"``, ``"r"`` or ``"c"`` (combined).

    Raises
    ------
    ValueError
        If the channel type does not name an eye.
    """
    parts = chantype.lower().split("_")
    for part in reversed(parts[1:]):
        if part in ("l", "r", "c"):
            return part
    raise ValueError(f"channel type '{chantype}' does not contain a valid eye")


def preprocessed_chantype(chantype: str, combined: bool = False) -> str:
    """Channel type of the preprocessed version of a channel.

    A raw channel gets the ``pp`` marker right after its modality
    (``pupil_l`` -> ``pupil_pp_l``); a channel that is already preprocessed
    keeps its type, so repeated runs build a processing history. With
    ``combined`` the eye suffix becomes ``c`` (``pupil_l`` -> ``pupil_pp_c``).

    Raises
    ------
    ValueError
        If the channel type has no eye suffix.
    """
    parts = chantype.split("_")
    if len(parts) < 2:
        raise ValueError(f"channel type '{chantype}' has no eye suffix")
    if combined:
        eye = get_eye(chantype)
        idx = len(parts) - 1 - [p.lower() for p in parts[::-1]].index(eye)
        parts[idx] = "c"
    if "pp" not in parts:
        parts.insert(1, "pp")
    return "_".join(parts)
