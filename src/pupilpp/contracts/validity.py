"""Validity filter contract.

Enforces that every stage mask is a boolean array aligned with the raw
series, and that no stage re-validates a sample an earlier stage dropped.
"""

import numpy as np
from pupilpp.contracts.base import require


def assert_validity_mask(mask: np.ndarray, n_samples: int) -> None:
    """Enforce the shape and type of a validity mask.

    Parameters
    ----------
    mask : np.ndarray
        Mask produced by a filter stage.
    n_samples : int
        Length of the raw series the mask belongs to.

    Raises
    ------
    ContractViolation
    """
    require(
        isinstance(mask, np.ndarray),
        f"Validity contract violated: mask is {type(mask)}, expected ndarray"
    )
    require(
        mask.dtype == bool,
        f"Validity contract violated: mask dtype is {mask.dtype}, expected bool"
    )
    require(
        mask.ndim == 1 and mask.size == n_samples,
        f"Validity contract violated: mask shape {mask.shape}, expected ({n_samples},)"
    )


def assert_monotone_invalidation(before: np.ndarray, after: np.ndarray, stage: str) -> None:
    """Enforce that a stage only removes samples.

    Raises
    ------
    ContractViolation
        If any sample invalid before ``stage`` is valid after it.
    """
    revived = int(np.count_nonzero(after & ~before))
    require(
        revived == 0,
        f"Validity contract violated: stage '{stage}' re-validated {revived} samples"
    )
