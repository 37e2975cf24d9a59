"""Reconstruction stage contract.

Enforces the output length law and the structure of a smooth signal.
"""

import math

import numpy as np
from pupilpp.contracts.base import require


def expected_output_length(n_source_samples: int, source_rate: float, output_rate: float) -> int:
    """Output length for a raw series of ``n_source_samples`` samples.

    ``round(output_rate / source_rate * n_source_samples)`` with halves
    rounded up.
    """
    return int(math.floor(output_rate / source_rate * n_source_samples + 0.5))


def assert_reconstructed(signal) -> None:
    """Enforce reconstruction stage contract.

    Called after SignalReconstructor.reconstruct() and after
    EyeCombiner.combine(). Verifies the output duration matches the input
    duration and every component is aligned with the output values.

    Parameters
    ----------
    signal : SmoothSignal
        Reconstructed signal.

    Raises
    ------
    ContractViolation
    """
    expected = expected_output_length(
        signal.n_source_samples, signal.source_sample_rate, signal.sample_rate
    )
    require(
        signal.values.ndim == 1,
        f"Reconstruction contract violated: values have {signal.values.ndim} dims, expected 1"
    )
    require(
        signal.values.size == expected,
        f"Reconstruction contract violated: {signal.values.size} output samples, "
        f"expected {expected} for {signal.n_source_samples} samples at "
        f"{signal.source_sample_rate} Hz resampled to {signal.sample_rate} Hz"
    )
    require(
        not np.isinf(signal.values).any(),
        "Reconstruction contract violated: output contains infinite values"
    )
    for name in signal.role.names:
        require(
            name in signal.components,
            f"Reconstruction contract violated: missing component '{name}'"
        )
        require(
            signal.components[name].size == signal.values.size,
            f"Reconstruction contract violated: component '{name}' has "
            f"{signal.components[name].size} samples, expected {signal.values.size}"
        )
    for name, info in signal.valid_samples.items():
        require(
            info.values.size == info.indices.size,
            f"Reconstruction contract violated: valid samples of '{name}' are misaligned"
        )
        require(
            info.indices.size == 0 or (
                info.indices[0] >= 0 and info.indices[-1] < signal.n_source_samples
                and bool(np.all(np.diff(info.indices) > 0))
            ),
            f"Reconstruction contract violated: valid sample indices of '{name}' "
            "must be strictly increasing raw sample positions"
        )
