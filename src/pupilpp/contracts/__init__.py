"""Pipeline contracts: fail-fast enforcement of stage invariants.

This package enforces semantic guarantees between pipeline stages.
Contracts fail immediately and loudly when a stage does not produce the
invariants it promised.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Algorithms handle data-quality edge cases (Degraded results)
"""

from pupilpp.contracts.failure import (
    ContractViolation,
    InvalidInputError,
    EyeLabelConflict,
    SampleRateMismatch,
    UnitMismatch,
    LengthMismatch,
    ChannelNotFound,
)
from pupilpp.contracts.base import require
from pupilpp.contracts.validity import assert_validity_mask, assert_monotone_invalidation
from pupilpp.contracts.reconstruction import assert_reconstructed, expected_output_length
from pupilpp.contracts.segments import assert_segment_stats

__all__ = [
    "ContractViolation",
    "InvalidInputError",
    "EyeLabelConflict",
    "SampleRateMismatch",
    "UnitMismatch",
    "LengthMismatch",
    "ChannelNotFound",
    "require",
    "assert_validity_mask",
    "assert_monotone_invalidation",
    "assert_reconstructed",
    "expected_output_length",
    "assert_segment_stats",
]
