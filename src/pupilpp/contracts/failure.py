"""Centralized failure taxonomy.

Two families of exceptions leave the pipeline:

- ``InvalidInputError``: the caller asked for something impossible (bad
  settings, mismatched eyes, malformed segments, unknown channel). Raised
  before any numeric work, nothing is written.
- ``ContractViolation``: a pipeline stage did not produce the invariants it
  promised. This is a bug, never a data problem.

Poor data quality is NOT an exception: it is reported through the
``Degraded`` reconstruction result.
"""


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic, not bad user input or recoverable
    data-quality issues. It means a pipeline stage did not produce the
    invariants it promised.

    Key distinction:
    - InvalidInputError: User/config error (fails fast, before numeric work)
    - ContractViolation: Pipeline bug (programmer error)
    - Degraded result: Recoverable data-quality issue
    """
    pass


class InvalidInputError(ValueError):
    """Raised when inputs or settings cannot be processed."""
    pass


class EyeLabelConflict(InvalidInputError):
    """Both channels handed to the combiner come from the same eye."""
    pass


class SampleRateMismatch(InvalidInputError):
    """Channels to combine were recorded at different sampling rates."""
    pass


class UnitMismatch(InvalidInputError):
    """Channels to combine are expressed in different units."""
    pass


class LengthMismatch(InvalidInputError):
    """Channels to combine have a different number of samples."""
    pass


class ChannelNotFound(InvalidInputError):
    """No channel in the session matches the requested selector."""
    pass
