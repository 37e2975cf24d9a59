"""`pupilpp` - validity filtering and reconstruction of pupil-size recordings.

Subpackages:
- schemas: Configuration models and resolution
- contracts: Stage invariants enforced between pipeline steps
- pupil: Validity filter, reconstruction, eye combination, segment statistics
- session: Channel I/O for session files
- pipeline: Single-invocation processor
- cli: Command-line runner
"""

__version__ = "0.1.0"
