"""Pipeline modules.

- processor: Runs the preprocessing stages on one session
"""

from pupilpp.pipeline.processor import PupilProcessor, ProcessingOutput

__all__ = [
    "PupilProcessor",
    "ProcessingOutput",
]
