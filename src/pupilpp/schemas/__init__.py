"""Pydantic configuration schemas for pupilpp.

This module provides strictly typed configuration models for the pupil
preprocessing pipeline. All configuration validation, coercion, and
normalization happens at schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from pupilpp.schemas.resolve import resolve_config
from pupilpp.schemas.internal import InternalConfig
from pupilpp.schemas.param import ParamConfig
from pupilpp.schemas.user import UserConfig
from pupilpp.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
