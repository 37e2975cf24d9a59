"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: which channel, which eye to combine with, write mode,
verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional, Union
from pydantic import field_validator
from pupilpp.schemas.base import PupilBaseModel


class CLIConfig(PupilBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(
            channel="pupil_l",
            channel_combine="pupil_r",
            channel_action="replace",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    channel: Optional[Union[int, str]] = None
    channel_combine: Optional[Union[int, str]] = None
    channel_action: Optional[Literal["add", "replace"]] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @field_validator("channel", "channel_combine", mode="before")
    @classmethod
    def parse_channel_index(cls, v):
        """argparse hands over strings; digits select a channel by index."""
        if isinstance(v, str) and v.strip().isdigit():
            return int(v)
        return v

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        channel_overrides = {}
        if self.channel is not None:
            channel_overrides["channel"] = self.channel
        if self.channel_combine is not None:
            channel_overrides["channel_combine"] = self.channel_combine
        if self.channel_action is not None:
            channel_overrides["channel_action"] = self.channel_action

        if channel_overrides:
            overrides["channel"] = channel_overrides

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
