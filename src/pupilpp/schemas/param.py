"""ParamConfig: Expert defaults for pupil preprocessing.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Defaults follow Kret & Sjak-Shie (2018), "Preprocessing pupil size data:
Guidelines and code", converted to seconds and absolute thresholds, with
millimetres as the assumed unit.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional, Union
from pydantic import Field, field_validator, model_validator
from pupilpp.schemas.base import PupilBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class RangeConfig(PupilBaseModel):
    """Physical bounds of a plausible pupil diameter."""
    min: float = Field(1.5, description="Smallest valid diameter")
    max: float = Field(9.0, description="Largest valid diameter")

    @field_validator("min", "max", mode="before")
    @classmethod
    def coerce_to_float(cls, v):
        """Allow int or float for bounds."""
        return float(v)


class SpeedConfig(PupilBaseModel):
    """Dilation speed filter."""
    max: float = Field(10.0, gt=0, description="Max |d diameter / dt| in unit/s")


class GapConfig(PupilBaseModel):
    """Edge filter around temporal gaps, all in seconds."""
    min_duration: float = Field(0.075, ge=0)
    margin_before: float = Field(0.05, ge=0)
    margin_after: float = Field(0.05, ge=0)


class TrendConfig(PupilBaseModel):
    """Iterative trendline deviation filter."""
    deviation_threshold: float = Field(0.5, gt=0)
    smoothing_window: float = Field(0.5, gt=0, description="Moving average window in seconds")
    passes: int = Field(4, ge=0)


class IsolatedIslandsConfig(PupilBaseModel):
    """Isolated valid-sample island filter, in seconds."""
    min_size: float = Field(0.05, ge=0)
    max_gap: float = Field(0.04, ge=0)


class LowpassConfig(PupilBaseModel):
    """Zero-phase Butterworth filter applied to the reconstructed signal."""
    cutoff: Optional[float] = Field(4.0, gt=0, description="Cutoff in Hz, None disables")
    order: int = Field(4, ge=1, le=10)


class SegmentConfig(PupilBaseModel):
    """Named analysis window in absolute seconds."""
    start: float
    end: float
    name: str = Field(min_length=1)

    @model_validator(mode="after")
    def check_ordering(self):
        """A segment must not end before it starts."""
        if self.end < self.start:
            raise ValueError(
                f"segment '{self.name}' ends ({self.end}) before it starts ({self.start})"
            )
        return self


class ChannelConfig(PupilBaseModel):
    """Which channels to process and how the result is written back."""
    channel: Union[int, str] = "pupil"
    channel_combine: Union[int, str] = "none"
    channel_action: Literal["add", "replace"] = "add"

    @field_validator("channel", "channel_combine", mode="before")
    @classmethod
    def normalize_channel_name(cls, v):
        """Normalize channel type names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class LoggingConfig(PupilBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(PupilBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all pipeline parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    range: RangeConfig = Field(default_factory=RangeConfig)
    speed: SpeedConfig = Field(default_factory=SpeedConfig)
    gap: GapConfig = Field(default_factory=GapConfig)
    trend: TrendConfig = Field(default_factory=TrendConfig)
    isolated_islands: IsolatedIslandsConfig = Field(default_factory=IsolatedIslandsConfig)
    output_sample_rate: float = Field(1000.0, gt=0, description="Reconstruction rate in Hz")
    lowpass: LowpassConfig = Field(default_factory=LowpassConfig)
    interp_max_gap: Optional[float] = Field(None, gt=0, description="Longest bridged gap in seconds")
    channel: ChannelConfig = Field(default_factory=ChannelConfig)
    segments: list[SegmentConfig] = Field(default_factory=list)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
