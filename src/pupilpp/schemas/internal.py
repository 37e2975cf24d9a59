"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional, Union
from pydantic import ConfigDict, Field, field_validator, model_validator
from pupilpp.schemas.base import PupilBaseModel


class InternalBaseModel(PupilBaseModel):
    """Frozen variant of the base model used by every runtime section."""

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalRangeConfig(InternalBaseModel):
    """Runtime range filter configuration."""
    min: float
    max: float

    @model_validator(mode="after")
    def check_bounds(self):
        """Lower bound must sit below the upper bound."""
        if self.min >= self.max:
            raise ValueError(f"range.min ({self.min}) must be below range.max ({self.max})")
        return self


class InternalSpeedConfig(InternalBaseModel):
    """Runtime speed filter configuration."""
    max: float = Field(gt=0)


class InternalGapConfig(InternalBaseModel):
    """Runtime edge filter configuration (seconds)."""
    min_duration: float = Field(ge=0)
    margin_before: float = Field(ge=0)
    margin_after: float = Field(ge=0)


class InternalTrendConfig(InternalBaseModel):
    """Runtime trendline filter configuration."""
    deviation_threshold: float = Field(gt=0)
    smoothing_window: float = Field(gt=0)
    passes: int = Field(ge=0)


class InternalIsolatedIslandsConfig(InternalBaseModel):
    """Runtime island filter configuration (seconds)."""
    min_size: float = Field(ge=0)
    max_gap: float = Field(ge=0)


class InternalLowpassConfig(InternalBaseModel):
    """Runtime low-pass configuration."""
    cutoff: Optional[float] = Field(gt=0)
    order: int = Field(ge=1, le=10)


class InternalSegmentConfig(InternalBaseModel):
    """Runtime segment definition."""
    start: float
    end: float
    name: str


class InternalChannelConfig(InternalBaseModel):
    """Runtime channel selection."""
    channel: Union[int, str]
    channel_combine: Union[int, str]
    channel_action: Literal["add", "replace"]

    @field_validator("channel", "channel_combine", mode="before")
    @classmethod
    def normalize_channel_name(cls, v):
        """Channel types are matched in lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @property
    def combining(self) -> bool:
        """True when a second eye is requested."""
        return self.channel_combine != "none"


class InternalLoggingConfig(InternalBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(InternalBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters (no None for fields that runtime depends on).

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.range_min = config.range.min  # NOT .get()
            self.passes = config.trend.passes

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO type checking
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    range: InternalRangeConfig
    speed: InternalSpeedConfig
    gap: InternalGapConfig
    trend: InternalTrendConfig
    isolated_islands: InternalIsolatedIslandsConfig
    output_sample_rate: float = Field(gt=0)
    lowpass: InternalLowpassConfig
    interp_max_gap: Optional[float] = Field(gt=0)
    channel: InternalChannelConfig
    segments: tuple[InternalSegmentConfig, ...]
    logging: InternalLoggingConfig

    @model_validator(mode="after")
    def check_lowpass_below_nyquist(self):
        """The low-pass cutoff must be representable at the output rate."""
        cutoff = self.lowpass.cutoff
        nyquist = self.output_sample_rate / 2.0
        if cutoff is not None and cutoff >= nyquist:
            raise ValueError(
                f"lowpass.cutoff ({cutoff} Hz) must be below the output Nyquist "
                f"frequency ({nyquist} Hz)"
            )
        return self
