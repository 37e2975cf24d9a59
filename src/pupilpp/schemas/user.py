"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., PUPIL_MIN → range.min, CHANNEL → channel).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys and integers where floats are expected,
but unknown keys are rejected so that a typo never silently falls back to
a default.
"""

from typing import Literal, Optional, Union
from pydantic import Field, field_validator
from pupilpp.schemas.base import PupilBaseModel
from pupilpp.schemas.param import SegmentConfig


class UserRangeConfig(PupilBaseModel):
    """User-facing range filter config."""
    min: Optional[float] = None
    max: Optional[float] = None


class UserSpeedConfig(PupilBaseModel):
    """User-facing speed filter config."""
    max: Optional[float] = None


class UserGapConfig(PupilBaseModel):
    """User-facing edge filter config."""
    min_duration: Optional[float] = None
    margin_before: Optional[float] = None
    margin_after: Optional[float] = None


class UserTrendConfig(PupilBaseModel):
    """User-facing trendline filter config."""
    deviation_threshold: Optional[float] = None
    smoothing_window: Optional[float] = None
    passes: Optional[int] = None


class UserIsolatedIslandsConfig(PupilBaseModel):
    """User-facing island filter config."""
    min_size: Optional[float] = None
    max_gap: Optional[float] = None


class UserLowpassConfig(PupilBaseModel):
    """User-facing low-pass config.

    ``cutoff=None`` means "not overridden"; set ``disable=True`` to turn
    the filter off.
    """
    cutoff: Optional[float] = None
    order: Optional[int] = None
    disable: bool = False


class UserChannelConfig(PupilBaseModel):
    """User-facing channel selection config."""
    channel: Optional[Union[int, str]] = None
    channel_combine: Optional[Union[int, str]] = None
    channel_action: Optional[Literal["add", "replace"]] = None


class UserConfig(PupilBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    This config is converted to internal overrides during resolution.

    Usage
    -----
        user_cfg = UserConfig(
            PUPIL_MIN=2,
            PUPIL_MAX=8,
            OUTPUT_SAMPLE_RATE=100,
            CHANNEL="pupil_l",
            CHANNEL_COMBINE="pupil_r",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Range / speed settings (flat aliases)
    pupil_min: Optional[float] = Field(None, alias="PUPIL_MIN")
    pupil_max: Optional[float] = Field(None, alias="PUPIL_MAX")
    speed_max: Optional[float] = Field(None, alias="SPEED_MAX")

    # Trend settings (flat aliases)
    trend_threshold: Optional[float] = Field(None, alias="TREND_THRESHOLD")
    trend_passes: Optional[int] = Field(None, alias="TREND_PASSES")

    # Reconstruction settings (flat aliases)
    output_sample_rate: Optional[float] = Field(None, alias="OUTPUT_SAMPLE_RATE")
    interp_max_gap: Optional[float] = Field(None, alias="INTERP_MAX_GAP")

    # Channel settings (flat aliases)
    channel: Optional[Union[int, str]] = Field(None, alias="CHANNEL")
    channel_combine: Optional[Union[int, str]] = Field(None, alias="CHANNEL_COMBINE")
    channel_action: Optional[Literal["add", "replace"]] = Field(None, alias="CHANNEL_ACTION")

    segments: Optional[list[SegmentConfig]] = Field(None, alias="SEGMENTS")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Nested overrides (advanced users)
    range: Optional[UserRangeConfig] = None
    speed: Optional[UserSpeedConfig] = None
    gap: Optional[UserGapConfig] = None
    trend: Optional[UserTrendConfig] = None
    isolated_islands: Optional[UserIsolatedIslandsConfig] = None
    lowpass: Optional[UserLowpassConfig] = None
    channels: Optional[UserChannelConfig] = None

    model_config = PupilBaseModel.model_config.copy()
    model_config.update({"populate_by_name": True})

    @field_validator("pupil_min", "pupil_max", "speed_max", "output_sample_rate", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        # Range section
        range_cfg = {}
        if self.pupil_min is not None:
            range_cfg["min"] = self.pupil_min
        if self.pupil_max is not None:
            range_cfg["max"] = self.pupil_max
        if self.range is not None:
            range_cfg.update(self.range.model_dump(exclude_none=True))
        if range_cfg:
            overrides["range"] = range_cfg

        # Speed section
        speed_cfg = {}
        if self.speed_max is not None:
            speed_cfg["max"] = self.speed_max
        if self.speed is not None:
            speed_cfg.update(self.speed.model_dump(exclude_none=True))
        if speed_cfg:
            overrides["speed"] = speed_cfg

        if self.gap is not None:
            gap_cfg = self.gap.model_dump(exclude_none=True)
            if gap_cfg:
                overrides["gap"] = gap_cfg

        # Trend section
        trend_cfg = {}
        if self.trend_threshold is not None:
            trend_cfg["deviation_threshold"] = self.trend_threshold
        if self.trend_passes is not None:
            trend_cfg["passes"] = self.trend_passes
        if self.trend is not None:
            trend_cfg.update(self.trend.model_dump(exclude_none=True))
        if trend_cfg:
            overrides["trend"] = trend_cfg

        if self.isolated_islands is not None:
            islands_cfg = self.isolated_islands.model_dump(exclude_none=True)
            if islands_cfg:
                overrides["isolated_islands"] = islands_cfg

        if self.output_sample_rate is not None:
            overrides["output_sample_rate"] = self.output_sample_rate
        if self.interp_max_gap is not None:
            overrides["interp_max_gap"] = self.interp_max_gap

        # Lowpass section
        if self.lowpass is not None:
            lowpass_cfg = self.lowpass.model_dump(exclude_none=True, exclude={"disable"})
            if self.lowpass.disable:
                lowpass_cfg["cutoff"] = None
            if lowpass_cfg:
                overrides["lowpass"] = lowpass_cfg

        # Channel section
        channel_cfg = {}
        if self.channel is not None:
            channel_cfg["channel"] = self.channel
        if self.channel_combine is not None:
            channel_cfg["channel_combine"] = self.channel_combine
        if self.channel_action is not None:
            channel_cfg["channel_action"] = self.channel_action
        if self.channels is not None:
            channel_cfg.update(self.channels.model_dump(exclude_none=True))
        if channel_cfg:
            overrides["channel"] = channel_cfg

        if self.segments is not None:
            overrides["segments"] = [seg.model_dump() for seg in self.segments]

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
