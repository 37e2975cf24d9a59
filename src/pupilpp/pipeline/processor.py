"""Pupil preprocessing pipeline.

Runs one or two raw eye channels through validity filtering, signal
reconstruction, optional eye combination and segment statistics, enforcing
the stage contracts in between, and builds the output channel record.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Union

import numpy as np

from pupilpp.contracts import (
    InvalidInputError,
    assert_reconstructed,
    assert_segment_stats,
    assert_validity_mask,
)
from pupilpp.pupil.combiner import EyeCombiner
from pupilpp.pupil.models import Combined, RawChannel, ReconstructionResult, SmoothSignal
from pupilpp.pupil.pupil_utils import preprocessed_chantype
from pupilpp.pupil.reconstructor import SignalReconstructor
from pupilpp.pupil.segment_stats import SegmentStatsCalculator
from pupilpp.pupil.validity_filter import PupilValidityFilter
from pupilpp.session.channel_io import ChannelRecord, load_channels, write_channel
from pupilpp.session.selection import select_channel, to_raw_channel

if TYPE_CHECKING:
    from pupilpp.schemas import InternalConfig

__all__ = ['PupilProcessor', 'ProcessingOutput']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessingOutput:
    """Everything one preprocessing run produced.

    Attributes
    ----------
    record : ChannelRecord
        Output channel, ready to be written to a session.
    result : Success or Degraded
        Reconstruction status; ``result.signal`` carries the segment
        statistics.
    masks : dict
        Eye name -> final validity mask.
    channel_index : int, optional
        Index of the written channel when the run persisted its output.
    """
    record: ChannelRecord
    result: ReconstructionResult
    masks: Dict[str, np.ndarray]
    channel_index: Optional[int] = None

    @property
    def degraded(self) -> bool:
        return self.result.degraded

    @property
    def signal(self) -> SmoothSignal:
        return self.result.signal


class PupilProcessor:
    """Preprocess pupil channels with a fixed configuration.

    **Processing Pipeline:**

    1. **Validity filter** per eye: range, speed, edge, trendline and
       isolated-island stages produce a validity mask.
    2. **Reconstruction** per eye: PCHIP interpolation of the valid samples
       onto the output grid, zero-phase low-pass, padding to the recording
       duration.
    3. **Combination** (two eyes only): mean of both eyes, NaN only where
       both are missing.
    4. **Segment statistics** for every configured segment.
    5. **Output record**: channel type ``pupil_pp_<eye>`` (or
       ``pupil_pp_c``, keeping the modality of the primary channel), header
       with the valid samples and segments.

    Invalid input raises ``InvalidInputError`` before any numeric work.
    Poor data quality never raises: the result is ``Degraded`` and the
    channel is still produced.

    Example usage::

        processor = PupilProcessor(config)
        out = processor.process(raw_left)
        out.record.values  # preprocessed signal
    """

    def __init__(self, config: "InternalConfig"):
        """Initialize processor with validated configuration.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.
        """
        self.config = config
        self.validity_filter = PupilValidityFilter(config)
        self.reconstructor = SignalReconstructor(config)
        self.combiner = EyeCombiner(config)
        self.stats = SegmentStatsCalculator(config)

    def process(self, primary: RawChannel, secondary: Optional[RawChannel] = None) -> ProcessingOutput:
        """Preprocess one eye, or combine two.

        Parameters
        ----------
        primary : RawChannel
            Eye to preprocess.
        secondary : RawChannel, optional
            Other eye; when given the output is the combined signal.

        Returns
        -------
        ProcessingOutput

        Raises
        ------
        InvalidInputError
            If the two eyes cannot be combined, or the output rate is below
            the source rate.
        ContractViolation
            If a stage broke its invariants (bug).
        """
        if secondary is not None:
            # fail on incompatible eyes before filtering either of them
            self.combiner.check_pair(primary, secondary)
        for raw in (primary, secondary):
            if raw is not None:
                self.reconstructor.check_sample_rate(raw)

        masks = {}
        raw_by_eye = {}
        for raw in (primary, secondary):
            if raw is None:
                continue
            mask = self.validity_filter.filter(raw)
            assert_validity_mask(mask, raw.n_samples)
            masks[raw.eye_label] = mask
            raw_by_eye[raw.eye_label] = raw
            logger.info("Channel %s: %.1f%% of %d samples valid",
                        raw.chantype or raw.eye_label,
                        100.0 * mask.mean() if mask.size else 0.0, raw.n_samples)

        if secondary is None:
            result = self.reconstructor.reconstruct(primary, masks[primary.eye_label])
            chantype = preprocessed_chantype(primary.chantype or f"pupil_{primary.eye_label}")
        else:
            result = self.combiner.combine(
                (raw_by_eye["l"], masks["l"]), (raw_by_eye["r"], masks["r"])
            )
            chantype = preprocessed_chantype(primary.chantype or f"pupil_{primary.eye_label}",
                                             combined=True)

        assert_reconstructed(result.signal)

        segments = self.stats.compute(result.signal)
        assert_segment_stats(segments, result.signal.role.names)
        if segments:
            result = replace(result, signal=result.signal.with_segments(segments))

        record = self._build_record(result, chantype)
        if result.degraded:
            logger.warning("Preprocessed %s is degraded: %s", chantype, result.reason)
        else:
            logger.info("Preprocessed %s: %d samples at %s Hz, %.1f%% missing",
                        chantype, result.signal.values.size, result.signal.sample_rate,
                        100.0 * result.signal.missing_fraction)

        names = {"l": "left", "r": "right"}
        return ProcessingOutput(
            record=record,
            result=result,
            masks={names[eye]: m for eye, m in masks.items()},
        )

    def process_session(self, session_path: Union[str, Path]) -> ProcessingOutput:
        """Load, preprocess and write back the configured channel(s) of a session.

        The channel selectors and write action come from ``config.channel``.

        Returns
        -------
        ProcessingOutput
            With ``channel_index`` set to the index of the written channel.
        """
        session_path = Path(session_path)
        channel_cfg = self.config.channel
        channels = load_channels(session_path)

        index, record = select_channel(channels, channel_cfg.channel)
        primary = to_raw_channel(record)
        logger.info("Processing channel %d (%s) of %s", index, record.chantype, session_path.name)

        secondary = None
        if channel_cfg.combining:
            index_b, record_b = select_channel(channels, channel_cfg.channel_combine)
            if index_b == index:
                raise InvalidInputError(
                    f"channel {index} cannot be combined with itself"
                )
            secondary = to_raw_channel(record_b)
            logger.info("Combining with channel %d (%s)", index_b, record_b.chantype)

        out = self.process(primary, secondary)
        written = write_channel(session_path, out.record, channel_cfg.channel_action)
        return ProcessingOutput(out.record, out.result, out.masks, channel_index=written)

    @staticmethod
    def _build_record(result: ReconstructionResult, chantype: str) -> ChannelRecord:
        signal = result.signal
        header = {
            "valid_samples": {
                name: info.to_header() for name, info in signal.valid_samples.items()
            },
            "source_sample_rate": signal.source_sample_rate,
            "combined": isinstance(signal.role, Combined),
        }
        if signal.segments:
            header["segments"] = [seg.to_header() for seg in signal.segments]
        if result.degraded:
            header["degraded"] = result.reason

        return ChannelRecord(
            chantype=chantype,
            units=signal.unit,
            sample_rate=signal.sample_rate,
            values=np.array(signal.values),
            header=header,
        )
