"""Pick the channel(s) of a session to preprocess."""

import logging
from typing import List, Tuple, Union

from pupilpp.contracts import ChannelNotFound, InvalidInputError
from pupilpp.pupil.models import RawChannel
from pupilpp.pupil.pupil_utils import get_eye
from pupilpp.session.channel_io import ChannelRecord

__all__ = ['select_channel', 'to_raw_channel']

logger = logging.getLogger(__name__)


def _is_eye_channel(ch: ChannelRecord) -> bool:
    if not ch.chantype.startswith("pupil"):
        return False
    try:
        return get_eye(ch.chantype) in ("l", "r")
    except ValueError:
        return False


def select_channel(channels: List[ChannelRecord],
                   selector: Union[int, str]) -> Tuple[int, ChannelRecord]:
    """Resolve a channel selector.

    Parameters
    ----------
    channels : list of ChannelRecord
        Channels of the session, in order.
    selector : int or str
        - int: channel index
        - ``"pupil"``: the best single-eye pupil channel, i.e. the one with
          the fewest missing samples (ties go to the left eye; among
          channels of the same eye the last one wins)
        - any other string: exact channel type, last match wins

    Returns
    -------
    index : int
    channel : ChannelRecord

    Raises
    ------
    ChannelNotFound
        If nothing matches.
    """
    if isinstance(selector, int):
        if not 0 <= selector < len(channels):
            raise ChannelNotFound(
                f"channel index {selector} out of range (session has {len(channels)} channels)"
            )
        return selector, channels[selector]

    if selector == "pupil":
        return _best_eye(channels)

    matches = [i for i, ch in enumerate(channels) if ch.chantype == selector]
    if not matches:
        raise ChannelNotFound(f"no channel of type '{selector}' in session")
    return matches[-1], channels[matches[-1]]


def _best_eye(channels: List[ChannelRecord]) -> Tuple[int, ChannelRecord]:
    last_of_eye = {}
    for i, ch in enumerate(channels):
        if _is_eye_channel(ch):
            last_of_eye[get_eye(ch.chantype)] = i
    if not last_of_eye:
        raise ChannelNotFound("no single-eye pupil channel in session")

    # "l" sorts before "r": ties on missing count go to the left eye
    index = min(sorted(last_of_eye.items()), key=lambda kv: channels[kv[1]].n_missing)[1]
    logger.info("Selected %s (channel %d) as best eye: %d missing samples",
                channels[index].chantype, index, channels[index].n_missing)
    return index, channels[index]


def to_raw_channel(record: ChannelRecord) -> RawChannel:
    """Build the core's input type from a stored channel.

    Raises
    ------
    InvalidInputError
        If the channel does not record a single eye.
    """
    try:
        eye = get_eye(record.chantype)
    except ValueError as e:
        raise InvalidInputError(str(e)) from e
    if eye not in ("l", "r"):
        raise InvalidInputError(
            f"channel type '{record.chantype}' is not a single-eye channel"
        )
    try:
        return RawChannel(
            sample_rate=record.sample_rate,
            unit=record.units,
            values=record.values,
            eye_label=eye,
            chantype=record.chantype,
        )
    except ValueError as e:
        raise InvalidInputError(f"channel '{record.chantype}': {e}") from e
