"""Session storage.

- channel_io: Read and write channels of a netCDF session file
- selection: Pick the channel(s) to preprocess
"""

from pupilpp.session.channel_io import ChannelRecord, load_channels, save_channels, write_channel
from pupilpp.session.selection import select_channel, to_raw_channel

__all__ = [
    "ChannelRecord",
    "load_channels",
    "save_channels",
    "write_channel",
    "select_channel",
    "to_raw_channel",
]
