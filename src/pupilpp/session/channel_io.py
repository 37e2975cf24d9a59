"""Channel storage in a netCDF session file.

A session file holds one data variable per channel, named ``channel_000``,
``channel_001``, ... in channel order. Each variable has its own sample
dimension and carries its metadata as attributes:

- ``chantype``: channel type (``pupil_l``, ``pupil_pp_c``, ...)
- ``units``: physical unit of the values
- ``sample_rate``: sampling rate in Hz
- ``header``: JSON-encoded dict of processing metadata
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

import numpy as np
import xarray as xr

from pupilpp.contracts import InvalidInputError

__all__ = ['ChannelRecord', 'load_channels', 'save_channels', 'write_channel']

logger = logging.getLogger(__name__)

_VAR_PREFIX = "channel_"


@dataclass
class ChannelRecord:
    """One channel as stored in a session file."""
    chantype: str
    units: str
    sample_rate: float
    values: np.ndarray
    header: dict = field(default_factory=dict)

    def __post_init__(self):
        self.values = np.asarray(self.values, dtype=float).reshape(-1)

    @property
    def n_missing(self) -> int:
        return int(np.count_nonzero(np.isnan(self.values)))


def _var_name(index: int) -> str:
    return f"{_VAR_PREFIX}{index:03d}"


def load_channels(path: Union[str, Path]) -> List[ChannelRecord]:
    """Read every channel of a session file, in channel order.

    Raises
    ------
    FileNotFoundError
        If the session file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Session file not found: {path}")

    ds = xr.load_dataset(path, engine="netcdf4")
    names = sorted(n for n in ds.data_vars if str(n).startswith(_VAR_PREFIX))

    channels = []
    for name in names:
        var = ds[name]
        channels.append(ChannelRecord(
            chantype=str(var.attrs["chantype"]),
            units=str(var.attrs.get("units", "")),
            sample_rate=float(var.attrs["sample_rate"]),
            values=var.values,
            header=json.loads(var.attrs.get("header", "{}")),
        ))

    logger.debug("Loaded %d channels from %s", len(channels), path.name)
    return channels


def save_channels(path: Union[str, Path], channels: List[ChannelRecord]) -> None:
    """Write all channels to a session file, replacing its content."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    ds = xr.Dataset()
    for i, ch in enumerate(channels):
        name = _var_name(i)
        ds[name] = xr.DataArray(
            ch.values,
            dims=(f"{name}_sample",),
            attrs={
                "chantype": ch.chantype,
                "units": ch.units,
                "sample_rate": float(ch.sample_rate),
                "header": json.dumps(ch.header),
            },
        )
    ds.attrs["description"] = "Pupil recording session"
    ds.attrs["n_channels"] = len(channels)

    encoding = {var: {"zlib": True, "complevel": 4} for var in ds.data_vars}
    ds.to_netcdf(path, mode='w', engine='netcdf4', format='NETCDF4', encoding=encoding)
    ds.close()


def write_channel(path: Union[str, Path], record: ChannelRecord, action: str = "add") -> int:
    """Persist one channel into a session file.

    Parameters
    ----------
    path : str or Path
        Session file. Created when missing.
    record : ChannelRecord
        Channel to write.
    action : {"add", "replace"}
        ``add`` appends the channel. ``replace`` overwrites the last channel
        with the same channel type, or appends when there is none.

    Returns
    -------
    int
        Index of the written channel.

    Raises
    ------
    InvalidInputError
        If ``action`` is not ``add`` or ``replace``.
    """
    if action not in ("add", "replace"):
        raise InvalidInputError(f"channel action must be 'add' or 'replace', got '{action}'")

    path = Path(path)
    channels = load_channels(path) if path.exists() else []

    index = len(channels)
    if action == "replace":
        matches = [i for i, ch in enumerate(channels) if ch.chantype == record.chantype]
        if matches:
            index = matches[-1]

    if index == len(channels):
        channels.append(record)
    else:
        channels[index] = record

    save_channels(path, channels)
    logger.info("Wrote channel %d (%s, %s) to %s", index, record.chantype, action, path.name)
    return index
