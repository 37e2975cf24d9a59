"""Test session channel storage."""

import numpy as np
import pytest

from pupilpp.contracts import InvalidInputError
from pupilpp.session.channel_io import ChannelRecord, load_channels, save_channels, write_channel

pytestmark = pytest.mark.unit


def _record(chantype, value=1.0, n=10, header=None):
    return ChannelRecord(chantype, "mm", 100.0, np.full(n, value), header=header or {})


@pytest.fixture
def session(temp_dir):
    path = temp_dir / "session.nc"
    save_channels(path, [_record("pupil_l"), _record("pupil_r", 2.0)])
    return path


def test_load_preserves_order_and_metadata(session):
    channels = load_channels(session)

    assert [ch.chantype for ch in channels] == ["pupil_l", "pupil_r"]
    assert channels[1].units == "mm"
    assert channels[1].sample_rate == 100.0
    np.testing.assert_array_equal(channels[1].values, np.full(10, 2.0))


def test_missing_session_file(temp_dir):
    with pytest.raises(FileNotFoundError):
        load_channels(temp_dir / "absent.nc")


def test_header_roundtrip(temp_dir):
    path = temp_dir / "s.nc"
    header = {"valid_samples": {"left": {"sample_indices": [1, 2], "valid_percentage": 20.0}},
              "combined": False}
    save_channels(path, [_record("pupil_pp_l", header=header)])

    assert load_channels(path)[0].header == header


def test_nan_values_survive(temp_dir):
    path = temp_dir / "s.nc"
    values = np.array([1.0, np.nan, 3.0])
    save_channels(path, [ChannelRecord("pupil_l", "mm", 10.0, values)])

    loaded = load_channels(path)[0]
    assert loaded.n_missing == 1
    np.testing.assert_array_equal(loaded.values, values)


def test_channels_of_different_length(temp_dir):
    path = temp_dir / "s.nc"
    save_channels(path, [_record("pupil_l", n=10), _record("pupil_pp_l", n=100)])

    assert [ch.values.size for ch in load_channels(path)] == [10, 100]


class TestWriteChannel:

    def test_add_appends(self, session):
        index = write_channel(session, _record("pupil_pp_l", 3.0), "add")

        channels = load_channels(session)
        assert index == 2
        assert len(channels) == 3
        assert channels[2].chantype == "pupil_pp_l"

    def test_add_twice_keeps_both(self, session):
        write_channel(session, _record("pupil_pp_l", 3.0), "add")
        index = write_channel(session, _record("pupil_pp_l", 4.0), "add")

        assert index == 3
        assert len(load_channels(session)) == 4

    def test_replace_overwrites_last_of_same_type(self, session):
        write_channel(session, _record("pupil_pp_l", 3.0), "add")
        write_channel(session, _record("pupil_pp_l", 4.0), "add")

        index = write_channel(session, _record("pupil_pp_l", 5.0), "replace")

        channels = load_channels(session)
        assert index == 3
        assert len(channels) == 4
        assert channels[2].values[0] == 3.0
        assert channels[3].values[0] == 5.0

    def test_replace_without_match_appends(self, session):
        index = write_channel(session, _record("pupil_pp_c"), "replace")

        assert index == 2
        assert len(load_channels(session)) == 3

    def test_creates_missing_session(self, temp_dir):
        path = temp_dir / "new.nc"

        assert write_channel(path, _record("pupil_pp_l")) == 0
        assert path.exists()

    def test_invalid_action(self, session):
        with pytest.raises(InvalidInputError, match="add"):
            write_channel(session, _record("pupil_pp_l"), "overwrite")
