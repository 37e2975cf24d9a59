import numpy as np
import pytest

from tests.helpers.synthetic import make_raw, smooth_trace, write_session


@pytest.fixture
def raw_left():
    return make_raw(smooth_trace(1000, 100.0), eye="l")


@pytest.fixture
def raw_right():
    return make_raw(smooth_trace(1000, 100.0, base=4.2), eye="r")


@pytest.fixture
def session_file(temp_dir):
    """Session with pupil_l (channel 0) and pupil_r (channel 1), 10 s at 100 Hz."""
    return write_session(temp_dir / "session.nc")


@pytest.fixture
def blank_left():
    return make_raw(np.full(1000, np.nan), eye="l")
