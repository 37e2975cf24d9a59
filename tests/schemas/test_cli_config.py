"""CLIConfig parsing."""

import pytest
from pydantic import ValidationError

from pupilpp.schemas import CLIConfig

pytestmark = pytest.mark.unit


def test_digit_channel_becomes_index():
    cli = CLIConfig(channel="3", channel_combine="4")
    assert cli.channel == 3
    assert cli.channel_combine == 4


def test_channel_type_stays_string():
    cli = CLIConfig(channel="pupil_l")
    assert cli.channel == "pupil_l"


def test_invalid_action_rejected():
    with pytest.raises(ValidationError):
        CLIConfig(channel_action="overwrite")


def test_overrides_only_contain_set_fields():
    assert CLIConfig().to_internal_overrides() == {}
    assert CLIConfig(log_level="DEBUG").to_internal_overrides() == {"logging": {"level": "DEBUG"}}
    assert CLIConfig(channel_action="replace").to_internal_overrides() == {
        "channel": {"channel_action": "replace"}
    }
