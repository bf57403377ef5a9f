import pytest

from flakeid.utils.epoch_clock import EpochClock
from flakeid.utils.variants import CUSTOM_EPOCH

from helpers import ScriptedTime


@pytest.fixture
def scripted_clock():
    """Builds a clock on the custom epoch driven by scripted Unix timestamps."""

    def build(values, unit="ms"):
        return EpochClock(CUSTOM_EPOCH, unit=unit, time_source=ScriptedTime(values))

    return build
