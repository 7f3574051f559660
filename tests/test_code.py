"""
Smoke test against a real DLPC900. Skipped unless DLPC900_HARDWARE=1 is set and the EVM is plugged in.
"""
import os

import pytest

from dlpc900ctl import ControllerConfig, DeviceController, DisplayMode, PatternRecord
from dlpc900ctl.status import describe_hardware_status

pytestmark = [
    pytest.mark.hardware,
    pytest.mark.skipif(os.environ.get("DLPC900_HARDWARE") != "1", reason="no DLPC900 attached"),
]


@pytest.fixture
def dlp():
    with DeviceController(config=ControllerConfig.from_env()) as dmd:
        yield dmd


def test_reading_some_properties(dlp):
    info = dlp.query_firmware_version()
    assert info.application.major > 0
    assert len(dlp.query_main_status().flags) == 6
    _, errors = describe_hardware_status(dlp.query_hardware_status())
    assert errors == 0


def test_pattern_mode_roundtrip(dlp):
    dlp.stop_pattern()
    dlp.set_display_mode(DisplayMode.PATTERN)
    assert dlp.query_display_mode() is DisplayMode.PATTERN
    dlp.define_pattern(PatternRecord.build(pattern_index=0, exposure_us=15000, bitdepth=8))
    dlp.configure_pattern_count(1, 0)
    dlp.start_pattern()
    assert dlp.query_main_status()["sequencer_running"].value == 1
    dlp.stop_pattern()


def test_sleep_and_wake(dlp):
    assert dlp.sleep()
    assert dlp.wakeup()
