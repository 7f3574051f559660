import pytest

from conftest import make_reply
from dlpc900ctl.dlp_errors import MalformedReply
from dlpc900ctl.status import (
    Version,
    decode_firmware_version,
    decode_hardware_status,
    decode_main_status,
    describe_hardware_status,
    format_status_bits,
    hardware_status_report,
)

FIRMWARE_REPLY = make_reply(0x03, 0x00, 2, 1, 0x01, 0x00, 0, 3)


class TestFirmwareVersion:

    def test_sample_reply(self):
        info = decode_firmware_version(FIRMWARE_REPLY, product="DLPC900", manufacturer="Texas Instruments")
        assert str(info.application) == "1.2.3"
        assert str(info.api) == "3.0.1"
        assert info.application == Version(1, 2, 3)
        assert info.product == "DLPC900"

    def test_patch_is_16_bit(self):
        info = decode_firmware_version(make_reply(0x34, 0x12, 0, 0, 0xFF, 0xFF, 0, 0))
        assert info.application.patch == 0x1234
        assert info.api.patch == 0xFFFF

    def test_trailing_bytes_are_ignored(self):
        assert str(decode_firmware_version(FIRMWARE_REPLY + bytes(52)).application) == "1.2.3"

    def test_too_short(self):
        with pytest.raises(MalformedReply):
            decode_firmware_version(FIRMWARE_REPLY[:11])

    def test_describe(self):
        text = decode_firmware_version(FIRMWARE_REPLY, "DLPC900", "TI").describe()
        assert "Application Software Version: v1.2.3" in text
        assert "API Software Version: 3.0.1" in text
        assert text.startswith("I am a DLPC900.")


class TestHardwareStatus:

    def test_status_byte(self):
        assert decode_hardware_status(make_reply(0b10000001)) == 0b10000001

    def test_binary_rendering(self):
        assert format_status_bits(0b00000101) == "00000101"

    def test_too_short(self):
        with pytest.raises(MalformedReply):
            decode_hardware_status(bytes(4))

    def test_report_all_good(self):
        lines, errors = describe_hardware_status(0b00000001)
        assert errors == 0
        assert lines[0] == "Internal Initialization Successful"

    def test_report_counts_errors(self):
        lines, errors = describe_hardware_status(0b11001110)
        assert errors == 6
        assert "Sequencer detected an error" in lines

    def test_secondary_controller_is_not_an_error(self):
        _, errors = describe_hardware_status(0b00010001)
        assert errors == 0

    def test_report_marks_error_lines(self):
        report = hardware_status_report(0b00001001)
        assert ("Forced Swap Error occurred", True) in report
        assert ("No Forced Swap Errors", False) not in report
        assert report[0] == ("Internal Initialization Successful", False)


class TestMainStatus:

    def test_bits_read_least_significant_first(self):
        snapshot = decode_main_status(make_reply(0b00010110))
        assert snapshot.bits == (0, 1, 1, 0, 1, 0)
        assert snapshot.labels == (
            "Mirrors not parked",
            "Sequencer running",
            "Video is frozen",
            "External source not locked",
            "Port 1 sync valid",
            "Port 2 sync not valid",
        )

    def test_high_bits_ignored(self):
        snapshot = decode_main_status(make_reply(0b11000000))
        assert snapshot.bits == (0,) * 6
        assert snapshot.raw == 0b11000000

    def test_lookup_by_name(self):
        snapshot = decode_main_status(make_reply(0b00000001))
        assert snapshot["mirrors_parked"].value == 1
        assert snapshot["mirrors_parked"].label == "Mirrors parked"
        with pytest.raises(KeyError):
            snapshot["nonsense"]

    def test_str(self):
        assert str(decode_main_status(make_reply(0b00111111))).startswith("Mirrors parked | Sequencer running")

    def test_too_short(self):
        with pytest.raises(MalformedReply):
            decode_main_status(b"")
