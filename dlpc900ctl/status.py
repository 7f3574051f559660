"""Decoding of version and status replies (dlpc900 user guide, section 2.1)."""

from dataclasses import dataclass

from dlpc900ctl.commands import HEADER_LENGTH
from dlpc900ctl.dlp_errors import MalformedReply

FIRMWARE_REPLY_LENGTH = HEADER_LENGTH + 8
STATUS_REPLY_LENGTH = HEADER_LENGTH + 1

# (name, text when bit is 0, text when bit is 1), bit 0 first
MAIN_STATUS_BITS = (
    ("mirrors_parked", "Mirrors not parked", "Mirrors parked"),
    ("sequencer_running", "Sequencer stopped", "Sequencer running"),
    ("video_frozen", "Video is running", "Video is frozen"),
    ("external_source_locked", "External source not locked", "External source locked"),
    ("port1_sync_valid", "Port 1 sync not valid", "Port 1 sync valid"),
    ("port2_sync_valid", "Port 2 sync not valid", "Port 2 sync valid"),
)

# (bit, text when 0, text when 1, which value counts as an error)
HARDWARE_STATUS_BITS = (
    (0, "Internal Initialization Error", "Internal Initialization Successful", 0),
    (1, "System is compatible", "Incompatible Controller or DMD, or wrong firmware loaded on system", 1),
    (2, "DMD Reset Controller has no errors",
     "DMD Reset Controller Error: Multiple overlapping bias or reset operations are accessing the same DMD block", 1),
    (3, "No Forced Swap Errors", "Forced Swap Error occurred", 1),
    (4, "No Secondary Controller Present", "Secondary Controller Present and Ready", None),
    (6, "Sequencer Abort Status reports no errors",
     "Sequencer has detected an error condition that caused an abort", 1),
    (7, "Sequencer reports no errors", "Sequencer detected an error", 1),
)


@dataclass(frozen=True)
class Version:
    major: int
    minor: int
    patch: int

    def __str__(self):
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class FirmwareInfo:
    application: Version
    api: Version
    product: str = ""
    manufacturer: str = ""

    def describe(self) -> str:
        return (f"I am a {self.product}. My personal details are:\n"
                f"     Application Software Version: v{self.application}\n"
                f"     API Software Version: {self.api}\n"
                f"If I don't work complain to my manufacturer {self.manufacturer}")


@dataclass(frozen=True)
class StatusFlag:
    name: str
    value: int
    text_off: str
    text_on: str

    @property
    def label(self) -> str:
        return self.text_on if self.value else self.text_off


@dataclass(frozen=True)
class StatusSnapshot:
    raw: int
    flags: tuple[StatusFlag, ...]

    def __getitem__(self, name: str) -> StatusFlag:
        for flag in self.flags:
            if flag.name == name:
                return flag
        raise KeyError(name)

    @property
    def bits(self) -> tuple[int, ...]:
        return tuple(flag.value for flag in self.flags)

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(flag.label for flag in self.flags)

    def __str__(self):
        return " | ".join(self.labels)


def _require(reply: bytes, length: int, what: str) -> bytes:
    reply = bytes(reply)
    if len(reply) < length:
        raise MalformedReply(f"{what} reply needs {length} bytes, got {len(reply)}")
    return reply


def _u16(reply: bytes, offset: int) -> int:
    return int.from_bytes(reply[offset:offset + 2], "little")


def decode_firmware_version(reply: bytes, product: str = "", manufacturer: str = "") -> FirmwareInfo:
    """
    Application and API version from a firmware version reply (command 0x0205).

    Patch numbers are 16 bit, minor and major 8 bit. Identification strings come from the link.
    """
    msg = _require(reply, FIRMWARE_REPLY_LENGTH, "firmware version")
    o = HEADER_LENGTH
    application = Version(major=msg[o + 3], minor=msg[o + 2], patch=_u16(msg, o))
    api = Version(major=msg[o + 7], minor=msg[o + 6], patch=_u16(msg, o + 4))
    return FirmwareInfo(application, api, product=product, manufacturer=manufacturer)


def decode_status_byte(reply: bytes, what: str = "status") -> int:
    """First data byte of a single byte reply."""
    return _require(reply, STATUS_REPLY_LENGTH, what)[HEADER_LENGTH]


def decode_hardware_status(reply: bytes) -> int:
    """The raw hardware status byte (command 0x1A0A)."""
    return decode_status_byte(reply, "hardware status")


def format_status_bits(value: int) -> str:
    """Status byte as 8 binary digits, most significant bit first."""
    return format(value & 0xFF, "08b")


def decode_main_status(reply: bytes) -> StatusSnapshot:
    """
    Main status (command 0x1A0C). The low six bits are read least significant first; bits 6 and 7
    are reserved and ignored.
    """
    value = decode_status_byte(reply, "main status")
    flags = tuple(
        StatusFlag(name, (value >> bit) & 1, off, on)
        for bit, (name, off, on) in enumerate(MAIN_STATUS_BITS)
    )
    return StatusSnapshot(raw=value, flags=flags)


def hardware_status_report(value: int) -> list[tuple[str, bool]]:
    """One (text, is_error) pair per documented hardware status bit."""
    report = []
    for bit, off, on, error_value in HARDWARE_STATUS_BITS:
        bit_value = (value >> bit) & 1
        report.append((on if bit_value else off, bit_value == error_value))
    return report


def describe_hardware_status(value: int) -> tuple[list[str], int]:
    """
    Generate report on hardware status

    Returns
    -------
    tuple[list[str], int]
        First element holds one line per reported bit. Second element indicates number of errors found.
    """
    report = hardware_status_report(value)
    return [text for text, _ in report], sum(is_error for _, is_error in report)
