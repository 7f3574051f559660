"""
Building and taking apart DLPC900 USB command packets.

Packet layout follows the [dlpc900 user guide](http://www.ti.com/lit/pdf/dlpu018), section 1.4:

    byte 0     flags: bit 7 read(1)/write(0), bit 6 reply requested, bit 5 error (replies only)
    byte 1     sequence byte
    byte 2-3   length of sub-address + payload, little endian
    byte 4-5   sub-address, low byte first (0x1A1B is sent as 0x1B 0x1A)
    byte 6-    payload
"""

import operator
from dataclasses import dataclass
from enum import Enum, IntEnum

from dlpc900ctl.dlp_errors import InvalidPayload, MalformedReply
from dlpc900ctl.sequence import SEQUENCE_MAX, SEQUENCE_MIN

FLAG_READ = 0x80
FLAG_REPLY = 0x40
FLAG_ERROR = 0x20

HEADER_LENGTH = 4   # flags, sequence, length (2)


class Mode(Enum):
    READ = "r"
    WRITE = "w"


class SubAddress(IntEnum):
    """Two-byte command addresses, written as 0xHHLL for the documented pair (0xHH, 0xLL)."""
    POWER_CONTROL = 0x0200
    IDLE_MODE = 0x0201
    FIRMWARE_VERSION = 0x0205
    INPUT_RECEIVER = 0x1A01
    HARDWARE_STATUS = 0x1A0A
    MAIN_STATUS = 0x1A0C
    DISPLAY_MODE = 0x1A1B
    PATTERN_CONTROL = 0x1A24
    PATTERN_CONFIG = 0x1A31
    PATTERN_DEFINITION = 0x1A34

    @property
    def pair(self) -> tuple[int, int]:
        return (self.value >> 8) & 0xFF, self.value & 0xFF


## payload packing

def as_int(value, error: type[Exception] = InvalidPayload) -> int:
    """Plain int from any integer type, numpy integers included. Bools and non-integers raise `error`."""
    if isinstance(value, bool):
        raise error(f"expected an integer, got {value!r}")
    try:
        return operator.index(value)
    except TypeError as exc:
        raise error(f"expected an integer, got {value!r}") from exc


def pack_uint(value: int, width: int) -> bytes:
    """
    Pack an unsigned integer into `width` bytes, least significant byte first.

    Raises
    ------
    InvalidPayload
        If value is not an integer, is negative or needs more than `width` bytes.
    """
    value = as_int(value)
    if value < 0 or value >> (8 * width):
        raise InvalidPayload(f"{value} does not fit in {8 * width} bits")
    return value.to_bytes(width, "little")


def pack_byte(value: int) -> bytes:
    """Single byte payload, e.g. a mode or an action code."""
    return pack_uint(value, 1)


@dataclass(frozen=True)
class PatternRecord:
    """
    One entry of the pattern look up table (command 0x1A34).

    Fields are raw values, packed in this order with the given byte widths:
    pattern_index (2), exposure_us (3), bit_depth (1), dark_time_us (3), flags (1), image_index (2).
    Use PatternRecord.build to compose bit_depth/flags/image_index from their sub-fields.
    """
    pattern_index: int
    exposure_us: int
    bit_depth: int
    dark_time_us: int
    flags: int
    image_index: int

    FIELD_WIDTHS = (
        ("pattern_index", 2),
        ("exposure_us", 3),
        ("bit_depth", 1),
        ("dark_time_us", 3),
        ("flags", 1),
        ("image_index", 2),
    )

    @classmethod
    def build(cls, pattern_index: int = 0, exposure_us: int = 15000, dark_time_us: int = 0,
              bitdepth: int = 1, color: int = 7, clear_after_exposure: bool = False,
              wait_for_trigger: bool = False, disable_pattern_2_trigger_out: bool = False,
              extended_bit_depth: bool = False, image_pattern_index: int = 0,
              bit_position: int = 0) -> "PatternRecord":
        """
        Compose a LUT entry from the named fields of the dlpc900 user guide, section 2.4.4.3.5.

        Parameters
        ----------
        pattern_index : int
            location in the LUT, 0 to 399.
        exposure_us, dark_time_us : int
            on- and off-time of the pattern in µs.
        bitdepth : int
            1 to 8.
        color : int
            0: none, 1: red, 2: green, 3: red & green, 4: blue, 5: blue+red, 6: blue+green, 7: all.
        image_pattern_index : int
            index of the image in flash (or frame in video pattern mode).
        bit_position : int
            bit plane within the image, 0 to 23.
        """
        if not 1 <= bitdepth <= 8:
            raise InvalidPayload(f"bitdepth must be within 1..8, got {bitdepth}")
        if not 0 <= color <= 7:
            raise InvalidPayload(f"color must be within 0..7, got {color}")
        if not 0 <= bit_position <= 23:
            raise InvalidPayload(f"bit_position must be within 0..23, got {bit_position}")
        if not 0 <= image_pattern_index <= 0x7FF:
            raise InvalidPayload(f"image_pattern_index does not fit in 11 bits: {image_pattern_index}")

        byte_5 = int(clear_after_exposure) | ((bitdepth - 1) << 1) | (color << 4) | (int(wait_for_trigger) << 7)
        byte_9 = int(disable_pattern_2_trigger_out) | (int(extended_bit_depth) << 1)
        image_index = image_pattern_index | (bit_position << 11)
        return cls(pattern_index, exposure_us, byte_5, dark_time_us, byte_9, image_index)


def pack_pattern_record(record: PatternRecord) -> bytes:
    return b"".join(pack_uint(getattr(record, name), width) for name, width in PatternRecord.FIELD_WIDTHS)


def pack_pattern_count(count: int, repeat: int) -> bytes:
    """Number of LUT entries (16 bit) followed by the number of patterns to display (32 bit, 0 repeats forever)."""
    return pack_uint(count, 2) + pack_uint(repeat, 4)


## command encoding

def encode(sub_address: int, mode: Mode, reply: bool, sequence: int, payload: bytes = b"") -> bytes:
    """
    Encode one command into the byte stream the DLPC900 expects.

    Parameters
    ----------
    sub_address : int
        16 bit command, for instance SubAddress.DISPLAY_MODE (0x1A1B).
    mode : Mode
        Mode.READ or Mode.WRITE
    reply : bool
        whether the device should answer this command.
    sequence : int
        sequence byte, 1..255
    payload : bytes
        already packed data bytes. Leave empty when reading.
    """
    if not isinstance(mode, Mode):
        raise InvalidPayload(f"mode must be a Mode, got {mode!r}")
    sequence = as_int(sequence)
    if not SEQUENCE_MIN <= sequence <= SEQUENCE_MAX:
        raise InvalidPayload(f"sequence must be within {SEQUENCE_MIN}..{SEQUENCE_MAX}, got {sequence!r}")
    flags = (FLAG_READ if mode is Mode.READ else 0) | (FLAG_REPLY if reply else 0)
    payload = bytes(payload)
    return (bytes([flags, sequence])
            + pack_uint(len(payload) + 2, 2)
            + pack_uint(int(sub_address), 2)
            + payload)


def decode(sub_address: int, raw: bytes) -> bytes:
    """Replies are passed through untouched; see dlpc900ctl.status for field extraction."""
    return raw


@dataclass(frozen=True)
class Command:
    sub_address: int
    mode: Mode
    reply: bool
    sequence: int
    payload: bytes = b""

    def __post_init__(self):
        # fail at creation rather than at send time
        self.encode()

    def encode(self) -> bytes:
        return encode(self.sub_address, self.mode, self.reply, self.sequence, self.payload)


## replies

@dataclass(frozen=True)
class ReplyHeader:
    flags: int
    sequence: int
    length: int
    data: bytes

    @property
    def error(self) -> bool:
        return bool(self.flags & FLAG_ERROR)


def parse_reply(raw: bytes) -> ReplyHeader:
    """
    Split up the reply of the DMD into its constituent parts.
    Typically, you only care about the error flag, the sequence byte and the data.
    """
    raw = bytes(raw)
    if len(raw) < HEADER_LENGTH:
        raise MalformedReply(f"reply of {len(raw)} bytes is shorter than the {HEADER_LENGTH} byte header")
    length = raw[2] | (raw[3] << 8)
    return ReplyHeader(flags=raw[0], sequence=raw[1], length=length,
                       data=raw[HEADER_LENGTH:HEADER_LENGTH + length])
