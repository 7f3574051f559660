"""
Controller for a DLPC900 (DLP6500 / DLP9000 EVM) over USB, based on the
[dlpc900 user guide](http://www.ti.com/lit/pdf/dlpu018). Some docstrings contain references to pages in this guide.

The controller keeps a local model of the power and display state. That model only changes after the
command that causes the change went out (and its reply, if any, came back), so it never claims a
transition the device was not told about.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum, IntEnum

from dlpc900ctl import status
from dlpc900ctl.commands import (
    Command,
    Mode,
    PatternRecord,
    SubAddress,
    as_int,
    decode,
    pack_byte,
    pack_pattern_count,
    pack_pattern_record,
    parse_reply,
)
from dlpc900ctl.config import ControllerConfig
from dlpc900ctl.dlp_errors import InvalidArgument, MalformedReply, SessionClosed
from dlpc900ctl.log import configure_logging
from dlpc900ctl.sequence import SequenceAllocator
from dlpc900ctl.transport import DeviceLink, DummyDeviceLink, PacketTransport, UsbDeviceLink

logger = logging.getLogger(__name__)

RECEIVER_OFF = 0
RECEIVER_DISPLAYPORT = 2


class DisplayMode(IntEnum):
    VIDEO = 0
    PATTERN = 1
    VIDEO_PATTERN = 2
    OTF = 3


class PatternAction(IntEnum):
    STOP = 0
    PAUSE = 1
    START = 2


class PowerMode(Enum):
    AWAKE = "awake"
    SLEEPING = "sleeping"


class Activity(Enum):
    ACTIVE = "active"
    IDLE = "idle"


def _to_enum(enum, value, message):
    value = as_int(value, InvalidArgument)
    try:
        return enum(value)
    except ValueError as exc:
        raise InvalidArgument(f"{message}, got {value!r}") from exc


@dataclass
class DeviceState:
    power: PowerMode = PowerMode.AWAKE
    activity: Activity = Activity.ACTIVE
    display_mode: DisplayMode = DisplayMode.OTF


class DeviceController:
    """
    DMD controller class

    Parameters
    ----------
    link : DeviceLink, optional
        Opened device link. When omitted, a UsbDeviceLink is opened, or a DummyDeviceLink in debug level 3.
    config : ControllerConfig, optional
        Session settings, defaults to ControllerConfig().
    debug : int, optional
        Shortcut that overrides config.debug.
    """

    def __init__(self, link: DeviceLink | None = None, config: ControllerConfig | None = None,
                 debug: int | None = None):
        config = config or ControllerConfig()
        if debug is not None:
            config = replace(config, debug=debug)
        self.config = config
        configure_logging(config.debug)

        if link is None:
            if config.dummy:
                link = DummyDeviceLink()
            else:
                link = UsbDeviceLink(vendor_id=config.vendor_id, product_id=config.product_id,
                                     write_endpoint=config.write_endpoint, read_endpoint=config.read_endpoint,
                                     timeout_ms=config.timeout_ms, report_size=config.packet_size)
        self.link = link
        self.transport = PacketTransport(link, packet_size=config.packet_size)
        self.sequence = SequenceAllocator()
        self._state = DeviceState()
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exception_type, exception_value, exception_traceback):
        self.close()

    @property
    def state(self) -> DeviceState:
        """Copy of the locally tracked device state."""
        return replace(self._state)

## direct communication

    def send_command(self, mode: Mode, sub_address: int, payload: bytes = b"", reply: bool = True) -> bytes | None:
        """
        Build one command, send it and, if a reply was requested, read it back.

        Parameters
        ----------
        mode : Mode
            Mode.READ or Mode.WRITE
        sub_address : int
            The command as found in the user guide, for instance SubAddress.DISPLAY_MODE (0x1A1B).
        payload : bytes, optional
            Packed data bytes. Leave empty when reading.
        reply : bool, optional
            Whether the device should answer. Defaults to True.

        Returns
        -------
        bytes | None
            The raw reply, or None when no reply was requested.
        """
        self._check_open()
        command = Command(sub_address, mode, reply, self.sequence.next(), bytes(payload))
        self.transport.send(command.encode())
        if not command.reply:
            return None
        answer = decode(sub_address, self.transport.receive())
        self._check_reply(command, answer)
        return answer

    def _check_open(self):
        if self.closed:
            raise SessionClosed("controller has been closed")

    def _check_reply(self, command: Command, answer: bytes):
        if self.config.dummy:
            return
        try:
            header = parse_reply(answer)
        except MalformedReply:
            logger.warning("reply to 0x%04X is too short to carry a header", command.sub_address)
            return
        if header.error:
            logger.warning("DMD reply to 0x%04X has error flag set", command.sub_address)
        if header.sequence != command.sequence:
            logger.warning("reply sequence %d does not match command sequence %d",
                           header.sequence, command.sequence)

## functions for display mode (section 2.4.1)

    def set_display_mode(self, mode: int):
        """
        Set the display mode. See page 56 of user guide.

        Parameters
        ----------
        mode : int
            0: normal video, 1: pre-stored pattern (images from flash), 2: video pattern,
            3: pattern on-the-fly (images loaded through USB).
        """
        mode = _to_enum(DisplayMode, mode, "Mode must be an integer between 0 and 3")
        self.send_command(Mode.WRITE, SubAddress.DISPLAY_MODE, pack_byte(mode))
        self._state.display_mode = mode

        if mode in (DisplayMode.VIDEO, DisplayMode.VIDEO_PATTERN):
            # route the external video input through the IT6535 receiver (DisplayPort)
            self.send_command(Mode.WRITE, SubAddress.INPUT_RECEIVER, pack_byte(RECEIVER_DISPLAYPORT))

    def query_display_mode(self) -> DisplayMode:
        """Read the display mode from the device and bring the local state in line with it."""
        answer = self.send_command(Mode.READ, SubAddress.DISPLAY_MODE)
        value = status.decode_status_byte(answer, "display mode")
        try:
            self._state.display_mode = DisplayMode(value)
        except ValueError as exc:
            raise MalformedReply(f"undocumented display mode {value}") from exc
        return self._state.display_mode

## functions for setting Pattern Display (and LUT) (section 2.4.4.3)

    def define_pattern(self, record: PatternRecord):
        """
        Add a pattern to the Look Up Table (LUT), see section 2.4.4.3.5.
        Whether the pattern fits the current display mode is up to the caller.
        """
        if not isinstance(record, PatternRecord):
            raise InvalidArgument(f"expected a PatternRecord, got {type(record).__name__}")
        self.send_command(Mode.WRITE, SubAddress.PATTERN_DEFINITION, pack_pattern_record(record))

    def configure_pattern_count(self, count: int, repeat: int = 0):
        """
        Set the number of LUT entries to go through and the number of patterns to display.
        A repeat of 0 repeats the sequence indefinitely. See section 2.4.4.3.3.
        """
        self.send_command(Mode.WRITE, SubAddress.PATTERN_CONFIG, pack_pattern_count(count, repeat))

    def control_pattern(self, action: int):
        """
        Start, stop or pause the pattern sequence (any mode).

        A stop makes the next start restart the sequence from the beginning. After a pause the next
        start re-displays the current pattern.
        """
        action = _to_enum(PatternAction, action, "pattern action must be 0 (stop), 1 (pause) or 2 (start)")
        self.send_command(Mode.WRITE, SubAddress.PATTERN_CONTROL, pack_byte(action))

    def start_pattern(self):
        self.control_pattern(PatternAction.START)

    def pause_pattern(self):
        self.control_pattern(PatternAction.PAUSE)

    def stop_pattern(self):
        self.control_pattern(PatternAction.STOP)

## functions for power management (section 2.3.1)

    def idle(self) -> bool:
        """Put the DMD in idle mode. Returns False if it already was idle, in which case nothing is sent."""
        self._check_open()
        if self._state.activity is Activity.IDLE:
            logger.info("DMD is already in idle mode!")
            return False
        if self._state.power is PowerMode.SLEEPING:
            logger.debug("idle requested while the DMD is sleeping")
        self.send_command(Mode.WRITE, SubAddress.IDLE_MODE, pack_byte(1))
        self._state.activity = Activity.IDLE
        return True

    def active(self) -> bool:
        """Bring the DMD from idle back to active mode. Returns False if it already was active."""
        self._check_open()
        if self._state.activity is Activity.ACTIVE:
            logger.info("DMD was already active!")
            return False
        self.send_command(Mode.WRITE, SubAddress.IDLE_MODE, pack_byte(0))
        self._state.activity = Activity.ACTIVE
        return True

    def sleep(self) -> bool:
        """
        Put the DMD to sleep. No reply is requested, a sleeping DMD may not answer.
        Returns False if it already was sleeping.
        """
        self._check_open()
        if self._state.power is PowerMode.SLEEPING:
            logger.info("DMD is already sleeping! Sleeps now even deeper...")
            return False
        self.send_command(Mode.WRITE, SubAddress.POWER_CONTROL, pack_byte(1), reply=False)
        self._state.power = PowerMode.SLEEPING
        return True

    def wakeup(self) -> bool:
        """Wake the DMD up after sleep(). Returns False if it was not sleeping."""
        self._check_open()
        if self._state.power is PowerMode.AWAKE:
            logger.info("DMD was not sleeping! Did not wake it up...")
            return False
        self.send_command(Mode.WRITE, SubAddress.POWER_CONTROL, pack_byte(0), reply=False)
        self._state.power = PowerMode.AWAKE
        return True

    def reset(self):
        """
        Software reset of the controller. The local state is left as it was; use query_display_mode()
        to learn what the device came back up in.
        """
        self.send_command(Mode.WRITE, SubAddress.POWER_CONTROL, pack_byte(2), reply=False)

## status commands (section 2.1)

    def query_firmware_version(self) -> status.FirmwareInfo:
        answer = self.send_command(Mode.READ, SubAddress.FIRMWARE_VERSION)
        return status.decode_firmware_version(answer, product=self.link.product_string(),
                                              manufacturer=self.link.manufacturer_string())

    def query_hardware_status(self) -> int:
        """Hardware status byte as described in the user guide; see status.describe_hardware_status."""
        return status.decode_hardware_status(self.send_command(Mode.READ, SubAddress.HARDWARE_STATUS))

    def query_main_status(self) -> status.StatusSnapshot:
        return status.decode_main_status(self.send_command(Mode.READ, SubAddress.MAIN_STATUS))

## teardown

    def close(self):
        """
        Close the connection. A sleeping DMD is woken up first, and in normal video mode the IT6535
        receiver is shut down. The link is released even if one of those commands fails.
        """
        if self.closed:
            return
        try:
            if self._state.power is PowerMode.SLEEPING:
                self.wakeup()
            if self._state.display_mode is DisplayMode.VIDEO:
                self.send_command(Mode.WRITE, SubAddress.INPUT_RECEIVER, pack_byte(RECEIVER_OFF))
        finally:
            self.closed = True
            self.transport.close()
