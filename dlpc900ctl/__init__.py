"""Control core for DLPC900 micromirror controllers over USB."""

from dlpc900ctl.commands import Command, Mode, PatternRecord, SubAddress, encode, parse_reply
from dlpc900ctl.config import ControllerConfig
from dlpc900ctl.dlp import Activity, DeviceController, DeviceState, DisplayMode, PatternAction, PowerMode
from dlpc900ctl.dlp_errors import (
    DMDerror,
    InvalidArgument,
    InvalidPayload,
    MalformedReply,
    SessionClosed,
    TransportError,
)
from dlpc900ctl.sequence import SequenceAllocator
from dlpc900ctl.status import FirmwareInfo, StatusSnapshot, Version
from dlpc900ctl.transport import DummyDeviceLink, PacketTransport, UsbDeviceLink

__version__ = "0.2.0"
