"""
Moving encoded commands to and from the DLPC900.

PacketTransport cuts a command into HID-sized writes and reads replies. The actual I/O is done by a
DeviceLink: UsbDeviceLink talks to real hardware through pyusb, DummyDeviceLink stands in when no
hardware is attached (debug level 3).
"""

import logging
import platform
from typing import Protocol

import usb.core
import usb.util

from dlpc900ctl.dlp_errors import InvalidArgument, TransportError

logger = logging.getLogger(__name__)

PACKET_SIZE = 64
VENDOR_ID = 0x0451
PRODUCT_ID = 0xC900
WRITE_ENDPOINT = 0x01
READ_ENDPOINT = 0x81
PLACEHOLDER_REPLY = bytes(20)


def hexdump(data: bytes) -> str:
    return "[ " + " ".join(f"{b:02X}" for b in data) + " ]"


class DeviceLink(Protocol):
    """Raw packet I/O with one device. Failures are raised as OSError (usb.core.USBError is one)."""

    def write(self, chunk: bytes) -> None: ...

    def read(self) -> bytes: ...

    def close(self) -> None: ...

    def product_string(self) -> str: ...

    def manufacturer_string(self) -> str: ...


def split_packets(data: bytes, packet_size: int = PACKET_SIZE) -> list[bytes]:
    """Cut data into consecutive chunks of packet_size bytes; the last one holds the remainder."""
    if isinstance(packet_size, bool) or not isinstance(packet_size, int) or packet_size < 1:
        raise InvalidArgument(f"packet size must be a positive integer, got {packet_size!r}")
    data = bytes(data)
    return [data[i:i + packet_size] for i in range(0, len(data), packet_size)]


class PacketTransport:
    """Sends command byte streams in fixed-size writes and reads single replies."""

    def __init__(self, link: DeviceLink, packet_size: int = PACKET_SIZE):
        split_packets(b"", packet_size)   # validates packet_size
        self.link = link
        self.packet_size = packet_size
        self.packets_sent = 0
        self.bytes_sent = 0

    def send(self, data: bytes, packet_size: int | None = None):
        """
        Write data to the link, one write per chunk, in order.

        A failing write abandons the rest of the stream; nothing is retried.

        Raises
        ------
        TransportError
            If the link fails to write a chunk.
        """
        chunks = split_packets(data, packet_size or self.packet_size)
        for index, chunk in enumerate(chunks):
            try:
                self.link.write(chunk)
            except OSError as exc:
                raise TransportError(f"write of packet {index + 1}/{len(chunks)} failed: {exc}") from exc
            logger.debug("packet %d/%d: %d bytes", index + 1, len(chunks), len(chunk))
            self.packets_sent += 1
            self.bytes_sent += len(chunk)
        if logger.isEnabledFor(logging.INFO):
            logger.info("sent:        %s", hexdump(data))

    def receive(self) -> bytes:
        """Read exactly one reply from the link and return it verbatim."""
        try:
            answer = bytes(self.link.read())
        except OSError as exc:
            raise TransportError(f"read failed: {exc}") from exc
        if logger.isEnabledFor(logging.INFO):
            logger.info("received:    %s", hexdump(answer))
        return answer

    def close(self):
        self.link.close()


class UsbDeviceLink:
    """
    DLPC900 reached through pyusb.

    Writes are padded with zeros to a full HID report, replies are read from the interrupt IN endpoint.
    """

    def __init__(self, vendor_id: int = VENDOR_ID, product_id: int = PRODUCT_ID,
                 write_endpoint: int = WRITE_ENDPOINT, read_endpoint: int = READ_ENDPOINT,
                 timeout_ms: int = 1000, report_size: int = PACKET_SIZE, interface: int = 0):
        self.write_endpoint = write_endpoint
        self.read_endpoint = read_endpoint
        self.timeout_ms = timeout_ms
        self.report_size = report_size
        self.dev = usb.core.find(idVendor=vendor_id, idProduct=product_id)
        if self.dev is None:
            raise TransportError(f"DMD device not found (VID:{vendor_id:04x}, PID:{product_id:04x})")
        try:
            # on linux the kernel HID driver grabs the interface, detach it first
            if platform.system() != "Windows" and self.dev.is_kernel_driver_active(interface):
                logger.debug("kernel driver active on interface %d, detaching", interface)
                self.dev.detach_kernel_driver(interface)
            self.dev.set_configuration()
        except usb.core.USBError as exc:
            raise TransportError(f"could not configure DMD: {exc}") from exc
        logger.debug("connected to %s (%s)", self.product_string(), self.manufacturer_string())

    def write(self, chunk: bytes) -> None:
        buffer = bytes(chunk) + bytes(max(0, self.report_size - len(chunk)))
        self.dev.write(self.write_endpoint, buffer, self.timeout_ms)

    def read(self) -> bytes:
        return bytes(self.dev.read(self.read_endpoint, self.report_size, self.timeout_ms))

    def close(self) -> None:
        usb.util.dispose_resources(self.dev)

    def product_string(self) -> str:
        return (self.dev.product or "").strip()

    def manufacturer_string(self) -> str:
        return (self.dev.manufacturer or "").strip()


class DummyDeviceLink:
    """Link without hardware: swallows writes and answers every read with PLACEHOLDER_REPLY."""

    def __init__(self, reply: bytes = PLACEHOLDER_REPLY):
        self.reply = bytes(reply)
        self.closed = False
        logger.warning("Dummy mode. Didn't connect to DMD!")

    def write(self, chunk: bytes) -> None:
        pass

    def read(self) -> bytes:
        return self.reply

    def close(self) -> None:
        self.closed = True

    def product_string(self) -> str:
        return "Dummy DLPC900"

    def manufacturer_string(self) -> str:
        return "nobody"
