"""Settings for one controller session."""

import os
from dataclasses import dataclass

from dlpc900ctl.dlp_errors import InvalidArgument
from dlpc900ctl.transport import PACKET_SIZE, PRODUCT_ID, READ_ENDPOINT, VENDOR_ID, WRITE_ENDPOINT

DEBUG_LEVELS = (0, 1, 2, 3)


@dataclass(frozen=True)
class ControllerConfig:
    """
    debug: 0 quiet, 1 command dumps, 2 packet level detail, 3 dummy mode (no device is opened).
    """
    debug: int = 0
    packet_size: int = PACKET_SIZE
    vendor_id: int = VENDOR_ID
    product_id: int = PRODUCT_ID
    write_endpoint: int = WRITE_ENDPOINT
    read_endpoint: int = READ_ENDPOINT
    timeout_ms: int = 1000

    def __post_init__(self):
        if isinstance(self.debug, bool) or self.debug not in DEBUG_LEVELS:
            raise InvalidArgument(f"debug level must be one of {DEBUG_LEVELS}, got {self.debug!r}")
        if isinstance(self.packet_size, bool) or not isinstance(self.packet_size, int) or self.packet_size < 1:
            raise InvalidArgument(f"packet size must be a positive integer, got {self.packet_size!r}")
        if self.timeout_ms < 0:
            raise InvalidArgument(f"timeout must not be negative, got {self.timeout_ms}")

    @property
    def dummy(self) -> bool:
        return self.debug == 3

    @classmethod
    def from_env(cls, environ=None) -> "ControllerConfig":
        """Read DLPC900_DEBUG and DLPC900_TIMEOUT_MS, falling back to the defaults."""
        environ = os.environ if environ is None else environ
        try:
            debug = int(environ.get("DLPC900_DEBUG", 0))
            timeout_ms = int(environ.get("DLPC900_TIMEOUT_MS", 1000))
        except ValueError as exc:
            raise InvalidArgument(f"invalid DLPC900 environment setting: {exc}") from exc
        return cls(debug=debug, timeout_ms=timeout_ms)
