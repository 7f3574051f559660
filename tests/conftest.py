"""Shared fixtures: a device link that records traffic instead of touching USB."""

import pytest

from dlpc900ctl import DeviceController


class RecordingLink:
    """Stands in for a DeviceLink. Replies are served from a queue, falling back to `default_reply`."""

    def __init__(self, default_reply: bytes = bytes(64)):
        self.writes: list[bytes] = []
        self.replies: list[bytes] = []
        self.default_reply = default_reply
        self.reads = 0
        self.closed = False
        self.fail_write_at: int | None = None
        self.fail_read = False

    def write(self, chunk: bytes) -> None:
        if self.fail_write_at is not None and len(self.writes) == self.fail_write_at:
            raise OSError("pipe error")
        self.writes.append(bytes(chunk))

    def read(self) -> bytes:
        if self.fail_read:
            raise OSError("timeout")
        self.reads += 1
        if self.replies:
            return self.replies.pop(0)
        return self.default_reply

    def close(self) -> None:
        self.closed = True

    def product_string(self) -> str:
        return "DLPC900"

    def manufacturer_string(self) -> str:
        return "Texas Instruments"

    def sub_addresses(self) -> list[int]:
        """Sub-address of every command written, assuming one packet per command."""
        return [w[4] | (w[5] << 8) for w in self.writes]


def make_reply(*data: int, sequence: int = 0) -> bytes:
    payload = bytes(data)
    return bytes([0x00, sequence, len(payload) & 0xFF, len(payload) >> 8]) + payload


@pytest.fixture
def link():
    return RecordingLink()


@pytest.fixture
def dmd(link):
    return DeviceController(link=link)
