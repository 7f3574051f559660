"""Sequence numbers used to pair DLPC900 commands with their replies."""

from dlpc900ctl.dlp_errors import InvalidArgument

SEQUENCE_MIN = 1
SEQUENCE_MAX = 255


class SequenceAllocator:
    """
    Hands out sequence bytes 1..255, wrapping back to 1. Zero is never issued.

    One allocator belongs to one device session. Call next() exactly once per command.
    """

    def __init__(self, start: int = SEQUENCE_MIN):
        if not SEQUENCE_MIN <= start <= SEQUENCE_MAX:
            raise InvalidArgument(f"start must be within {SEQUENCE_MIN}..{SEQUENCE_MAX}")
        self._count = start

    @property
    def current(self) -> int:
        """Value the next call to next() will return."""
        return self._count

    def next(self) -> int:
        c = self._count
        self._count += 1
        if self._count > SEQUENCE_MAX:
            self._count = SEQUENCE_MIN
        return c
