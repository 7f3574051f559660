"""Errors raised by the DLPC900 control core."""


class DMDerror(Exception):
    """Base class for everything the controller raises on purpose."""


class InvalidArgument(DMDerror, ValueError):
    """Out-of-range or wrongly shaped input to a public operation."""


class InvalidPayload(InvalidArgument):
    """A numeric field does not fit its declared width."""


class TransportError(DMDerror):
    """Writing to or reading from the device link failed."""


class MalformedReply(DMDerror):
    """The device reply is too short or structurally unexpected."""


class SessionClosed(DMDerror):
    """The controller was used after close()."""
