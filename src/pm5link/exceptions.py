"""Exception hierarchy for pm5link."""

from __future__ import annotations


class PM5Error(Exception):
    """Base exception for all pm5link errors."""


class TransportError(PM5Error):
    """The BLE link could not be opened, or a read/write on it failed."""


class BLEConnectionError(TransportError):
    """Connecting to the monitor failed or the link is not usable."""


class BLETimeoutError(TransportError):
    """A BLE operation did not complete in time."""


class ProtocolError(PM5Error):
    """A frame received from the monitor could not be interpreted."""


class FormatError(ProtocolError):
    """Frame shorter than the layout it is decoded with.

    Attributes:
        expected: Minimum number of bytes required
        actual: Number of bytes received
    """

    def __init__(self, expected: int, actual: int, what: str = "frame"):
        self.expected = expected
        self.actual = actual
        self.what = what
        super().__init__(
            f"{what} too short: {actual} bytes (need at least {expected})"
        )


class InvalidResponseError(ProtocolError):
    """Frame is long enough but malformed (flags, escapes, checksum)."""


class CapabilityMissing(PM5Error):
    """A characteristic was not found during capability discovery.

    Optional capabilities are recorded on the session and only raised when
    an operation needs them; a missing required capability aborts connect.
    """

    def __init__(self, name: str, uuid: str | None = None, required: bool = False):
        self.name = name
        self.uuid = uuid
        self.required = required
        kind = "required" if required else "optional"
        super().__init__(f"Missing {kind} capability: {name}")


class SessionNotReadyError(PM5Error):
    """Operation needs a READY session."""
