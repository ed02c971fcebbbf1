from __future__ import annotations

from enum import Enum, IntEnum


class ConnectionState(Enum):
    """Lifecycle of a ConnectionSession."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    DISCOVERING_CAPABILITIES = "discovering_capabilities"
    READY = "ready"
    DISCONNECTING = "disconnecting"


class RecordType(IntEnum):
    """Telemetry record types, valued by their multiplexed tag byte."""
    GENERAL_STATUS = 0x31
    ADDITIONAL_STATUS = 0x32
    STROKE_DATA = 0x35
    SPLIT_DATA = 0x37


class SampleRate(IntEnum):
    """Notification rate written to the sample-rate characteristic."""
    RATE_1000MS = 0
    RATE_500MS = 1
    RATE_250MS = 2  # firmware default
    RATE_100MS = 3


class CsafeMachineState(IntEnum):
    """Monitor state machine state, low nibble of the CSAFE status byte."""
    ERROR = 0
    READY = 1
    IDLE = 2
    HAVE_ID = 3
    IN_USE = 5
    PAUSE = 6
    FINISHED = 7
    MANUAL = 8
    OFFLINE = 9


class CsafeFrameStatus(IntEnum):
    """Status of the previous frame, bits 4-5 of the CSAFE status byte."""
    OK = 0
    REJECTED = 1
    BAD = 2
    NOT_READY = 3
