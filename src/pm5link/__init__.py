"""PM5 BLE telemetry and control package.

  Pure Python package for reading live telemetry from Concept2 PM5
  performance monitors and driving their CSAFE control channel.
  """

from .discovery import discover_devices
from .exceptions import (
    BLEConnectionError,
    BLETimeoutError,
    CapabilityMissing,
    FormatError,
    InvalidResponseError,
    PM5Error,
    ProtocolError,
    SessionNotReadyError,
    TransportError,
)
from .models.device_info import DeviceInformation
from .models.enums import (
    ConnectionState,
    CsafeFrameStatus,
    CsafeMachineState,
    RecordType,
    SampleRate,
)
from .models.events import (
    DiagnosticEvent,
    DisconnectedEvent,
    ParseErrorEvent,
    RawFrameEvent,
    TelemetryEvent,
)
from .models.telemetry import (
    AdditionalStatus,
    GeneralStatus,
    SplitData,
    StrokeData,
    TelemetryRecord,
    UnknownRecord,
)
from .observer import SessionObserver
from .protocol import (
    CsafeCommand,
    CsafeResponse,
    parse_multiplexed,
)
from .session import ConnectionSession, Subscription
from .transport import BLEConnection, NotificationStream, RawFrame, Transport

__version__ = "0.1.0"

__all__ = [
    # Main API
    "ConnectionSession",
    "SessionObserver",
    "Subscription",
    "discover_devices",
    # Exceptions
    "PM5Error",
    "TransportError",
    "BLEConnectionError",
    "BLETimeoutError",
    "ProtocolError",
    "FormatError",
    "InvalidResponseError",
    "CapabilityMissing",
    "SessionNotReadyError",
    # Models - Telemetry
    "GeneralStatus",
    "AdditionalStatus",
    "StrokeData",
    "SplitData",
    "UnknownRecord",
    "TelemetryRecord",
    # Models - Events
    "TelemetryEvent",
    "RawFrameEvent",
    "ParseErrorEvent",
    "DisconnectedEvent",
    "DiagnosticEvent",
    # Models - Device
    "DeviceInformation",
    # Enums
    "ConnectionState",
    "RecordType",
    "SampleRate",
    "CsafeMachineState",
    "CsafeFrameStatus",
    # Protocol
    "CsafeCommand",
    "CsafeResponse",
    "parse_multiplexed",
    # Transport
    "Transport",
    "BLEConnection",
    "NotificationStream",
    "RawFrame",
]
