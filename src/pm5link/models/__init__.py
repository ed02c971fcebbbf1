"""Data models for PM5 monitors."""

from .device_info import DeviceInformation
from .enums import (
    ConnectionState,
    CsafeFrameStatus,
    CsafeMachineState,
    RecordType,
    SampleRate,
)
from .events import (
    DiagnosticEvent,
    DisconnectedEvent,
    ParseErrorEvent,
    RawFrameEvent,
    TelemetryEvent,
)
from .telemetry import (
    AdditionalStatus,
    GeneralStatus,
    SplitData,
    StrokeData,
    TelemetryRecord,
    UnknownRecord,
)

__all__ = [
    "AdditionalStatus",
    "ConnectionState",
    "CsafeFrameStatus",
    "CsafeMachineState",
    "DeviceInformation",
    "DiagnosticEvent",
    "DisconnectedEvent",
    "GeneralStatus",
    "ParseErrorEvent",
    "RawFrameEvent",
    "RecordType",
    "SampleRate",
    "SplitData",
    "StrokeData",
    "TelemetryEvent",
    "TelemetryRecord",
    "UnknownRecord",
]
