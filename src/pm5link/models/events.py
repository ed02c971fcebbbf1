"""Events delivered by a ConnectionSession to its observers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .telemetry import TelemetryRecord

if TYPE_CHECKING:
    from ..transport.stream import RawFrame


@dataclass(frozen=True, slots=True)
class TelemetryEvent:
    """One decoded record and where it came from."""

    stream_id: str
    record: TelemetryRecord
    timestamp: float


@dataclass(frozen=True, slots=True)
class RawFrameEvent:
    """Undecoded notification from a generic (monitor mode) stream."""

    stream_id: str
    frame: RawFrame


@dataclass(frozen=True, slots=True)
class ParseErrorEvent:
    """A notification that could not be decoded into a known record.

    Either the frame was shorter than its layout (both lengths set) or a
    multiplexed frame carried a tag with no known layout (unknown_tag set).
    """

    stream_id: str
    expected_min_length: int | None = None
    actual_length: int | None = None
    unknown_tag: int | None = None


@dataclass(frozen=True, slots=True)
class DisconnectedEvent:
    """Link is gone; requested is True for an explicit disconnect()."""

    reason: str
    requested: bool = False


@dataclass(frozen=True, slots=True)
class DiagnosticEvent:
    """Levelled diagnostic message; level uses the logging module values."""

    level: int
    message: str
