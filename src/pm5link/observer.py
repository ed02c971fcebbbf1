"""Observer contract for ConnectionSession events."""

from __future__ import annotations

from .models.device_info import DeviceInformation
from .models.events import (
    DiagnosticEvent,
    DisconnectedEvent,
    ParseErrorEvent,
    RawFrameEvent,
    TelemetryEvent,
)


class SessionObserver:
    """Receives events from a ConnectionSession.

    Every method is a no-op here; subclass and override the ones you need.
    Methods are called synchronously from the session's dispatch path and
    must return quickly. Exceptions raised by an observer are logged and
    do not affect the session or other observers.
    """

    def on_connected(self, device_info: DeviceInformation) -> None:
        """Session reached READY."""

    def on_disconnected(self, event: DisconnectedEvent) -> None:
        """Link closed; emitted once per physical disconnect."""

    def on_general_status(self, event: TelemetryEvent) -> None:
        """GeneralStatus record decoded."""

    def on_additional_status(self, event: TelemetryEvent) -> None:
        """AdditionalStatus record decoded."""

    def on_stroke_data(self, event: TelemetryEvent) -> None:
        """StrokeData record decoded."""

    def on_split_data(self, event: TelemetryEvent) -> None:
        """SplitData record decoded."""

    def on_unknown_record(self, event: TelemetryEvent) -> None:
        """Multiplexed frame with an unhandled tag (record is UnknownRecord)."""

    def on_raw_frame(self, event: RawFrameEvent) -> None:
        """Notification from a stream that is not decoded."""

    def on_parse_error(self, event: ParseErrorEvent) -> None:
        """Notification too short for its layout, or a multiplexed frame with an unknown tag."""

    def on_device_info(self, field: str, value: str | int) -> None:
        """One device information field became available."""

    def on_diagnostic(self, event: DiagnosticEvent) -> None:
        """Levelled diagnostic message from the session."""
