"""PM5 connection session."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Final

from .exceptions import (
    CapabilityMissing,
    FormatError,
    SessionNotReadyError,
    TransportError,
)
from .models.device_info import DeviceInformation
from .models.enums import ConnectionState, RecordType, SampleRate
from .models.events import (
    DiagnosticEvent,
    DisconnectedEvent,
    ParseErrorEvent,
    RawFrameEvent,
    TelemetryEvent,
)
from .models.telemetry import UnknownRecord
from .observer import SessionObserver
from .protocol.characteristics import (
    CONTROL_RECEIVE,
    CONTROL_TRANSMIT,
    DEVICE_INFO_CHARACTERISTICS,
    OPTIONAL_CHARACTERISTICS,
    PRIMARY_TELEMETRY_STREAMS,
    REQUIRED_CHARACTERISTICS,
    SAMPLE_RATE,
    STREAM_MULTIPLEXED,
    StreamKind,
    StreamSpec,
    resolve_stream,
)
from .protocol.commands import (
    build_get_battery_level_command,
    build_get_status_command,
    build_get_version_command,
    build_reset_command,
    build_set_datetime_command,
    build_terminate_workout_command,
)
from .protocol.csafe import CsafeCommand, CsafeResponse, build_frame, parse_response
from .protocol.responses import (
    parse_battery_level_response,
    parse_version_response,
    validate_response,
)
from .protocol.telemetry import decode_record, parse_multiplexed
from .transport import BLEConnection, NotificationStream, RawFrame, Transport
from .transport.stream import DEFAULT_MAX_PENDING

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)

_RECORD_HANDLERS: Final[dict[RecordType, str]] = {
    RecordType.GENERAL_STATUS: "on_general_status",
    RecordType.ADDITIONAL_STATUS: "on_additional_status",
    RecordType.STROKE_DATA: "on_stroke_data",
    RecordType.SPLIT_DATA: "on_split_data",
}

_CAPABILITIES: Final[dict[str, str]] = {
    **REQUIRED_CHARACTERISTICS,
    **OPTIONAL_CHARACTERISTICS,
}


@dataclass(eq=False)
class Subscription:
    """Handle for one active notification stream."""

    spec: StreamSpec
    stream: NotificationStream
    active: bool = True
    task: asyncio.Task | None = field(default=None, repr=False)

    @property
    def stream_id(self) -> str:
        return self.spec.stream_id


class ConnectionSession:
    """Connection to one PM5 monitor.

    Owns the link state, the subscription table and the CSAFE control
    channel. Decoded telemetry and lifecycle changes are delivered to
    SessionObserver instances.

    Usage:
        class Printer(SessionObserver):
            def on_stroke_data(self, event):
                print(event.record.stroke_count)

        async with ConnectionSession("AA:BB:CC:DD:EE:FF", observer=Printer()) as session:
            await session.subscribe_telemetry()
            await asyncio.sleep(60)
    """

    def __init__(
            self,
            mac_address: str,
            ble_device: BLEDevice | None = None,
            observer: SessionObserver | None = None,
            timeout: float = 10.0,
            transport: Transport | None = None,
            max_pending_frames: int = DEFAULT_MAX_PENDING,
    ):
        """Initialize session.

        Args:
            mac_address: Device MAC address
            ble_device: Optional BLEDevice from a previous scan
            observer: Optional observer receiving session events
            timeout: BLE connection timeout in seconds (default: 10)
            transport: Transport to use instead of a BLEConnection
            max_pending_frames: Per-stream notification backlog (default: 64)
        """
        self.mac_address = mac_address
        if transport is None:
            transport = BLEConnection(
                mac_address,
                ble_device,
                timeout,
                max_pending_frames=max_pending_frames,
            )
        self._transport = transport

        self._observers: list[SessionObserver] = [observer] if observer else []
        self._state = ConnectionState.DISCONNECTED
        self._subscriptions: dict[str, Subscription] = {}
        self._subscription_lock = asyncio.Lock()
        self._command_lock = asyncio.Lock()
        self._pump_tasks: set[asyncio.Task] = set()

        self._available: set[str] = set()
        self._notifiable: set[str] = set()
        self._missing: dict[str, CapabilityMissing] = {}
        self._device_info = DeviceInformation()

    async def __aenter__(self) -> ConnectionSession:
        """Connect and discover capabilities."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect from device."""
        await self.disconnect()

    # ---------- Properties ----------

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ConnectionState.READY

    @property
    def device_info(self) -> DeviceInformation:
        """Device information read during discovery."""
        return self._device_info

    @property
    def missing_capabilities(self) -> dict[str, CapabilityMissing]:
        """Optional capabilities found absent during the last discovery."""
        return dict(self._missing)

    @property
    def active_streams(self) -> tuple[str, ...]:
        """Stream ids with an active subscription."""
        return tuple(self._subscriptions)

    @property
    def notifiable_characteristics(self) -> tuple[str, ...]:
        """UUIDs of every characteristic that supports notify or indicate, sorted."""
        return tuple(sorted(self._notifiable))

    def has_capability(self, name: str) -> bool:
        """Check a capability name, stream id or characteristic UUID."""
        uuid = _CAPABILITIES.get(name) or resolve_stream(name).uuid
        return uuid in self._available

    def add_observer(self, observer: SessionObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: SessionObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    # ---------- Lifecycle ----------

    async def connect(self) -> None:
        """Open the link, discover capabilities and read device information.

        Raises:
            TransportError: If the link cannot be opened or drops during setup
            CapabilityMissing: If a required characteristic is absent
            SessionNotReadyError: If a connect or disconnect is in progress
        """
        if self._state is ConnectionState.READY:
            return  # Already connected
        if self._state is not ConnectionState.DISCONNECTED:
            raise SessionNotReadyError(f"Cannot connect while {self._state.value}")

        self._available = set()
        self._notifiable = set()
        self._missing = {}
        self._device_info = DeviceInformation()

        self._set_state(ConnectionState.CONNECTING)
        _LOGGER.info("Connecting to PM5 %s", self.mac_address)
        try:
            await self._transport.connect(self._handle_link_lost)
        except TransportError:
            self._set_state(ConnectionState.DISCONNECTED)
            raise
        except Exception as e:
            self._set_state(ConnectionState.DISCONNECTED)
            raise TransportError(f"Failed to connect: {e}") from e

        try:
            self._expect_state(ConnectionState.CONNECTING, "connect")
            self._set_state(ConnectionState.DISCOVERING_CAPABILITIES)

            await self._discover_capabilities()
            self._expect_state(ConnectionState.DISCOVERING_CAPABILITIES, "discovery")

            await self._read_device_information()
            self._expect_state(ConnectionState.DISCOVERING_CAPABILITIES, "discovery")
        except (TransportError, CapabilityMissing):
            await self._abort_connect()
            raise
        except Exception as e:
            await self._abort_connect()
            raise TransportError(f"Capability discovery failed: {e}") from e

        self._set_state(ConnectionState.READY)
        _LOGGER.info("PM5 %s ready", self.mac_address)
        self._emit("on_connected", self._device_info)

    async def disconnect(self) -> None:
        """Tear down every subscription and close the link.

        Safe to call in any state. Individual teardown failures are logged.
        """
        if self._state in (ConnectionState.DISCONNECTED, ConnectionState.DISCONNECTING):
            return

        self._set_state(ConnectionState.DISCONNECTING)

        subscriptions = list(self._subscriptions.values())
        self._subscriptions.clear()
        for subscription in subscriptions:
            await self._teardown(subscription)

        try:
            await self._transport.disconnect()
        except Exception as e:
            self._emit_diagnostic(logging.WARNING, "Error during disconnect: %s", e)

        self._set_state(ConnectionState.DISCONNECTED)
        _LOGGER.info("Disconnected from PM5 %s", self.mac_address)
        self._emit("on_disconnected", DisconnectedEvent("requested", requested=True))

    async def _abort_connect(self) -> None:
        if self._state is ConnectionState.DISCONNECTED:
            return  # link loss already handled it
        self._set_state(ConnectionState.DISCONNECTED)
        try:
            await self._transport.disconnect()
        except Exception as e:
            _LOGGER.warning("Error closing link after failed connect: %s", e)

    def _handle_link_lost(self, reason: str) -> None:
        """Transport reported an unsolicited disconnect."""
        if self._state in (ConnectionState.DISCONNECTED, ConnectionState.DISCONNECTING):
            return

        self._emit_diagnostic(
            logging.WARNING, "Link to %s lost (%s): %s", self.mac_address, self._state.value, reason
        )
        self._set_state(ConnectionState.DISCONNECTED)

        for subscription in self._subscriptions.values():
            subscription.active = False
            subscription.stream.close()
        self._subscriptions.clear()

        self._emit("on_disconnected", DisconnectedEvent(reason))

    def _set_state(self, state: ConnectionState) -> None:
        _LOGGER.debug("State %s -> %s", self._state.value, state.value)
        self._state = state

    def _expect_state(self, expected: ConnectionState, during: str) -> None:
        if self._state is not expected:
            raise TransportError(f"Link lost during {during}")

    def _require_ready(self) -> None:
        if self._state is not ConnectionState.READY:
            raise SessionNotReadyError(f"Session is {self._state.value}, not ready")

    # ---------- Discovery ----------

    async def _discover_capabilities(self) -> None:
        """Enumerate characteristics and record what is missing.

        Raises:
            CapabilityMissing: If any required characteristic is absent
        """
        self._available = {uuid.lower() for uuid in await self._transport.list_characteristics()}
        self._notifiable = {
            uuid.lower() for uuid in await self._transport.list_notifiable_characteristics()
        }
        _LOGGER.debug("Discovered %d characteristics", len(self._available))

        missing_required = [
            name for name, uuid in REQUIRED_CHARACTERISTICS.items()
            if uuid not in self._available
        ]
        if missing_required:
            names = ", ".join(missing_required)
            self._emit_diagnostic(logging.ERROR, "Missing required characteristics: %s", names)
            raise CapabilityMissing(names, required=True)

        for name, uuid in OPTIONAL_CHARACTERISTICS.items():
            if uuid not in self._available:
                self._missing[name] = CapabilityMissing(name, uuid)
                self._emit_diagnostic(logging.INFO, "Optional capability %s not available", name)

    async def _read_device_information(self) -> None:
        """Read every available device information field concurrently.

        A failed read leaves that field unset.
        """
        fields = [
            (name, uuid) for name, uuid in DEVICE_INFO_CHARACTERISTICS.items()
            if uuid in self._available
        ]
        results = await asyncio.gather(
            *(self._transport.read_characteristic(uuid) for _, uuid in fields),
            return_exceptions=True,
        )

        for (name, _), result in zip(fields, results, strict=True):
            if isinstance(result, Exception):
                self._emit_diagnostic(logging.WARNING, "Failed to read %s: %s", name, result)
                continue
            if isinstance(result, BaseException):
                raise result

            value = _decode_info_value(name, result)
            if value is None:
                continue
            setattr(self._device_info, name, value)
            self._emit("on_device_info", name, value)

        _LOGGER.debug("Device information: %s", self._device_info)

    # ---------- Subscriptions ----------

    async def subscribe(self, stream_id: str) -> Subscription:
        """Start delivery for one stream.

        Idempotent: an already active stream returns its existing handle.

        Args:
            stream_id: Named stream (e.g. "stroke-data") or characteristic UUID

        Raises:
            SessionNotReadyError: If the session is not READY
            CapabilityMissing: If the stream's characteristic is absent
            TransportError: If the transport cannot start notifications
        """
        self._require_ready()

        spec = resolve_stream(stream_id)
        async with self._subscription_lock:
            existing = self._subscriptions.get(spec.stream_id)
            if existing is not None and existing.active:
                return existing

            self._require_ready()
            if spec.uuid not in self._available:
                raise CapabilityMissing(spec.stream_id, spec.uuid)

            stream = self._transport.subscribe(spec.uuid)
            await stream.start()

            if self._state is not ConnectionState.READY:
                stream.close()
                raise TransportError(f"Link lost while subscribing to {spec.stream_id}")

            subscription = Subscription(spec, stream)
            self._subscriptions[spec.stream_id] = subscription
            task = asyncio.create_task(self._pump(subscription), name=f"pm5link-{spec.stream_id}")
            subscription.task = task
            self._pump_tasks.add(task)
            task.add_done_callback(self._pump_tasks.discard)

            _LOGGER.debug("Subscribed to %s (%s)", spec.stream_id, spec.uuid)
            return subscription

    async def unsubscribe(self, stream_id: str) -> None:
        """Stop delivery for one stream. No-op if it is not active.

        No record for stream_id is emitted after this returns.
        """
        stream_id = resolve_stream(stream_id).stream_id
        async with self._subscription_lock:
            subscription = self._subscriptions.pop(stream_id, None)
            if subscription is None:
                return
            await self._teardown(subscription)
            _LOGGER.debug("Unsubscribed from %s", stream_id)

    async def subscribe_telemetry(self, include_multiplexed: bool = False) -> list[Subscription]:
        """Subscribe the four primary telemetry streams.

        Args:
            include_multiplexed: Also subscribe the multiplexed stream when the
                monitor has it. Records then arrive on both paths.
        """
        subscriptions = [await self.subscribe(stream_id) for stream_id in PRIMARY_TELEMETRY_STREAMS]

        if include_multiplexed:
            if self.has_capability(STREAM_MULTIPLEXED):
                subscriptions.append(await self.subscribe(STREAM_MULTIPLEXED))
            else:
                _LOGGER.info("Multiplexed data not available on this monitor")

        return subscriptions

    async def unsubscribe_all(self) -> None:
        """Unsubscribe every active stream."""
        for stream_id in list(self._subscriptions):
            await self.unsubscribe(stream_id)

    async def _teardown(self, subscription: Subscription) -> None:
        subscription.active = False
        try:
            await subscription.stream.stop()
        except Exception as e:
            self._emit_diagnostic(
                logging.WARNING, "Error stopping %s: %s", subscription.stream_id, e
            )
        finally:
            task = subscription.task
            if task is not None and task is not asyncio.current_task():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

    async def _pump(self, subscription: Subscription) -> None:
        async for frame in subscription.stream:
            self._dispatch(subscription, frame)

    def _dispatch(self, subscription: Subscription, frame: RawFrame) -> None:
        """Decode one notification and emit it."""
        spec = subscription.spec
        if not subscription.active or self._subscriptions.get(spec.stream_id) is not subscription:
            _LOGGER.debug("Dropping late frame for %s", spec.stream_id)
            return

        if spec.kind is StreamKind.RAW:
            self._emit("on_raw_frame", RawFrameEvent(spec.stream_id, frame))
            return

        try:
            if spec.kind is StreamKind.MULTIPLEXED:
                record = parse_multiplexed(frame.data)
            else:
                record = decode_record(spec.record_type, frame.data)
        except FormatError as e:
            self._emit_diagnostic(logging.WARNING, "Malformed notification on %s: %s", spec.stream_id, e)
            self._emit("on_parse_error", ParseErrorEvent(spec.stream_id, e.expected, e.actual))
            return

        event = TelemetryEvent(spec.stream_id, record, frame.timestamp)
        if isinstance(record, UnknownRecord):
            _LOGGER.debug("Unknown tag 0x%02x on %s", record.tag, spec.stream_id)
            self._emit("on_unknown_record", event)
            self._emit("on_parse_error", ParseErrorEvent(spec.stream_id, unknown_tag=record.tag))
        else:
            self._emit(_RECORD_HANDLERS[record.record_type], event)

    # ---------- Events ----------

    def _emit(self, method: str, *args) -> None:
        for observer in list(self._observers):
            try:
                getattr(observer, method)(*args)
            except Exception:
                _LOGGER.exception("Observer %r failed in %s", observer, method)

    def _emit_diagnostic(self, level: int, msg: str, *args) -> None:
        _LOGGER.log(level, msg, *args)
        self._emit("on_diagnostic", DiagnosticEvent(level, msg % args if args else msg))

    # ---------- Control (CSAFE) ----------

    async def send_command(self, *commands: CsafeCommand) -> CsafeResponse:
        """Send CSAFE commands and return the parsed response.

        The frame is written to the control-receive characteristic, then the
        response is read back from the control-transmit characteristic.
        Commands are serialized; one frame is in flight at a time.

        Raises:
            SessionNotReadyError: If the session is not READY
            CapabilityMissing: If the control characteristics are absent
            TransportError: If the write or read fails (the link is then
                considered lost)
            ProtocolError: If the response is malformed or rejected
        """
        self._require_ready()
        for name in ("control_receive", "control_transmit"):
            if name in self._missing:
                raise CapabilityMissing(name, _CAPABILITIES[name])

        frame = build_frame(commands)

        async with self._command_lock:
            self._require_ready()
            _LOGGER.debug("CSAFE TX: %s", frame.hex())
            try:
                await self._transport.write_characteristic(CONTROL_RECEIVE, frame)
                raw = await self._transport.read_characteristic(CONTROL_TRANSMIT)
            except TransportError as e:
                self._handle_link_lost(f"control channel failure: {e}")
                raise

        _LOGGER.debug("CSAFE RX: %s", raw.hex())
        response = parse_response(raw)
        validate_response(response)
        return response

    async def get_status(self) -> CsafeResponse:
        """Query monitor status; see CsafeResponse.machine_state."""
        return await self.send_command(build_get_status_command())

    async def reset(self) -> CsafeResponse:
        """Reset the monitor."""
        return await self.send_command(build_reset_command())

    async def get_version(self) -> dict[str, int]:
        """Read manufacturer, model and hardware/software versions."""
        response = await self.send_command(build_get_version_command())
        return parse_version_response(response)

    async def terminate_workout(self) -> CsafeResponse:
        """End the workout in progress."""
        _LOGGER.info("Terminating PM5 workout (%s)", self.mac_address)
        return await self.send_command(build_terminate_workout_command())

    async def set_datetime(self, when: datetime | None = None) -> CsafeResponse:
        """Set the monitor clock (default: local time now)."""
        return await self.send_command(build_set_datetime_command(when or datetime.now()))

    async def get_battery_level(self) -> int:
        """Read battery level in percent."""
        response = await self.send_command(build_get_battery_level_command())
        return parse_battery_level_response(response)

    async def set_sample_rate(self, rate: SampleRate) -> None:
        """Set how often the rowing characteristics notify.

        Raises:
            CapabilityMissing: If the monitor has no sample-rate characteristic
            TransportError: If the write fails
        """
        self._require_ready()
        if "sample_rate" in self._missing:
            raise CapabilityMissing("sample_rate", SAMPLE_RATE)
        try:
            await self._transport.write_characteristic(SAMPLE_RATE, bytes([SampleRate(rate)]))
        except TransportError as e:
            self._handle_link_lost(f"sample rate write failed: {e}")
            raise


def _decode_info_value(name: str, raw: bytes) -> str | int | None:
    """Decode a device information characteristic value."""
    if name == "erg_machine_type":
        return raw[0] if raw else None
    text = raw.decode("utf-8", errors="replace").replace("\0", "").strip()
    return text or None
