"""BLE connection management."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from bleak import BleakClient, BleakScanner
from bleak.exc import BleakError
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from ..exceptions import BLEConnectionError, BLETimeoutError
from .base import LinkLostCallback, Transport
from .stream import DEFAULT_MAX_PENDING, NotificationStream

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)


class BLEConnection(Transport):
    """Bleak-backed transport to a PM5 monitor.

    Features:
    - Automatic retry logic with bleak-retry-connector
    - Service caching for faster reconnections
    - Context manager for automatic cleanup
    - Link-loss reporting through the transport callback
    """

    def __init__(
            self,
            mac_address: str,
            ble_device: BLEDevice | None = None,
            timeout: float = 10.0,
            max_attempts: int = 4,
            use_services_cache: bool = True,
            max_pending_frames: int = DEFAULT_MAX_PENDING,
    ):
        """Initialize BLE connection manager.

        Args:
            mac_address: Device MAC address
            ble_device: Optional BLEDevice from a previous scan
            timeout: Connection timeout in seconds (default: 10)
            max_attempts: Maximum connection attempts for bleak-retry-connector (default: 4)
            use_services_cache: Enable GATT service caching for faster reconnections (default: True)
            max_pending_frames: Per-stream notification backlog (default: 64)
        """
        self.mac_address = mac_address
        self.ble_device = ble_device
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.use_services_cache = use_services_cache
        self.max_pending_frames = max_pending_frames

        self._client: BleakClient | None = None
        self._link_lost_callback: LinkLostCallback | None = None
        self._disconnecting = False

    async def __aenter__(self) -> BLEConnection:
        """Connect to device (context manager entry)."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect from device (context manager exit)."""
        await self.disconnect()

    async def connect(self, link_lost_callback: LinkLostCallback | None = None) -> None:
        """Establish BLE connection to device.

        Uses bleak-retry-connector for automatic retry logic and service caching.

        Raises:
            BLEConnectionError: If connection fails
            BLETimeoutError: If connection times out
        """
        if self._client and self._client.is_connected:
            return  # Already connected

        self._link_lost_callback = link_lost_callback
        self._disconnecting = False
        loop = asyncio.get_running_loop()

        def _disconnected_callback(_client: BleakClient) -> None:
            loop.call_soon_threadsafe(self._handle_disconnected)

        try:
            _LOGGER.debug(
                "Connecting to %s with bleak-retry-connector (max_attempts=%d)",
                self.mac_address,
                self.max_attempts
            )

            # Resolve MAC to BLEDevice if not provided
            if self.ble_device:
                device = self.ble_device
            else:
                device = await BleakScanner.find_device_by_address(
                    self.mac_address,
                    timeout=self.timeout
                )
                if device is None:
                    raise BLEConnectionError(
                        f"Device {self.mac_address} not found during scan"
                    )

            self._client = await establish_connection(
                client_class=BleakClientWithServiceCache,
                device=device,
                name=device.name or self.mac_address,
                disconnected_callback=_disconnected_callback,
                max_attempts=self.max_attempts,
                use_services_cache=self.use_services_cache,
                timeout=self.timeout,
            )

            _LOGGER.debug("Connected to %s", self.mac_address)

        except BLEConnectionError:
            raise
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"Connection timeout after {self.timeout}s"
            ) from e
        except Exception as e:
            raise BLEConnectionError(
                f"Failed to connect: {e}"
            ) from e

    async def disconnect(self) -> None:
        """Disconnect from device."""
        self._disconnecting = True
        if self._client and self._client.is_connected:
            try:
                _LOGGER.debug("Disconnecting from %s", self.mac_address)
                await self._client.disconnect()
            except Exception as e:
                _LOGGER.warning("Error during disconnect: %s", e)
        self._client = None

    def _handle_disconnected(self) -> None:
        """Forward an unsolicited disconnect to the link-lost callback."""
        if self._disconnecting:
            return
        _LOGGER.debug("Link to %s lost", self.mac_address)
        self._client = None
        if self._link_lost_callback is not None:
            self._link_lost_callback("link lost")

    def _require_client(self) -> BleakClient:
        if not self._client or not self._client.is_connected:
            raise BLEConnectionError("Not connected")
        return self._client

    async def list_characteristics(self) -> set[str]:
        """Return UUIDs of every characteristic in every discovered service."""
        client = self._require_client()
        return {
            str(characteristic.uuid).lower()
            for service in client.services
            for characteristic in service.characteristics
        }

    async def list_notifiable_characteristics(self) -> set[str]:
        """Return UUIDs of characteristics advertising notify or indicate."""
        client = self._require_client()
        return {
            str(characteristic.uuid).lower()
            for service in client.services
            for characteristic in service.characteristics
            if "notify" in characteristic.properties or "indicate" in characteristic.properties
        }

    async def read_characteristic(self, uuid: str) -> bytes:
        """Read characteristic value.

        Raises:
            BLEConnectionError: If not connected or read fails
            BLETimeoutError: If the read times out
        """
        client = self._require_client()
        try:
            return bytes(await client.read_gatt_char(uuid))
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(f"Read of {uuid} timed out") from e
        except (BleakError, OSError) as e:
            raise BLEConnectionError(f"Read of {uuid} failed: {e}") from e

    async def write_characteristic(self, uuid: str, data: bytes) -> None:
        """Write characteristic value.

        Raises:
            BLEConnectionError: If not connected or write fails
            BLETimeoutError: If the write times out
        """
        client = self._require_client()
        try:
            await client.write_gatt_char(
                uuid,
                data,
                response=True,  # Wait for write confirmation
            )
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(f"Write to {uuid} timed out") from e
        except (BleakError, OSError) as e:
            raise BLEConnectionError(f"Write to {uuid} failed: {e}") from e

    def subscribe(self, uuid: str) -> NotificationStream:
        """Create a stream whose start/stop drive start_notify/stop_notify."""

        async def _start(stream: NotificationStream) -> None:
            client = self._require_client()

            def _notification_callback(_sender, data: bytearray) -> None:
                stream.feed(data)

            try:
                await client.start_notify(uuid, _notification_callback)
            except (BleakError, OSError) as e:
                raise BLEConnectionError(f"Subscribe to {uuid} failed: {e}") from e
            _LOGGER.debug("Notifications started on %s", uuid)

        async def _stop() -> None:
            if not self.is_connected:
                return
            try:
                await self._client.stop_notify(uuid)
            except (BleakError, OSError) as e:
                raise BLEConnectionError(f"Unsubscribe from {uuid} failed: {e}") from e
            _LOGGER.debug("Notifications stopped on %s", uuid)

        return NotificationStream(uuid, _start, _stop, max_pending=self.max_pending_frames)

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to device."""
        return self._client is not None and self._client.is_connected
