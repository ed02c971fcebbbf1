"""Transport interface consumed by ConnectionSession."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from .stream import NotificationStream

LinkLostCallback = Callable[[str], None]


class Transport(ABC):
    """Interface to a GATT link with one device.

    Concrete transports map these operations onto a BLE stack. All
    characteristic identifiers are lowercase 128-bit UUID strings.

    Connection lifecycle:
        1. connect(link_lost_callback) opens the link
        2. list/read/write/subscribe while connected
        3. disconnect() closes the link

    link_lost_callback is invoked with a reason string whenever the link
    drops without disconnect() having been called. It is called on the
    event loop thread.
    """

    @abstractmethod
    async def connect(self, link_lost_callback: LinkLostCallback | None = None) -> None:
        """Open the link.

        Raises:
            TransportError: If the link cannot be opened
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the link. Idempotent."""

    @abstractmethod
    async def list_characteristics(self) -> set[str]:
        """Return UUIDs of every characteristic the device exposes."""

    @abstractmethod
    async def list_notifiable_characteristics(self) -> set[str]:
        """Return UUIDs of characteristics that support notify or indicate."""

    @abstractmethod
    async def read_characteristic(self, uuid: str) -> bytes:
        """Read a characteristic value.

        Raises:
            TransportError: If the read fails
        """

    @abstractmethod
    async def write_characteristic(self, uuid: str, data: bytes) -> None:
        """Write a characteristic value with response.

        Raises:
            TransportError: If the write fails
        """

    @abstractmethod
    def subscribe(self, uuid: str) -> NotificationStream:
        """Create a notification stream for uuid (not yet started)."""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """True while the link is up."""
