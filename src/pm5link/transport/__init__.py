"""BLE transport layer."""

from .base import LinkLostCallback, Transport
from .connection import BLEConnection
from .stream import NotificationStream, RawFrame

__all__ = [
    "BLEConnection",
    "LinkLostCallback",
    "NotificationStream",
    "RawFrame",
    "Transport",
]
