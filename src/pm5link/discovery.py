"""Scan for advertising PM5 monitors."""

from __future__ import annotations

import logging

from bleak import BleakScanner
from bleak.backends.device import BLEDevice

from .protocol.characteristics import PM5_NAME_PREFIX

_LOGGER = logging.getLogger(__name__)


async def discover_devices(timeout: float = 5.0) -> list[BLEDevice]:
    """Scan for PM5 monitors.

    Monitors advertise a local name such as "PM5 430000000". Any of the
    returned devices can be passed as ``ble_device`` to ConnectionSession.

    Args:
        timeout: Scan duration in seconds (default: 5)

    Returns:
        Devices whose advertised name starts with "PM5", strongest first
    """
    _LOGGER.debug("Scanning for PM5 monitors (%.1fs)", timeout)
    found = await BleakScanner.discover(timeout=timeout, return_adv=True)

    devices = []
    for device, adv in found.values():
        name = adv.local_name or device.name or ""
        if not name.startswith(PM5_NAME_PREFIX):
            continue
        devices.append((adv.rssi, device))
        _LOGGER.debug("Found %s (%s, rssi %d)", name, device.address, adv.rssi)

    devices.sort(key=lambda entry: -entry[0])
    _LOGGER.info("Scan complete: %d PM5 monitor(s) found", len(devices))
    return [device for _, device in devices]
