"""CSAFE response validation and parsing."""

from __future__ import annotations

import struct

from ..exceptions import FormatError, InvalidResponseError
from ..models.enums import CsafeFrameStatus
from .commands import CsafeCommandCode, PMCommandCode
from .csafe import CsafeCommandResponse, CsafeResponse


def validate_response(response: CsafeResponse) -> None:
    """Check that the monitor accepted the previous frame.

    Raises:
        InvalidResponseError: If the status byte reports a rejected or bad frame
    """
    status = response.previous_frame_status
    if status in (CsafeFrameStatus.REJECTED, CsafeFrameStatus.BAD):
        raise InvalidResponseError(
            f"Monitor reported frame status {status.name} (status byte 0x{response.status:02x})"
        )


def require_response(response: CsafeResponse, opcode: int) -> CsafeCommandResponse:
    """Return the response entry for opcode.

    Raises:
        InvalidResponseError: If the monitor did not answer that command
    """
    entry = response.get(opcode)
    if entry is None:
        raise InvalidResponseError(f"No response for command 0x{opcode:02x}")
    return entry


def parse_version_response(response: CsafeResponse) -> dict[str, int]:
    """Parse GET_VERSION data.

    Format: [manufacturer:1][class_id:1][model:1][hw_version:2 LE][sw_version:2 LE]

    Returns:
        Dictionary with 'manufacturer', 'class_id', 'model',
        'hardware_version' and 'software_version'

    Raises:
        FormatError: If the data is truncated
    """
    data = require_response(response, CsafeCommandCode.GET_VERSION).data
    if len(data) < 7:
        raise FormatError(7, len(data), what="Version response")

    manufacturer, class_id, model, hw, sw = struct.unpack("<BBBHH", data[:7])
    return {
        "manufacturer": manufacturer,
        "class_id": class_id,
        "model": model,
        "hardware_version": hw,
        "software_version": sw,
    }


def parse_battery_level_response(response: CsafeResponse) -> int:
    """Parse GET_BATTERY_LEVEL_PERCENT data into 0-100.

    Raises:
        FormatError: If the data is empty
        InvalidResponseError: If the value is not a percentage
    """
    data = require_response(response, PMCommandCode.GET_BATTERY_LEVEL_PERCENT).data
    if len(data) < 1:
        raise FormatError(1, len(data), what="Battery level response")

    percent = data[0]
    if percent > 100:
        raise InvalidResponseError(f"Battery level out of range: {percent}")
    return percent
