"""CSAFE commands for PM5 monitors."""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum

from .csafe import CsafeCommand, build_frame


class CsafeCommandCode(IntEnum):
    """Standard CSAFE command codes."""

    # Short commands (no data)
    GET_STATUS = 0x80
    RESET = 0x81
    GO_IDLE = 0x82
    GO_HAVE_ID = 0x83
    GO_IN_USE = 0x85
    GO_FINISHED = 0x86
    GO_READY = 0x87
    BAD_ID = 0x88
    GET_VERSION = 0x91
    GET_ID = 0x92
    GET_UNITS = 0x93
    GET_SERIAL = 0x94
    GET_ODOMETER = 0x9B
    GET_ERROR_CODE = 0x9C
    GET_TIME_WORK = 0xA0
    GET_HORIZONTAL = 0xA1
    GET_CALORIES = 0xA3
    GET_PROGRAM = 0xA4
    GET_PACE = 0xA6
    GET_CADENCE = 0xA7
    GET_USER_INFO = 0xAB
    GET_HEART_RATE = 0xB0
    GET_POWER = 0xB4

    # Long commands (byte count + data)
    SET_USER_CFG1 = 0x1A
    SET_TIME_WORK = 0x20
    SET_HORIZONTAL = 0x21
    SET_PROGRAM = 0x24
    SET_CALORIES = 0x32
    SET_POWER = 0x34


class PMCommandCode(IntEnum):
    """Concept2 proprietary wrappers and the commands nested in them."""

    # Wrappers
    SET_PM_CFG = 0x76
    SET_PM_DATA = 0x77
    GET_PM_CFG = 0x7E
    GET_PM_DATA = 0x7F

    # Nested in SET_PM_CFG
    SET_SCREEN_STATE = 0x13
    SET_DATETIME = 0x22

    # Nested in GET_PM_DATA
    GET_EXTENDED_HRBELT_INFO = 0x57
    GET_BATTERY_LEVEL_PERCENT = 0x97


# SET_SCREEN_STATE parameters
SCREEN_TYPE_WORKOUT = 0x01
SCREEN_VALUE_TERMINATE_WORKOUT = 0x02


def build_get_status_command() -> CsafeCommand:
    """Build GET_STATUS (0x80). The status byte is in every response frame."""
    return CsafeCommand(CsafeCommandCode.GET_STATUS)


def build_reset_command() -> CsafeCommand:
    """Build RESET (0x81)."""
    return CsafeCommand(CsafeCommandCode.RESET)


def build_get_version_command() -> CsafeCommand:
    """Build GET_VERSION (0x91)."""
    return CsafeCommand(CsafeCommandCode.GET_VERSION)


def build_terminate_workout_command() -> CsafeCommand:
    """Build SET_PM_CFG wrapping SET_SCREEN_STATE(workout, terminate).

    Returns:
        Command encoding to: 76 04 13 02 01 02
    """
    return CsafeCommand.wrap(
        PMCommandCode.SET_PM_CFG,
        CsafeCommand(
            PMCommandCode.SET_SCREEN_STATE,
            bytes([SCREEN_TYPE_WORKOUT, SCREEN_VALUE_TERMINATE_WORKOUT]),
        ),
    )


def build_set_datetime_command(when: datetime) -> CsafeCommand:
    """Build SET_PM_CFG wrapping SET_DATETIME.

    Format of the nested parameters:
        [hour:1][minute:1][meridiem:1][month:1][day:1][year_hi:1][year_lo:1]
        - hour: 1-12
        - meridiem: 0 = AM, 1 = PM
        - year: big-endian uint16
    """
    hour = when.hour % 12 or 12
    meridiem = 0 if when.hour < 12 else 1
    data = bytes([
        hour,
        when.minute,
        meridiem,
        when.month,
        when.day,
        when.year >> 8,
        when.year & 0xFF,
    ])
    return CsafeCommand.wrap(
        PMCommandCode.SET_PM_CFG,
        CsafeCommand(PMCommandCode.SET_DATETIME, data),
    )


def build_get_battery_level_command() -> CsafeCommand:
    """Build GET_PM_DATA wrapping GET_BATTERY_LEVEL_PERCENT (0x97)."""
    return CsafeCommand.wrap(
        PMCommandCode.GET_PM_DATA,
        CsafeCommand(PMCommandCode.GET_BATTERY_LEVEL_PERCENT),
    )


def build_command_frame(*commands: CsafeCommand) -> bytes:
    """Build the complete frame written to the control characteristic."""
    return build_frame(commands)
