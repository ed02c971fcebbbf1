from datetime import datetime

import pytest

from pm5link.protocol.commands import (
    CsafeCommandCode,
    PMCommandCode,
    build_command_frame,
    build_get_battery_level_command,
    build_get_status_command,
    build_get_version_command,
    build_reset_command,
    build_set_datetime_command,
    build_terminate_workout_command,
)
from pm5link.protocol.csafe import CsafeCommand, parse_command_frame


class TestCommandBuilders:
    """Test command builder functions against known monitor commands."""

    def test_build_get_status_command(self):
        """Test GET_STATUS is a bare short command."""
        cmd = build_get_status_command()
        assert cmd.opcode == CsafeCommandCode.GET_STATUS
        assert cmd.to_bytes() == b'\x80'

    def test_build_reset_command(self):
        assert build_reset_command().to_bytes() == b'\x81'

    def test_build_get_version_command(self):
        assert build_get_version_command().to_bytes() == b'\x91'

    def test_build_terminate_workout_command(self):
        """Test terminate wraps SET_SCREEN_STATE(workout, terminate) in SET_PM_CFG."""
        cmd = build_terminate_workout_command()

        assert cmd.opcode == PMCommandCode.SET_PM_CFG
        assert cmd.to_bytes() == bytes.fromhex("760413020102")
        assert cmd.unwrap() == [CsafeCommand(PMCommandCode.SET_SCREEN_STATE, b'\x01\x02')]

    def test_build_get_battery_level_command(self):
        """Test battery query wraps 0x97 in GET_PM_DATA."""
        cmd = build_get_battery_level_command()

        assert cmd.opcode == PMCommandCode.GET_PM_DATA
        assert cmd.to_bytes() == b'\x7F\x01\x97'


class TestSetDatetime:
    """Test SET_DATETIME parameter packing."""

    def test_afternoon(self):
        """Test 14:07 on 2024-03-05 packs as 2:07 PM."""
        cmd = build_set_datetime_command(datetime(2024, 3, 5, 14, 7))

        assert cmd.to_bytes() == bytes.fromhex("76092207020701030507e8")
        assert cmd.unwrap() == [
            CsafeCommand(PMCommandCode.SET_DATETIME, bytes([2, 7, 1, 3, 5, 0x07, 0xE8])),
        ]

    @pytest.mark.parametrize(
        ("hour", "expected_hour", "expected_meridiem"),
        [
            (0, 12, 0),
            (9, 9, 0),
            (12, 12, 1),
            (23, 11, 1),
        ],
    )
    def test_twelve_hour_clock(self, hour, expected_hour, expected_meridiem):
        """Test midnight and noon map to 12 with the right meridiem."""
        cmd = build_set_datetime_command(datetime(2025, 12, 31, hour, 30))
        params = cmd.unwrap()[0].params

        assert params[0] == expected_hour
        assert params[1] == 30
        assert params[2] == expected_meridiem
        assert params[3:5] == bytes([12, 31])
        assert int.from_bytes(params[5:7], 'big') == 2025


class TestBuildCommandFrame:
    """Test complete control-channel frames."""

    def test_single_command(self):
        assert build_command_frame(build_get_status_command()) == bytes.fromhex("f18080f2")

    def test_several_commands(self):
        """Test several commands share one frame."""
        frame = build_command_frame(build_get_status_command(), build_get_version_command())

        assert frame == bytes.fromhex("f1809111f2")
        assert parse_command_frame(frame) == [
            build_get_status_command(),
            build_get_version_command(),
        ]

    def test_no_commands(self):
        with pytest.raises(ValueError):
            build_command_frame()
