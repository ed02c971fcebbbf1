"""Test CSAFE framing, stuffing and response parsing."""

import pytest

from pm5link.exceptions import FormatError, InvalidResponseError
from pm5link.models.enums import CsafeFrameStatus, CsafeMachineState
from pm5link.protocol.csafe import (
    CsafeCommand,
    CsafeCommandResponse,
    build_frame,
    byte_stuff,
    byte_unstuff,
    decode_commands,
    frame_contents,
    parse_command_frame,
    parse_response,
    unframe,
    xor_checksum,
)


class TestChecksum:
    """Test XOR checksum."""

    def test_single_byte(self):
        assert xor_checksum(b"\x80") == 0x80

    def test_multiple_bytes(self):
        assert xor_checksum(bytes.fromhex("760413020102")) == 0x60

    def test_empty(self):
        assert xor_checksum(b"") == 0


class TestByteStuffing:
    """Test flag byte escaping."""

    def test_stuff_all_flags(self):
        """Test each flag value maps to 0xF3 plus its selector."""
        assert byte_stuff(b"\xF0\xF1\xF2\xF3\x10") == bytes.fromhex("f300f301f302f30310")

    def test_stuff_plain_bytes_unchanged(self):
        assert byte_stuff(b"\x00\x7F\xEF\xF4\xFF") == b"\x00\x7F\xEF\xF4\xFF"

    def test_unstuff_reverses_stuff(self):
        payload = bytes(range(0xE8, 0x100))
        assert byte_unstuff(byte_stuff(payload)) == payload

    def test_unstuff_truncated_escape(self):
        with pytest.raises(InvalidResponseError, match="truncated"):
            byte_unstuff(b"\x10\xF3")

    def test_unstuff_invalid_selector(self):
        with pytest.raises(InvalidResponseError, match="invalid selector"):
            byte_unstuff(b"\xF3\x09")


class TestCsafeCommand:
    """Test command construction and validation."""

    def test_short_command_bytes(self):
        assert CsafeCommand(0x80).to_bytes() == b"\x80"

    def test_long_command_bytes(self):
        assert CsafeCommand(0x20, b"\x01\x02").to_bytes() == b"\x20\x02\x01\x02"

    def test_short_command_rejects_params(self):
        with pytest.raises(ValueError, match="takes no parameters"):
            CsafeCommand(0x80, b"\x01")

    def test_long_command_requires_params(self):
        with pytest.raises(ValueError, match="requires parameters"):
            CsafeCommand(0x20)

    def test_params_too_long(self):
        with pytest.raises(ValueError, match="too long"):
            CsafeCommand(0x20, b"\x00" * 256)

    def test_opcode_out_of_range(self):
        with pytest.raises(ValueError, match="out of range"):
            CsafeCommand(0x100)

    def test_wrap_and_unwrap(self):
        """Test nested commands inside a wrapper survive unwrap()."""
        inner = [CsafeCommand(0x13, b"\x01\x02"), CsafeCommand(0x97)]
        wrapper = CsafeCommand.wrap(0x76, *inner)

        assert wrapper.to_bytes() == bytes.fromhex("760513020102" "97")
        assert wrapper.unwrap() == inner

    def test_decode_commands_overrun(self):
        """Test a byte count past the end raises FormatError."""
        with pytest.raises(FormatError):
            decode_commands(b"\x20\x05\x01")

    def test_decode_commands_missing_count(self):
        with pytest.raises(FormatError):
            decode_commands(b"\x80\x20")

    def test_decode_commands_empty_long_command(self):
        """Test a long command with a zero byte count is an invalid frame."""
        with pytest.raises(InvalidResponseError, match="empty parameter block"):
            decode_commands(b"\x80\x20\x00")


class TestBuildFrame:
    """Test standard frame building."""

    def test_get_status_frame(self):
        assert build_frame([CsafeCommand(0x80)]) == bytes.fromhex("f18080f2")

    def test_terminate_workout_frame(self):
        """Test wrapper frame bytes against a known capture."""
        command = CsafeCommand.wrap(0x76, CsafeCommand(0x13, b"\x01\x02"))
        assert build_frame([command]) == bytes.fromhex("f1760413020102" "60f2")

    def test_battery_level_frame(self):
        command = CsafeCommand.wrap(0x7F, CsafeCommand(0x97))
        assert build_frame([command]) == bytes.fromhex("f17f0197e9f2")

    def test_params_stuffed(self):
        """Test a flag value inside parameters is escaped."""
        frame = build_frame([CsafeCommand(0x20, b"\xF2\x01")])
        assert frame == bytes.fromhex("f12002f30201d1f2")

    def test_checksum_stuffed(self):
        """Test a checksum equal to a flag value is escaped."""
        frame = build_frame([CsafeCommand(0x10, b"\xE1")])
        assert frame == bytes.fromhex("f11001e1f300f2")

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="at least one command"):
            build_frame([])

    def test_multiple_commands_round_trip(self):
        """Test parse_command_frame() returns the commands build_frame() was given."""
        commands = [
            CsafeCommand(0x80),
            CsafeCommand(0x20, b"\xF0\xF1\xF2\xF3"),
            CsafeCommand.wrap(0x76, CsafeCommand(0x22, b"\x02\x07\x01\x03\x05\x07\xE8")),
            CsafeCommand(0x91),
        ]
        assert parse_command_frame(build_frame(commands)) == commands

    def test_parse_command_frame_empty_long_command(self):
        """Test a zero byte count raises InvalidResponseError, not ValueError."""
        with pytest.raises(InvalidResponseError):
            parse_command_frame(frame_contents(b"\x20\x00"))


class TestUnframe:
    """Test frame validation."""

    def test_too_short(self):
        with pytest.raises(FormatError) as exc_info:
            unframe(b"\xF1\x80\xF2")

        assert exc_info.value.expected == 4
        assert exc_info.value.actual == 3

    def test_bad_start_flag(self):
        with pytest.raises(InvalidResponseError, match="Not a CSAFE standard frame"):
            unframe(b"\x00\x80\x80\xF2")

    def test_bad_stop_flag(self):
        with pytest.raises(InvalidResponseError):
            unframe(b"\xF1\x80\x80\x00")

    def test_checksum_mismatch(self):
        with pytest.raises(InvalidResponseError, match="checksum mismatch"):
            unframe(b"\xF1\x80\x81\xF2")

    def test_returns_contents_without_checksum(self):
        assert unframe(bytes.fromhex("f1760413020102" "60f2")) == bytes.fromhex("760413020102")


class TestParseResponse:
    """Test response frame parsing."""

    def test_version_response(self):
        """Test a GET_VERSION response frame from a known capture."""
        frame = bytes.fromhex("f10191072205010a00d2046df2")
        response = parse_response(frame)

        assert response.status == 0x01
        assert response.responses == (
            CsafeCommandResponse(0x91, bytes.fromhex("2205010a00d204")),
        )

    def test_status_only(self):
        """Test a response with no command data."""
        response = parse_response(frame_contents(b"\x01"))
        assert response.status == 0x01
        assert response.responses == ()

    def test_status_fields(self):
        """Test machine state, previous frame status and toggle bits."""
        response = parse_response(frame_contents(b"\xA5"))

        assert response.machine_state == CsafeMachineState.IN_USE
        assert response.previous_frame_status == CsafeFrameStatus.BAD
        assert response.frame_toggle is True

    def test_undefined_machine_state(self):
        """Test an undefined state code is returned as int."""
        response = parse_response(frame_contents(b"\x04"))
        assert response.machine_state == 4
        assert not isinstance(response.machine_state, CsafeMachineState)

    def test_get_searches_wrappers(self):
        """Test get() finds a response nested in a wrapper."""
        response = parse_response(frame_contents(bytes.fromhex("817f0397014b")))

        assert response.get(0x7F) == CsafeCommandResponse(0x7F, bytes.fromhex("97014b"))
        assert response.get(0x97) == CsafeCommandResponse(0x97, b"\x4b")
        assert response.get(0x91) is None

    def test_truncated_response_data(self):
        """Test a byte count past the end raises FormatError."""
        with pytest.raises(FormatError):
            parse_response(frame_contents(bytes.fromhex("01910722")))

    def test_stuffed_response(self):
        """Test response data containing flag values is unstuffed."""
        response = parse_response(frame_contents(bytes.fromhex("0191" "02f1f2")))
        assert response.get(0x91).data == b"\xF1\xF2"
