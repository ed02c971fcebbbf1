"""Test CSAFE response validation and parsing."""

import pytest

from pm5link.exceptions import FormatError, InvalidResponseError
from pm5link.protocol.csafe import CsafeCommandResponse, CsafeResponse
from pm5link.protocol.responses import (
    parse_battery_level_response,
    parse_version_response,
    require_response,
    validate_response,
)


def _response(status: int = 0x01, *entries: tuple[int, bytes]) -> CsafeResponse:
    return CsafeResponse(
        status=status,
        responses=tuple(CsafeCommandResponse(opcode, data) for opcode, data in entries),
    )


class TestValidateResponse:
    """Test previous-frame status checks."""

    @pytest.mark.parametrize("status", [0x01, 0x81, 0x35, 0x09])
    def test_accepts_ok_and_not_ready(self, status):
        """Test OK (0) and NOT_READY (3) previous-frame status pass."""
        validate_response(_response(status))

    def test_rejected(self):
        with pytest.raises(InvalidResponseError, match="REJECTED"):
            validate_response(_response(0x11))

    def test_bad(self):
        with pytest.raises(InvalidResponseError, match="BAD"):
            validate_response(_response(0xA1))


class TestRequireResponse:
    """Test response lookup."""

    def test_found(self):
        response = _response(0x01, (0x91, b'\x01'))
        assert require_response(response, 0x91).data == b'\x01'

    def test_missing(self):
        with pytest.raises(InvalidResponseError, match="No response for command 0x91"):
            require_response(_response(0x01), 0x91)


class TestParseVersionResponse:
    """Test GET_VERSION parsing."""

    def test_parse_version(self):
        """Test manufacturer, class, model and little-endian versions."""
        response = _response(0x01, (0x91, bytes.fromhex("2205010a00d204")))
        version = parse_version_response(response)

        assert version == {
            "manufacturer": 0x22,
            "class_id": 5,
            "model": 1,
            "hardware_version": 10,
            "software_version": 1234,
        }

    def test_parse_version_extra_bytes(self):
        """Test bytes after the version fields are ignored."""
        response = _response(0x01, (0x91, bytes.fromhex("2205010a00d204ffff")))
        assert parse_version_response(response)["software_version"] == 1234

    def test_parse_version_truncated(self):
        response = _response(0x01, (0x91, b'\x22\x05\x01'))
        with pytest.raises(FormatError, match="Version response too short"):
            parse_version_response(response)


class TestParseBatteryLevelResponse:
    """Test battery level parsing."""

    def test_nested_in_wrapper(self):
        """Test the level is found inside the GET_PM_DATA wrapper response."""
        response = _response(0x01, (0x7F, bytes.fromhex("97014b")))
        assert parse_battery_level_response(response) == 75

    def test_top_level(self):
        response = _response(0x01, (0x97, b'\x64'))
        assert parse_battery_level_response(response) == 100

    def test_out_of_range(self):
        response = _response(0x01, (0x97, b'\x65'))
        with pytest.raises(InvalidResponseError, match="out of range"):
            parse_battery_level_response(response)

    def test_empty_data(self):
        response = _response(0x01, (0x97, b''))
        with pytest.raises(FormatError):
            parse_battery_level_response(response)

    def test_no_answer(self):
        with pytest.raises(InvalidResponseError):
            parse_battery_level_response(_response(0x01))
