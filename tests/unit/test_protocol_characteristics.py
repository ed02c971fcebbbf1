"""Test characteristic UUIDs and stream resolution."""

from pm5link.models.enums import RecordType
from pm5link.protocol.characteristics import (
    DEVICE_INFO_CHARACTERISTICS,
    GENERAL_STATUS,
    KNOWN_STREAMS,
    MULTIPLEXED,
    OPTIONAL_CHARACTERISTICS,
    PRIMARY_TELEMETRY_STREAMS,
    REQUIRED_CHARACTERISTICS,
    STROKE_DATA,
    StreamKind,
    c2_uuid,
    resolve_stream,
)


class TestUuids:
    """Test Concept2 UUID expansion."""

    def test_c2_uuid(self):
        assert c2_uuid(0x0031) == "ce060031-43e5-11e4-916c-0800200c9a66"

    def test_multiplexed_uuid(self):
        assert MULTIPLEXED == "ce060080-43e5-11e4-916c-0800200c9a66"

    def test_uuids_are_lowercase(self):
        for uuid in (*REQUIRED_CHARACTERISTICS.values(), *OPTIONAL_CHARACTERISTICS.values()):
            assert uuid == uuid.lower()


class TestResolveStream:
    """Test stream id resolution."""

    def test_dedicated_stream(self):
        spec = resolve_stream("stroke-data")
        assert spec.uuid == STROKE_DATA
        assert spec.kind is StreamKind.DEDICATED
        assert spec.record_type is RecordType.STROKE_DATA

    def test_multiplexed_stream(self):
        spec = resolve_stream("multiplexed")
        assert spec.kind is StreamKind.MULTIPLEXED
        assert spec.record_type is None

    def test_generic_uuid(self):
        """Test an unknown id is treated as a raw characteristic UUID."""
        spec = resolve_stream("0000FFF1-0000-1000-8000-00805F9B34FB")
        assert spec.stream_id == "0000fff1-0000-1000-8000-00805f9b34fb"
        assert spec.uuid == "0000fff1-0000-1000-8000-00805f9b34fb"
        assert spec.kind is StreamKind.RAW

    def test_known_uuid_resolves_to_named_stream(self):
        """Test a known characteristic UUID in any case maps to its named stream."""
        assert resolve_stream(STROKE_DATA) is KNOWN_STREAMS["stroke-data"]
        assert resolve_stream(STROKE_DATA.upper()) is KNOWN_STREAMS["stroke-data"]
        assert resolve_stream(MULTIPLEXED.upper()).kind is StreamKind.MULTIPLEXED

    def test_generic_uuid_case_folded(self):
        assert resolve_stream("0000FFF1-0000-1000-8000-00805F9B34FB") == \
            resolve_stream("0000fff1-0000-1000-8000-00805f9b34fb")

    def test_primary_streams_are_dedicated(self):
        for stream_id in PRIMARY_TELEMETRY_STREAMS:
            assert KNOWN_STREAMS[stream_id].kind is StreamKind.DEDICATED


class TestCapabilitySets:
    """Test required and optional characteristic sets."""

    def test_primary_telemetry_required(self):
        assert REQUIRED_CHARACTERISTICS["general-status"] == GENERAL_STATUS
        for stream_id in PRIMARY_TELEMETRY_STREAMS:
            assert stream_id in REQUIRED_CHARACTERISTICS

    def test_multiplexed_optional(self):
        assert "multiplexed" in OPTIONAL_CHARACTERISTICS
        assert "multiplexed" not in REQUIRED_CHARACTERISTICS

    def test_sets_disjoint(self):
        assert not set(REQUIRED_CHARACTERISTICS) & set(OPTIONAL_CHARACTERISTICS)

    def test_device_info_fields_covered(self):
        """Test every device info characteristic is required or optional."""
        known = set(REQUIRED_CHARACTERISTICS.values()) | set(OPTIONAL_CHARACTERISTICS.values())
        assert set(DEVICE_INFO_CHARACTERISTICS.values()) <= known
