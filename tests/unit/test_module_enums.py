"""Test model enums and conversions."""


from pm5link.models.enums import (
    ConnectionState,
    CsafeFrameStatus,
    CsafeMachineState,
    RecordType,
    SampleRate,
)


class TestRecordType:
    """Test RecordType enum."""

    def test_record_type_values(self):
        """Test record types carry their multiplexed tag."""
        assert RecordType.GENERAL_STATUS == 0x31
        assert RecordType.ADDITIONAL_STATUS == 0x32
        assert RecordType.STROKE_DATA == 0x35
        assert RecordType.SPLIT_DATA == 0x37

    def test_record_type_from_tag(self):
        assert RecordType(0x35) is RecordType.STROKE_DATA


class TestConnectionState:
    """Test ConnectionState enum."""

    def test_connection_state_values(self):
        assert ConnectionState.DISCONNECTED.value == "disconnected"
        assert ConnectionState.DISCOVERING_CAPABILITIES.value == "discovering_capabilities"
        assert ConnectionState.READY.value == "ready"

    def test_connection_state_count(self):
        assert len(ConnectionState) == 5


class TestSampleRate:
    """Test SampleRate enum."""

    def test_sample_rate_values(self):
        assert SampleRate.RATE_1000MS == 0
        assert SampleRate.RATE_500MS == 1
        assert SampleRate.RATE_250MS == 2
        assert SampleRate.RATE_100MS == 3


class TestCsafeStatus:
    """Test CSAFE status enums."""

    def test_machine_state_values(self):
        assert CsafeMachineState.READY == 1
        assert CsafeMachineState.IN_USE == 5
        assert CsafeMachineState.OFFLINE == 9

    def test_machine_state_has_no_code_4(self):
        assert 4 not in {state.value for state in CsafeMachineState}

    def test_frame_status_values(self):
        assert CsafeFrameStatus.OK == 0
        assert CsafeFrameStatus.REJECTED == 1
        assert CsafeFrameStatus.BAD == 2
        assert CsafeFrameStatus.NOT_READY == 3
