"""PM5 GATT service and characteristic UUIDs, and stream identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from ..models.enums import RecordType

BASE_UUID_FMT = "ce06{short:04x}-43e5-11e4-916c-0800200c9a66"


def c2_uuid(short: int) -> str:
    """Expand a 16-bit Concept2 identifier into its 128-bit UUID."""
    return BASE_UUID_FMT.format(short=short)


# Services
DISCOVERY_SERVICE_UUID = c2_uuid(0x0000)
INFORMATION_SERVICE_UUID = c2_uuid(0x0010)
CONTROL_SERVICE_UUID = c2_uuid(0x0020)
ROWING_SERVICE_UUID = c2_uuid(0x0030)

# Device information
MODEL_NUMBER = c2_uuid(0x0011)
SERIAL_NUMBER = c2_uuid(0x0012)
HARDWARE_REVISION = c2_uuid(0x0013)
FIRMWARE_REVISION = c2_uuid(0x0014)
MANUFACTURER_NAME = c2_uuid(0x0015)
ERG_MACHINE_TYPE = c2_uuid(0x0016)

# Control (CSAFE). Names are from the monitor's point of view.
CONTROL_RECEIVE = c2_uuid(0x0021)   # host writes commands here
CONTROL_TRANSMIT = c2_uuid(0x0022)  # host reads responses here

# Rowing
GENERAL_STATUS = c2_uuid(0x0031)
ADDITIONAL_STATUS = c2_uuid(0x0032)
ADDITIONAL_STATUS_2 = c2_uuid(0x0033)
SAMPLE_RATE = c2_uuid(0x0034)
STROKE_DATA = c2_uuid(0x0035)
ADDITIONAL_STROKE_DATA = c2_uuid(0x0036)
SPLIT_DATA = c2_uuid(0x0037)
ADDITIONAL_SPLIT_DATA = c2_uuid(0x0038)
WORKOUT_SUMMARY = c2_uuid(0x0039)
WORKOUT_SUMMARY_2 = c2_uuid(0x003A)
HEART_RATE_BELT = c2_uuid(0x003B)
FORCE_CURVE = c2_uuid(0x003D)
MULTIPLEXED = c2_uuid(0x0080)

PM5_NAME_PREFIX = "PM5"


class StreamKind(Enum):
    """How notifications of a stream are decoded."""
    DEDICATED = "dedicated"      # one record type per notification
    MULTIPLEXED = "multiplexed"  # tag byte + record
    RAW = "raw"                  # forwarded undecoded


@dataclass(frozen=True, slots=True)
class StreamSpec:
    """Resolved description of one subscribable stream."""

    stream_id: str
    uuid: str
    kind: StreamKind
    record_type: RecordType | None = None


STREAM_GENERAL_STATUS = "general-status"
STREAM_ADDITIONAL_STATUS = "additional-status"
STREAM_STROKE_DATA = "stroke-data"
STREAM_SPLIT_DATA = "split-data"
STREAM_MULTIPLEXED = "multiplexed"

KNOWN_STREAMS: Final[dict[str, StreamSpec]] = {
    spec.stream_id: spec
    for spec in (
        StreamSpec(STREAM_GENERAL_STATUS, GENERAL_STATUS, StreamKind.DEDICATED, RecordType.GENERAL_STATUS),
        StreamSpec(STREAM_ADDITIONAL_STATUS, ADDITIONAL_STATUS, StreamKind.DEDICATED, RecordType.ADDITIONAL_STATUS),
        StreamSpec(STREAM_STROKE_DATA, STROKE_DATA, StreamKind.DEDICATED, RecordType.STROKE_DATA),
        StreamSpec(STREAM_SPLIT_DATA, SPLIT_DATA, StreamKind.DEDICATED, RecordType.SPLIT_DATA),
        StreamSpec(STREAM_MULTIPLEXED, MULTIPLEXED, StreamKind.MULTIPLEXED),
        StreamSpec("additional-status-2", ADDITIONAL_STATUS_2, StreamKind.RAW),
        StreamSpec("additional-stroke-data", ADDITIONAL_STROKE_DATA, StreamKind.RAW),
        StreamSpec("additional-split-data", ADDITIONAL_SPLIT_DATA, StreamKind.RAW),
        StreamSpec("workout-summary", WORKOUT_SUMMARY, StreamKind.RAW),
        StreamSpec("workout-summary-2", WORKOUT_SUMMARY_2, StreamKind.RAW),
        StreamSpec("heart-rate-belt", HEART_RATE_BELT, StreamKind.RAW),
        StreamSpec("force-curve", FORCE_CURVE, StreamKind.RAW),
    )
}

PRIMARY_TELEMETRY_STREAMS: Final[tuple[str, ...]] = (
    STREAM_GENERAL_STATUS,
    STREAM_ADDITIONAL_STATUS,
    STREAM_STROKE_DATA,
    STREAM_SPLIT_DATA,
)


_STREAMS_BY_UUID: Final[dict[str, StreamSpec]] = {spec.uuid: spec for spec in KNOWN_STREAMS.values()}


def resolve_stream(stream_id: str) -> StreamSpec:
    """Map a stream id or characteristic UUID to its canonical spec.

    Known UUIDs resolve to their named stream in any case. Other UUIDs become
    RAW streams whose id is the lowercase UUID.
    """
    spec = KNOWN_STREAMS.get(stream_id)
    if spec is not None:
        return spec
    uuid = stream_id.lower()
    spec = _STREAMS_BY_UUID.get(uuid)
    if spec is not None:
        return spec
    return StreamSpec(uuid, uuid, StreamKind.RAW)


# name -> uuid; all must be present for connect to succeed
REQUIRED_CHARACTERISTICS: Final[dict[str, str]] = {
    "model_number": MODEL_NUMBER,
    "serial_number": SERIAL_NUMBER,
    "firmware_revision": FIRMWARE_REVISION,
    STREAM_GENERAL_STATUS: GENERAL_STATUS,
    STREAM_ADDITIONAL_STATUS: ADDITIONAL_STATUS,
    STREAM_STROKE_DATA: STROKE_DATA,
    STREAM_SPLIT_DATA: SPLIT_DATA,
}

# name -> uuid; absence is recorded, not fatal
OPTIONAL_CHARACTERISTICS: Final[dict[str, str]] = {
    "hardware_revision": HARDWARE_REVISION,
    "manufacturer_name": MANUFACTURER_NAME,
    "erg_machine_type": ERG_MACHINE_TYPE,
    STREAM_MULTIPLEXED: MULTIPLEXED,
    "control_receive": CONTROL_RECEIVE,
    "control_transmit": CONTROL_TRANSMIT,
    "sample_rate": SAMPLE_RATE,
}

# DeviceInformation field -> uuid, read during discovery
DEVICE_INFO_CHARACTERISTICS: Final[dict[str, str]] = {
    "model_number": MODEL_NUMBER,
    "serial_number": SERIAL_NUMBER,
    "hardware_revision": HARDWARE_REVISION,
    "firmware_revision": FIRMWARE_REVISION,
    "manufacturer_name": MANUFACTURER_NAME,
    "erg_machine_type": ERG_MACHINE_TYPE,
}
