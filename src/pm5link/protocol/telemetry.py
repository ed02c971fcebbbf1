"""Telemetry notification decoding.

Each record type has a fixed little-endian layout. A record may also arrive
inside the multiplexed characteristic, where byte 0 is a type tag and the
record follows shifted by one byte.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from ..exceptions import FormatError
from ..models.enums import RecordType
from ..models.telemetry import (
    AdditionalStatus,
    GeneralStatus,
    SplitData,
    StrokeData,
    TelemetryRecord,
    UnknownRecord,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Field:
    name: str
    offset: int
    width: int
    scale: float | None = None


GENERAL_STATUS_LAYOUT: Final[tuple[_Field, ...]] = (
    _Field("elapsed_time", 0, 3, 0.01),
    _Field("distance", 3, 3, 0.1),
    _Field("workout_type", 6, 1),
    _Field("interval_type", 7, 1),
    _Field("workout_state", 8, 1),
    _Field("rowing_state", 9, 1),
    _Field("stroke_state", 10, 1),
    _Field("total_work_distance", 11, 3),
    _Field("workout_duration", 14, 3),
    _Field("workout_duration_type", 17, 1),
    _Field("drag_factor", 18, 1),
)

ADDITIONAL_STATUS_LAYOUT: Final[tuple[_Field, ...]] = (
    _Field("elapsed_time", 0, 3, 0.01),
    _Field("speed", 3, 2, 0.001),
    _Field("stroke_rate", 5, 1),
    _Field("heart_rate", 6, 1),
    _Field("current_pace", 7, 2, 0.01),
    _Field("average_pace", 9, 2, 0.01),
    _Field("rest_distance", 11, 2),
    _Field("rest_time", 13, 3, 0.01),
)

STROKE_DATA_LAYOUT: Final[tuple[_Field, ...]] = (
    _Field("elapsed_time", 0, 3, 0.01),
    _Field("distance", 3, 3, 0.1),
    _Field("drive_length", 6, 1, 0.01),
    _Field("drive_time", 7, 1, 0.01),
    _Field("stroke_recovery_time", 8, 2, 0.01),
    _Field("stroke_distance", 10, 2, 0.01),
    _Field("peak_drive_force", 12, 2, 0.1),
    _Field("average_drive_force", 14, 2, 0.1),
    _Field("work_per_stroke", 16, 2, 0.1),
    _Field("stroke_count", 18, 2),
)

SPLIT_DATA_LAYOUT: Final[tuple[_Field, ...]] = (
    _Field("elapsed_time", 0, 3, 0.01),
    _Field("distance", 3, 3, 0.1),
    _Field("split_time", 6, 3, 0.1),
    _Field("split_distance", 9, 3, 0.1),
    _Field("rest_time", 12, 2),
    _Field("rest_distance", 14, 2),
    _Field("split_type", 16, 1),
    _Field("split_number", 17, 1),
)

_RECORDS: Final = {
    RecordType.GENERAL_STATUS: (GeneralStatus, GENERAL_STATUS_LAYOUT),
    RecordType.ADDITIONAL_STATUS: (AdditionalStatus, ADDITIONAL_STATUS_LAYOUT),
    RecordType.STROKE_DATA: (StrokeData, STROKE_DATA_LAYOUT),
    RecordType.SPLIT_DATA: (SplitData, SPLIT_DATA_LAYOUT),
}

# Minimum payload length per record type (without multiplex tag)
RECORD_LENGTHS: Final[dict[RecordType, int]] = {
    record_type: max(f.offset + f.width for f in layout)
    for record_type, (_, layout) in _RECORDS.items()
}

MULTIPLEX_TAG_LENGTH = 1


def read_uint_le(data: bytes, offset: int, width: int) -> int:
    """Read an unsigned little-endian integer of 1-3 bytes (no sign extension)."""
    return int.from_bytes(data[offset:offset + width], byteorder="little", signed=False)


def decode_record(record_type: RecordType, data: bytes, multiplexed: bool = False) -> TelemetryRecord:
    """Decode one record of a known type.

    Args:
        record_type: Which layout to apply
        data: Notification payload
        multiplexed: True if data starts with the one-byte multiplex tag

    Returns:
        The decoded record

    Raises:
        FormatError: If data is shorter than the layout requires
    """
    record_type = RecordType(record_type)
    record_cls, layout = _RECORDS[record_type]
    offset = MULTIPLEX_TAG_LENGTH if multiplexed else 0
    required = RECORD_LENGTHS[record_type] + offset

    if len(data) < required:
        raise FormatError(required, len(data), what=record_cls.__name__)

    values: dict[str, int | float] = {}
    for field in layout:
        raw = read_uint_le(data, offset + field.offset, field.width)
        values[field.name] = raw * field.scale if field.scale is not None else raw

    return record_cls(**values)


def parse_general_status(data: bytes, multiplexed: bool = False) -> GeneralStatus:
    """Parse general status (19 bytes, +1 when multiplexed)."""
    return decode_record(RecordType.GENERAL_STATUS, data, multiplexed)


def parse_additional_status(data: bytes, multiplexed: bool = False) -> AdditionalStatus:
    """Parse additional status (16 bytes, +1 when multiplexed)."""
    return decode_record(RecordType.ADDITIONAL_STATUS, data, multiplexed)


def parse_stroke_data(data: bytes, multiplexed: bool = False) -> StrokeData:
    """Parse stroke data (20 bytes, +1 when multiplexed)."""
    return decode_record(RecordType.STROKE_DATA, data, multiplexed)


def parse_split_data(data: bytes, multiplexed: bool = False) -> SplitData:
    """Parse split/interval data (18 bytes, +1 when multiplexed)."""
    return decode_record(RecordType.SPLIT_DATA, data, multiplexed)


def parse_multiplexed(data: bytes) -> TelemetryRecord:
    """Parse a multiplexed notification.

    Format: [tag:1][record...]

    Tags 0x31, 0x32, 0x35 and 0x37 select general status, additional status,
    stroke data and split data. Any other tag decodes to UnknownRecord.

    Raises:
        FormatError: If data is empty or shorter than the tagged record
    """
    if len(data) < MULTIPLEX_TAG_LENGTH:
        raise FormatError(MULTIPLEX_TAG_LENGTH, len(data), what="Multiplexed frame")

    tag = data[0]
    try:
        record_type = RecordType(tag)
    except ValueError:
        _LOGGER.debug("Unknown multiplexed tag 0x%02x (%d bytes)", tag, len(data))
        return UnknownRecord(tag=tag, payload=bytes(data[1:]))

    return decode_record(record_type, data, multiplexed=True)
