"""PM5 BLE protocol implementation."""

from .characteristics import (
    KNOWN_STREAMS,
    PRIMARY_TELEMETRY_STREAMS,
    StreamKind,
    StreamSpec,
    c2_uuid,
    resolve_stream,
)
from .commands import (
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
from .csafe import (
    CsafeCommand,
    CsafeCommandResponse,
    CsafeResponse,
    build_frame,
    parse_command_frame,
    parse_response,
)
from .responses import (
    parse_battery_level_response,
    parse_version_response,
    validate_response,
)
from .telemetry import (
    RECORD_LENGTHS,
    decode_record,
    parse_additional_status,
    parse_general_status,
    parse_multiplexed,
    parse_split_data,
    parse_stroke_data,
)

__all__ = [
    "KNOWN_STREAMS",
    "PRIMARY_TELEMETRY_STREAMS",
    "StreamKind",
    "StreamSpec",
    "c2_uuid",
    "resolve_stream",
    "CsafeCommandCode",
    "PMCommandCode",
    "build_command_frame",
    "build_get_battery_level_command",
    "build_get_status_command",
    "build_get_version_command",
    "build_reset_command",
    "build_set_datetime_command",
    "build_terminate_workout_command",
    "CsafeCommand",
    "CsafeCommandResponse",
    "CsafeResponse",
    "build_frame",
    "parse_command_frame",
    "parse_response",
    "parse_battery_level_response",
    "parse_version_response",
    "validate_response",
    "RECORD_LENGTHS",
    "decode_record",
    "parse_additional_status",
    "parse_general_status",
    "parse_multiplexed",
    "parse_split_data",
    "parse_stroke_data",
]
