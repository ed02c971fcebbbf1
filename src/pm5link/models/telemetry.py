"""Decoded telemetry records.

Every record holds physically scaled values (seconds, meters, m/s, newtons,
joules) for scaled wire fields and plain integers for counters and state
codes. Records are immutable and created only by the telemetry codec.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .enums import RecordType


@dataclass(frozen=True, slots=True)
class GeneralStatus:
    """Rowing general status (characteristic 0x0031, 19 bytes).

    Attributes:
        elapsed_time: Workout time in seconds
        distance: Workout distance in meters
        total_work_distance: Total work distance in meters
        workout_duration: Target duration, unit given by workout_duration_type
    """

    elapsed_time: float
    distance: float
    workout_type: int
    interval_type: int
    workout_state: int
    rowing_state: int
    stroke_state: int
    total_work_distance: int
    workout_duration: int
    workout_duration_type: int
    drag_factor: int

    record_type = RecordType.GENERAL_STATUS


@dataclass(frozen=True, slots=True)
class AdditionalStatus:
    """Rowing additional status (characteristic 0x0032, 16 bytes).

    Attributes:
        speed: Speed in m/s
        stroke_rate: Strokes per minute
        heart_rate: Beats per minute (255 when no belt is paired)
        current_pace: Seconds per 500m
        average_pace: Seconds per 500m
        rest_distance: Meters
        rest_time: Seconds
    """

    elapsed_time: float
    speed: float
    stroke_rate: int
    heart_rate: int
    current_pace: float
    average_pace: float
    rest_distance: int
    rest_time: float

    record_type = RecordType.ADDITIONAL_STATUS


@dataclass(frozen=True, slots=True)
class StrokeData:
    """Per-stroke data (characteristic 0x0035, 20 bytes).

    Attributes:
        drive_length: Meters
        drive_time: Seconds
        stroke_recovery_time: Seconds
        stroke_distance: Meters
        peak_drive_force: Newtons
        average_drive_force: Newtons
        work_per_stroke: Joules
    """

    elapsed_time: float
    distance: float
    drive_length: float
    drive_time: float
    stroke_recovery_time: float
    stroke_distance: float
    peak_drive_force: float
    average_drive_force: float
    work_per_stroke: float
    stroke_count: int

    record_type = RecordType.STROKE_DATA


@dataclass(frozen=True, slots=True)
class SplitData:
    """Split/interval data (characteristic 0x0037, 18 bytes).

    Attributes:
        split_time: Seconds
        split_distance: Meters
    """

    elapsed_time: float
    distance: float
    split_time: float
    split_distance: float
    rest_time: int
    rest_distance: int
    split_type: int
    split_number: int

    record_type = RecordType.SPLIT_DATA


@dataclass(frozen=True, slots=True)
class UnknownRecord:
    """Multiplexed payload carrying a tag this library does not decode."""

    tag: int
    payload: bytes

    record_type = None


TelemetryRecord = Union[GeneralStatus, AdditionalStatus, StrokeData, SplitData, UnknownRecord]
