"""Connect to a PM5 and print live rowing telemetry.

Usage:
    uv run python examples/row_monitor.py --duration 60
    uv run python examples/row_monitor.py --address AA:BB:CC:DD:EE:FF --multiplexed
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections import Counter
from datetime import datetime

from pm5link import (
    ConnectionSession,
    DisconnectedEvent,
    ParseErrorEvent,
    SessionObserver,
    TelemetryEvent,
    discover_devices,
)


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _format_pace(seconds: float) -> str:
    minutes, rest = divmod(seconds, 60)
    return f"{int(minutes)}:{rest:04.1f}"


class PrintingObserver(SessionObserver):
    """Print each record as it arrives."""

    def __init__(self) -> None:
        self.counts: Counter[str] = Counter()

    def on_connected(self, device_info) -> None:
        print(f"[{_timestamp()}] Connected: {device_info.as_dict()}")

    def on_disconnected(self, event: DisconnectedEvent) -> None:
        print(f"[{_timestamp()}] Disconnected ({event.reason})")

    def on_general_status(self, event: TelemetryEvent) -> None:
        self.counts[event.stream_id] += 1
        record = event.record
        print(
            f"[{_timestamp()}] status t={record.elapsed_time:.1f}s d={record.distance:.1f}m "
            f"state={record.workout_state} drag={record.drag_factor}"
        )

    def on_additional_status(self, event: TelemetryEvent) -> None:
        self.counts[event.stream_id] += 1
        record = event.record
        print(
            f"[{_timestamp()}] pace={_format_pace(record.current_pace)}/500m "
            f"spm={record.stroke_rate} hr={record.heart_rate}"
        )

    def on_stroke_data(self, event: TelemetryEvent) -> None:
        self.counts[event.stream_id] += 1
        record = event.record
        print(
            f"[{_timestamp()}] stroke #{record.stroke_count} "
            f"drive={record.drive_length:.2f}m peak={record.peak_drive_force:.1f}N"
        )

    def on_split_data(self, event: TelemetryEvent) -> None:
        self.counts[event.stream_id] += 1
        record = event.record
        print(
            f"[{_timestamp()}] split {record.split_number} "
            f"{record.split_distance:.0f}m in {record.split_time:.1f}s"
        )

    def on_parse_error(self, event: ParseErrorEvent) -> None:
        if event.unknown_tag is not None:
            detail = f"tag=0x{event.unknown_tag:02x}"
        else:
            detail = f"len={event.actual_length} need={event.expected_min_length}"
        print(f"[{_timestamp()}] parse_error stream={event.stream_id} {detail}")


async def monitor(address: str | None, duration: float, multiplexed: bool) -> None:
    """Connect, subscribe to telemetry and print records."""
    ble_device = None
    if address is None:
        devices = await discover_devices()
        if not devices:
            print("No PM5 found")
            return
        ble_device = devices[0]
        address = ble_device.address
        print(f"Using {ble_device.name} ({address})")

    observer = PrintingObserver()
    async with ConnectionSession(address, ble_device=ble_device, observer=observer) as session:
        print(f"Notifiable characteristics: {len(session.notifiable_characteristics)}")
        if session.has_capability("control_receive"):
            print(f"Battery: {await session.get_battery_level()}%")

        await session.subscribe_telemetry(include_multiplexed=multiplexed)
        if duration > 0:
            await asyncio.sleep(duration)
        else:
            while session.is_ready:
                await asyncio.sleep(1)

    print("\nSummary:")
    for stream_id, count in sorted(observer.counts.items()):
        print(f"  {stream_id}: {count}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print live telemetry from a Concept2 PM5.")
    parser.add_argument("--address", help="Monitor MAC address (default: first PM5 found)")
    parser.add_argument(
        "--duration",
        type=float,
        default=60.0,
        help="Listen duration in seconds (0 = run until Ctrl+C). Default: 60",
    )
    parser.add_argument(
        "--multiplexed",
        action="store_true",
        help="Also subscribe to the multiplexed characteristic.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)
    try:
        asyncio.run(monitor(address=args.address, duration=args.duration, multiplexed=args.multiplexed))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
