"""Static device information model."""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass
class DeviceInformation:
    """Fields read from the PM5 device information service.

    Each field is None until read, and stays None if the read failed or the
    characteristic is absent.
    """

    model_number: str | None = None
    serial_number: str | None = None
    hardware_revision: str | None = None
    firmware_revision: str | None = None
    manufacturer_name: str | None = None
    erg_machine_type: int | None = None

    def as_dict(self) -> dict[str, str | int | None]:
        """Return all fields, including unset ones."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
