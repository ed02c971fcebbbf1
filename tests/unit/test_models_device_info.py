"""Test device information model."""

from pm5link.models.device_info import DeviceInformation


class TestDeviceInformation:
    """Test DeviceInformation defaults and export."""

    def test_defaults_unset(self):
        info = DeviceInformation()
        assert all(value is None for value in info.as_dict().values())

    def test_as_dict(self):
        info = DeviceInformation(model_number="PM5", erg_machine_type=0)
        assert info.as_dict() == {
            "model_number": "PM5",
            "serial_number": None,
            "hardware_revision": None,
            "firmware_revision": None,
            "manufacturer_name": None,
            "erg_machine_type": 0,
        }
