from __future__ import annotations


class VolumeError(Exception):
    """Generic volume handling error."""

    pass


class NoDevicesAvailable(VolumeError):
    """Every device path in the pool is reserved."""

    def __init__(self, volume_id: str):
        self.volume_id = volume_id
        super().__init__(f"no devices available for volume {volume_id!r}")
