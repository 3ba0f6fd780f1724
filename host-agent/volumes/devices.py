import logging
import os
import threading
from typing import Callable, Dict, Iterable, List, NoReturn

from .base import NoDevicesAvailable

logger = logging.getLogger("volume-agent")

DEFAULT_DEVICES = ["/dev/xvdu", "/dev/xvdv", "/dev/xvdw", "/dev/xvdx", "/dev/xvdy", "/dev/xvdz"]


def abort_process(message: str) -> NoReturn:
    """Terminate at once; the local device bookkeeping can no longer be trusted."""
    logger.critical(message)
    logging.shutdown()
    os._exit(70)


class DeviceAllocator:
    """Hands out device paths from a fixed, ordered pool.

    The lock is held only while scanning or mutating the map, never across
    cloud calls.
    """

    def __init__(self, devices: Iterable[str] = DEFAULT_DEVICES, fatal: Callable[[str], None] = abort_process):
        self.devices: List[str] = list(devices)
        if not self.devices:
            raise ValueError("device pool is empty")
        if len(set(self.devices)) != len(self.devices):
            raise ValueError(f"device pool contains duplicates: {self.devices}")
        self.fatal = fatal
        self._lock = threading.Lock()
        self._device_map: Dict[str, str] = {}

    def assign(self, volume_id: str) -> str:
        """Reserve the first free device for ``volume_id``."""
        with self._lock:
            for device in self.devices:
                if not self._device_map.get(device):
                    self._device_map[device] = volume_id
                    logger.debug("Assigned device %s to volume %s", device, volume_id)
                    return device
        raise NoDevicesAvailable(volume_id)

    def release(self, device: str, volume_id: str) -> None:
        """Release a reservation; only used when an attach is known to have failed."""
        with self._lock:
            current = self._device_map.get(device, "")
            if current != volume_id:
                message = f"device map logic error: {device!r} -> {current!r}, not {volume_id!r}"
            else:
                del self._device_map[device]
                logger.debug("Released device %s from volume %s", device, volume_id)
                return
        self.fatal(message)

    def claim(self, device: str, volume_id: str) -> None:
        """Record a device already attached to this node for ``volume_id``."""
        if device not in self.devices:
            return
        with self._lock:
            current = self._device_map.get(device, "")
            if not current:
                self._device_map[device] = volume_id
                logger.info("Recorded existing attachment of volume %s on %s", volume_id, device)
                return
        if current != volume_id:
            logger.warning("Device %s observed for volume %s but reserved for %s", device, volume_id, current)

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._device_map)
