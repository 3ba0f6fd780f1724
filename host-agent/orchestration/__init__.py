# Orchestration module for volume attach
from .attach import (
    AmbiguousVolume,
    AttachDeviceError,
    AttachedElsewhere,
    AttachError,
    AttachOrchestrator,
    AttachTransportError,
    UnexpectedVolumeState,
    VolumeVanished,
)
from .manager import VolumeManager

__all__ = [
    "AmbiguousVolume",
    "AttachDeviceError",
    "AttachError",
    "AttachOrchestrator",
    "AttachTransportError",
    "AttachedElsewhere",
    "UnexpectedVolumeState",
    "VolumeManager",
    "VolumeVanished",
]
