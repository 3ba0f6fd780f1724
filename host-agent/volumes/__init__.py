"""
Volume handling for the Volume Agent.
This package provides:
- Tag decoding for cluster volumes (fail-safe on malformed values)
- The volume catalog (listing and attach-status polling)
- The local device allocator
"""

from .base import NoDevicesAvailable, VolumeError
from .catalog import VolumeCatalog, mountable_filters, mounted_filters
from .devices import DEFAULT_DEVICES, DeviceAllocator, abort_process
from .etcd import parse_etcd_cluster_spec
from .tags import TagDecodeResult, TagOutcome, decode_volume_tags

__all__ = [
    "DEFAULT_DEVICES",
    "DeviceAllocator",
    "NoDevicesAvailable",
    "TagDecodeResult",
    "TagOutcome",
    "VolumeCatalog",
    "VolumeError",
    "abort_process",
    "decode_volume_tags",
    "mountable_filters",
    "mounted_filters",
    "parse_etcd_cluster_spec",
]
