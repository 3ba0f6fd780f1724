#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Volume Manager module for the Volume Agent.
This module ties identity, cluster discovery, the volume catalog, the device
allocator and the attach orchestrator together for one process.
"""
import dataclasses
import logging
import time
from typing import Callable, Iterable, List, Optional

from cloud import Inventory, MetadataSource
from discovery import ClusterDiscoverer, IdentityResolver
from models import AttachOperation, InstanceIdentity, IPAddress, Volume
from volumes import DEFAULT_DEVICES, DeviceAllocator, VolumeCatalog, mountable_filters, mounted_filters

from .attach import DEFAULT_POLL_INTERVAL, AttachOrchestrator

logger = logging.getLogger("volume-agent")


class VolumeManager:
    """Cluster volume operations for the local instance."""

    def __init__(
        self,
        identity: InstanceIdentity,
        cluster_id: str,
        inventory: Inventory,
        allocator: DeviceAllocator,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.identity = identity
        self.cluster_id = cluster_id
        self.inventory = inventory
        self.allocator = allocator
        self.catalog = VolumeCatalog(inventory, identity.instance_id)
        self.orchestrator = AttachOrchestrator(
            identity.instance_id, inventory, self.catalog, allocator, sleep=sleep, poll_interval=poll_interval
        )

    @classmethod
    def create(
        cls,
        metadata: MetadataSource,
        inventory_factory: Callable[[str], Inventory],
        devices: Iterable[str] = DEFAULT_DEVICES,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        allocator: Optional[DeviceAllocator] = None,
    ) -> "VolumeManager":
        """Resolve identity and cluster membership, then build the manager.

        ``inventory_factory`` receives the resolved region.
        """
        identity = IdentityResolver(metadata).resolve()
        inventory = inventory_factory(identity.region)
        cluster_id, internal_ip = ClusterDiscoverer(inventory).discover(identity.instance_id)
        identity = dataclasses.replace(identity, internal_ip=internal_ip)
        return cls(
            identity,
            cluster_id,
            inventory,
            allocator or DeviceAllocator(devices),
            sleep=sleep,
            poll_interval=poll_interval,
        )

    @property
    def internal_ip(self) -> Optional[IPAddress]:
        return self.identity.internal_ip

    def find_volumes(self) -> List[Volume]:
        """Cluster volumes attachable in this zone."""
        volumes = self.catalog.list(mountable_filters(self.cluster_id, self.identity.zone))
        for volume in volumes:
            if volume.local_device:
                self.allocator.claim(volume.local_device, volume.id)
        return volumes

    def find_mounted_volumes(self) -> List[Volume]:
        """Cluster volumes attached to this instance."""
        return self.catalog.list(mounted_filters(self.cluster_id, self.identity.instance_id))

    def find_volume(self, volume_id: str) -> Optional[Volume]:
        for volume in self.find_volumes():
            if volume.id == volume_id:
                return volume
        return None

    def attach_volume(self, volume: Volume, poll_interval: Optional[float] = None) -> AttachOperation:
        logger.info("Attaching volume %s to %s", volume.id, self.identity.instance_id)
        return self.orchestrator.attach(volume, poll_interval=poll_interval)
