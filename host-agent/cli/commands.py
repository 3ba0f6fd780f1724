#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CLI commands module for the Volume Agent.
This module contains the command-line interface commands for volume operations.
"""
import logging
from typing import Any, Callable, Dict, Optional

from cloud import CloudError
from discovery import DiscoveryError, IdentityError
from orchestration import AttachError, VolumeManager
from utils.validation import (
    fail,
    identity_to_dict,
    operation_to_dict,
    succeed,
    validate_volume_id,
    volume_to_dict,
)

logger = logging.getLogger("volume-agent")


class CLICommands:
    """CLI commands handler."""

    def __init__(self, manager_factory: Callable[[], VolumeManager]):
        self.manager_factory = manager_factory
        self._manager: Optional[VolumeManager] = None

    def _get_manager(self) -> VolumeManager:
        if self._manager is None:
            try:
                self._manager = self.manager_factory()
            except (IdentityError, DiscoveryError, CloudError) as e:
                fail(f"Agent initialization failed: {e}")
        return self._manager

    def identity(self):
        """Show the instance identity and cluster."""
        manager = self._get_manager()
        data: Dict[str, Any] = {
            "status": "success",
            "identity": identity_to_dict(manager.identity),
            "cluster_id": manager.cluster_id,
        }
        succeed(data)

    def volumes(self, mounted: bool = False):
        """List cluster volumes (attachable in this zone, or attached here)."""
        manager = self._get_manager()
        try:
            found = manager.find_mounted_volumes() if mounted else manager.find_volumes()
        except CloudError as e:
            fail(f"Volume listing failed: {e}")
        succeed({"status": "success", "volumes": [volume_to_dict(v) for v in found]})

    def attach(self, volume_id: str):
        """Attach a cluster volume to this instance."""
        try:
            validate_volume_id(volume_id)
        except ValueError as e:
            fail(str(e))
        manager = self._get_manager()
        try:
            volume = manager.find_volume(volume_id)
        except CloudError as e:
            fail(f"Volume lookup failed: {e}")
        if volume is None:
            fail(f"Volume {volume_id} not found in this cluster/zone")
        try:
            op = manager.attach_volume(volume)
        except AttachError as e:
            fail(f"Volume attach failed ({e.state.value}): {e}")
        succeed({"status": "success", "operation": operation_to_dict(op)})
