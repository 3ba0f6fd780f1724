#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
API handlers module for the Volume Agent.
This module contains the API endpoint handlers for volume operations.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException

from cloud import CloudError
from models import AttachRequest
from orchestration import AttachError, VolumeManager
from utils.validation import identity_to_dict, operation_to_dict, validate_volume_id, volume_to_dict

logger = logging.getLogger("volume-agent")


class APIHandlers:

    def __init__(self, manager: VolumeManager, agent_cfg: Dict[str, Any]):
        self.manager = manager
        self.agent_cfg = agent_cfg

    def healthz(self) -> Dict[str, Any]:
        return {"status": "ok"}

    def v1_identity(self) -> Dict[str, Any]:
        return {
            "status": "success",
            "identity": identity_to_dict(self.manager.identity),
            "cluster_id": self.manager.cluster_id,
        }

    def v1_config_effective(self) -> Dict[str, Any]:
        return {"status": "success", "config": self.agent_cfg}

    def v1_devices(self) -> Dict[str, Any]:
        return {
            "status": "success",
            "pool": list(self.manager.allocator.devices),
            "assigned": self.manager.allocator.snapshot(),
        }

    def v1_list_volumes(self, mounted: bool = False) -> Dict[str, Any]:
        try:
            volumes = self.manager.find_mounted_volumes() if mounted else self.manager.find_volumes()
        except CloudError as e:
            logger.error("Failed to list volumes: %s", e)
            raise HTTPException(status_code=502, detail=str(e))
        return {"status": "success", "volumes": [volume_to_dict(v) for v in volumes]}

    def v1_attach_volume(self, volume_id: str, req: Optional[AttachRequest] = None) -> Dict[str, Any]:
        """Attach a cluster volume to this instance; blocks until a terminal state."""
        try:
            validate_volume_id(volume_id)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        try:
            volume = self.manager.find_volume(volume_id)
        except CloudError as e:
            logger.error("Failed to look up volume %s: %s", volume_id, e)
            raise HTTPException(status_code=502, detail=str(e))
        if volume is None:
            raise HTTPException(status_code=404, detail=f"Volume {volume_id} not found in this cluster/zone")
        poll_interval = req.poll_interval if req else None
        try:
            op = self.manager.attach_volume(volume, poll_interval=poll_interval)
        except AttachError as e:
            logger.error("Attach of volume %s failed in state %s: %s", volume_id, e.state.value, e)
            raise HTTPException(
                status_code=409,
                detail={"message": str(e), "operation": operation_to_dict(e.operation)},
            )
        return {"status": "success", "operation": operation_to_dict(op), "volume": volume_to_dict(volume)}
