#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""API routes module for the Volume Agent."""
from typing import Any, Dict, Optional

from fastapi import FastAPI

from models import AttachRequest
from orchestration import VolumeManager
from .handlers import APIHandlers


def register_routes(app: FastAPI, manager: VolumeManager, agent_cfg: Dict[str, Any]) -> None:
    """Register all API routes with the FastAPI application."""
    handlers = APIHandlers(manager, agent_cfg)

    # Health and info endpoints
    @app.get("/healthz")
    def healthz():
        return handlers.healthz()

    @app.get("/v1/identity")
    def v1_identity():
        return handlers.v1_identity()

    @app.get("/v1/config/effective")
    def v1_config_effective():
        return handlers.v1_config_effective()

    @app.get("/v1/devices")
    def v1_devices():
        return handlers.v1_devices()

    # Volume endpoints
    @app.get("/v1/volumes")
    def v1_list_volumes():
        return handlers.v1_list_volumes()

    @app.get("/v1/volumes/mounted")
    def v1_list_mounted_volumes():
        return handlers.v1_list_volumes(mounted=True)

    @app.post("/v1/volumes/{volume_id}/attach")
    def v1_attach_volume(volume_id: str, req: Optional[AttachRequest] = None):
        return handlers.v1_attach_volume(volume_id, req)
