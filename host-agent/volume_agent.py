#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Licensed to the Apache Software Foundation (ASF) under one
# or more contributor license agreements.  See the NOTICE file
# distributed with this work for additional information
# regarding copyright ownership.  The ASF licenses this file
# to you under the Apache License, Version 2.0 (the
# "License"); you may not use this file except in compliance
# with the License.  You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE/2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
# KIND, either express or implied.  See the License for the
# specific language governing permissions and limitations
# under the License.
from __future__ import annotations

import logging
import os
from typing import Any, Dict

import typer
import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api import register_routes
from cli import CLICommands
from cloud import make_inventory, make_metadata_source
from config import ConfigManager
from orchestration import VolumeManager

# Global variables
logger = logging.getLogger("volume-agent")
logger.setLevel(logging.INFO)
_DEF_HANDLER_SET = False
# Global configuration
AGENT_CFG: Dict[str, Any] = {}
# Initialize FastAPI app
app = FastAPI(title="Volume Agent", version="1.0.0")


def _apply_logging_from_cfg(cfg: Dict[str, Any]) -> None:
    """Apply logging configuration from agent config."""
    global _DEF_HANDLER_SET
    if _DEF_HANDLER_SET:
        return
    log_cfg = cfg.get("logging", {})
    level = str(log_cfg.get("level", "INFO")).upper()
    try:
        logger.setLevel(getattr(logging, level))
    except AttributeError:
        logger.setLevel(logging.INFO)
    # Add console handler if not present
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    _DEF_HANDLER_SET = True


def _load_config() -> Dict[str, Any]:
    global AGENT_CFG
    if not AGENT_CFG:
        AGENT_CFG = ConfigManager().load_agent_config()
        _apply_logging_from_cfg(AGENT_CFG)
    return AGENT_CFG


def build_manager(cfg: Dict[str, Any]) -> VolumeManager:
    """Resolve identity and cluster membership and build the volume manager."""
    aws_cfg = cfg.get("aws", {})
    return VolumeManager.create(
        make_metadata_source(aws_cfg),
        lambda region: make_inventory(region, aws_cfg),
        devices=cfg["devices"],
        poll_interval=cfg["attach"]["poll_interval_seconds"],
    )


# FastAPI event handlers
@app.on_event("startup")
async def startup_event():
    """Initialize agent on startup."""
    logger.info("Starting Volume Agent...")
    cfg = _load_config()
    logger.info("Configuration loaded successfully")
    logger.info("AGENT_CFG keys: %s", list(cfg.keys()))
    try:
        manager = build_manager(cfg)
    except Exception as e:
        logger.critical("Volume Agent initialization failed: %s", e)
        raise
    register_routes(app, manager, cfg)
    logger.info(
        "Volume Agent started for cluster %s on %s",
        manager.cluster_id,
        manager.identity.instance_id,
    )


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log incoming requests immediately upon receipt."""
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    # Attached volumes stay attached
    logger.info("Volume Agent shut down")


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    logger.error("Validation error: %s", exc)
    return JSONResponse(status_code=422, content={"error": "Validation error", "detail": exc.errors()})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions."""
    logger.error("HTTP error: %s", exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# CLI interface
cli = typer.Typer()


def _cli_commands() -> CLICommands:
    return CLICommands(lambda: build_manager(_load_config()))


@cli.command()
def identity():
    """Show instance identity and cluster."""
    _cli_commands().identity()


@cli.command()
def volumes(mounted: bool = False):
    """List cluster volumes."""
    _cli_commands().volumes(mounted)


@cli.command()
def attach(volume_id: str):
    """Attach a cluster volume to this instance."""
    _cli_commands().attach(volume_id)


def main():
    """Main entry point."""
    cfg = _load_config()
    # Run API by default; set VOLUME_AGENT_MODE=cli to use the local CLI instead
    mode = os.environ.get("VOLUME_AGENT_MODE", "api").lower()
    if mode == "cli":
        cli()
    else:
        uvicorn.run(app, host=cfg["bind_host"], port=cfg["bind_port"], reload=False)


if __name__ == "__main__":
    main()
