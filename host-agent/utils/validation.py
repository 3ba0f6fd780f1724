#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utilities module for the Volume Agent.
This module contains common utility functions used across the application.
"""
import dataclasses
import json
import re
from typing import Any, Dict

import typer

from models import AttachOperation, InstanceIdentity, Volume


def fail(msg: str) -> None:
    """Print the error as JSON and exit with code 1."""
    typer.echo(json.dumps({"error": msg}))
    raise typer.Exit(code=1)


def succeed(data: Dict[str, Any]) -> None:
    """Print ``data`` as JSON and exit with code 0."""
    typer.echo(json.dumps(data))
    raise typer.Exit(code=0)


def validate_volume_id(volume_id: str) -> None:
    """Validate an EBS volume id (vol-<hex>). Raise ValueError on error."""
    if not re.fullmatch(r"vol-[0-9a-f]+", volume_id or ""):
        raise ValueError(f"Invalid volume id '{volume_id}'. Expected vol-<hex>")


def volume_to_dict(volume: Volume) -> Dict[str, Any]:
    return dataclasses.asdict(volume)


def identity_to_dict(identity: InstanceIdentity) -> Dict[str, Any]:
    data = dataclasses.asdict(identity)
    data["internal_ip"] = str(identity.internal_ip) if identity.internal_ip is not None else None
    return data


def operation_to_dict(op: AttachOperation) -> Dict[str, Any]:
    return {
        "volume_id": op.volume_id,
        "state": op.state.value,
        "device": op.device,
        "history": [s.value for s in op.history],
    }
