"""
Cloud access for the Volume Agent.
This package wraps the instance metadata service and the EC2 inventory API
behind the small contracts defined in ``base``.
"""

from typing import Any, Dict

from .aws import DEFAULT_METADATA_URL, Ec2Inventory, InstanceMetadata
from .base import CloudError, Inventory, MetadataSource


def make_metadata_source(aws_cfg: Dict[str, Any]) -> InstanceMetadata:
    """Build the metadata client from the ``aws`` config section."""
    return InstanceMetadata(
        base_url=aws_cfg.get("metadata_url") or DEFAULT_METADATA_URL,
        timeout=float(aws_cfg.get("metadata_timeout", 2.0)),
    )


def make_inventory(region: str, aws_cfg: Dict[str, Any]) -> Ec2Inventory:
    """Build the EC2 inventory client for ``region`` (config ``aws.region`` wins)."""
    return Ec2Inventory.connect(aws_cfg.get("region") or region, endpoint_url=aws_cfg.get("endpoint_url"))


__all__ = [
    "CloudError",
    "Ec2Inventory",
    "InstanceMetadata",
    "Inventory",
    "MetadataSource",
    "make_inventory",
    "make_metadata_source",
]
