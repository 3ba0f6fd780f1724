import ipaddress
import logging
from typing import Tuple

from cloud import CloudError, Inventory
from models import IPAddress
from volumes.tags import TAG_CLUSTER, tag_map

from .base import DiscoveryError

logger = logging.getLogger("volume-agent")


class ClusterDiscoverer:
    """Find the cluster tag and internal IP of an instance."""

    def __init__(self, inventory: Inventory):
        self.inventory = inventory

    def _describe_instance(self, instance_id: str):
        try:
            instances = self.inventory.describe_instances(instance_id)
        except CloudError as e:
            raise DiscoveryError(instance_id, f"error querying for EC2 instance {instance_id!r}: {e}") from e
        if len(instances) != 1:
            raise DiscoveryError(
                instance_id,
                f"unexpected number of instances found with id {instance_id!r}: {len(instances)}",
            )
        return instances[0]

    def discover(self, instance_id: str) -> Tuple[str, IPAddress]:
        instance = self._describe_instance(instance_id)
        tags = tag_map(instance.get("Tags"))
        cluster_id = tags.get(TAG_CLUSTER, "")
        if not cluster_id:
            raise DiscoveryError(
                instance_id, f"cluster tag {TAG_CLUSTER!r} not found on this instance ({instance_id!r})"
            )
        try:
            internal_ip = ipaddress.ip_address(instance.get("PrivateIpAddress") or "")
        except ValueError as e:
            raise DiscoveryError(instance_id, f"internal IP not found on this instance ({instance_id!r})") from e
        logger.info("Instance %s belongs to cluster %s (internal IP %s)", instance_id, cluster_id, internal_ip)
        return cluster_id, internal_ip
