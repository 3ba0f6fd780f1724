import logging
from typing import Any, Dict, List, Optional

from cloud import Inventory
from models import Volume

from .tags import TAG_CLUSTER, TAG_ROLE_MASTER, decode_volume_tags

logger = logging.getLogger("volume-agent")


def new_ec2_filter(name: str, value: str) -> Dict[str, Any]:
    return {"Name": name, "Values": [value]}


def mountable_filters(cluster_id: str, zone: str) -> List[Dict[str, Any]]:
    """Cluster master volumes that can be attached in ``zone``."""
    return [
        new_ec2_filter(f"tag:{TAG_CLUSTER}", cluster_id),
        new_ec2_filter("tag-key", TAG_ROLE_MASTER),
        new_ec2_filter("availability-zone", zone),
    ]


def mounted_filters(cluster_id: str, instance_id: str) -> List[Dict[str, Any]]:
    """Cluster master volumes currently attached to ``instance_id``."""
    return [
        new_ec2_filter(f"tag:{TAG_CLUSTER}", cluster_id),
        new_ec2_filter("tag-key", TAG_ROLE_MASTER),
        new_ec2_filter("attachment.instance-id", instance_id),
    ]


class VolumeCatalog:
    """Single choke point for listing volumes and polling their attach status."""

    def __init__(self, inventory: Inventory, instance_id: str):
        self.inventory = inventory
        self.instance_id = instance_id

    def list(self, filters: List[Dict[str, Any]]) -> List[Volume]:
        return self._decode_all(self.inventory.describe_volumes(filters=filters))

    def poll_by_id(self, volume_id: str) -> List[Volume]:
        return self._decode_all(self.inventory.describe_volumes(volume_ids=[volume_id]))

    def _decode_all(self, raw_volumes: List[Dict[str, Any]]) -> List[Volume]:
        volumes = []
        for raw in raw_volumes:
            volume = self._decode(raw)
            if volume is not None:
                volumes.append(volume)
        return volumes

    def _decode(self, raw: Dict[str, Any]) -> Optional[Volume]:
        volume_id = raw.get("VolumeId") or ""
        result = decode_volume_tags(volume_id, raw.get("Tags"))
        for key, value in result.unknown:
            logger.debug("unknown tag on volume %s: %s=%s", volume_id, key, value)
        if result.excluded:
            for reason in result.reasons:
                logger.warning("%s on volume %s; skipping volume", reason, volume_id)
            return None

        volume = Volume(id=volume_id, status=raw.get("State") or "", info=result.info)
        for attachment in raw.get("Attachments") or []:
            attached_to = attachment.get("InstanceId") or ""
            if not attached_to:
                continue
            volume.attached_to = attached_to
            if attached_to == self.instance_id:
                volume.local_device = attachment.get("Device") or ""
            break
        return volume
