import logging
from typing import Any, Dict, List, Optional

import boto3
import requests
from botocore.exceptions import BotoCoreError, ClientError

from .base import CloudError

logger = logging.getLogger("volume-agent")

DEFAULT_METADATA_URL = "http://169.254.169.254"
TOKEN_TTL_SECONDS = 21600


class InstanceMetadata:
    """EC2 instance metadata service client (IMDSv2, falling back to IMDSv1)."""

    def __init__(self, base_url: str = DEFAULT_METADATA_URL, timeout: float = 2.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _token(self) -> Optional[str]:
        try:
            resp = self.session.put(
                f"{self.base_url}/latest/api/token",
                headers={"X-aws-ec2-metadata-token-ttl-seconds": str(TOKEN_TTL_SECONDS)},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.text.strip() or None
        except requests.RequestException as e:
            logger.debug("IMDSv2 token unavailable, using IMDSv1: %s", e)
            return None

    def get_metadata(self, path: str) -> str:
        token = self._token()
        headers = {"X-aws-ec2-metadata-token": token} if token else {}
        url = f"{self.base_url}/latest/meta-data/{path.lstrip('/')}"
        try:
            resp = self.session.get(url, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise CloudError(f"error querying ec2 metadata service for {path}: {e}") from e
        return resp.text.strip()

    def region(self) -> str:
        return self.get_metadata("placement/region")


def _log_request(event_name: str = "", **kwargs) -> None:
    # event_name looks like "before-send.ec2.DescribeVolumes"
    parts = event_name.split(".")
    if len(parts) >= 3:
        logger.debug("AWS API request: %s/%s", parts[1], parts[2])


class Ec2Inventory:
    """Inventory backed by a boto3 EC2 client."""

    def __init__(self, client):
        self.client = client

    @classmethod
    def connect(cls, region: str, endpoint_url: Optional[str] = None) -> "Ec2Inventory":
        session = boto3.session.Session(region_name=region)
        client = session.client("ec2", endpoint_url=endpoint_url)
        client.meta.events.register("before-send.ec2", _log_request)
        return cls(client)

    def _pages(self, operation: str, **kwargs) -> List[Dict[str, Any]]:
        try:
            paginator = self.client.get_paginator(operation)
            return list(paginator.paginate(**kwargs))
        except (BotoCoreError, ClientError) as e:
            raise CloudError(f"error calling EC2 {operation}: {e}") from e

    def describe_instances(self, instance_id: str) -> List[Dict[str, Any]]:
        instances: List[Dict[str, Any]] = []
        for page in self._pages("describe_instances", InstanceIds=[instance_id]):
            for reservation in page.get("Reservations", []):
                instances.extend(reservation.get("Instances", []))
        return instances

    def describe_volumes(
        self,
        filters: Optional[List[Dict[str, Any]]] = None,
        volume_ids: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        kwargs: Dict[str, Any] = {}
        if filters:
            kwargs["Filters"] = filters
        if volume_ids:
            kwargs["VolumeIds"] = volume_ids
        volumes: List[Dict[str, Any]] = []
        for page in self._pages("describe_volumes", **kwargs):
            volumes.extend(page.get("Volumes", []))
        return volumes

    def attach_volume(self, device: str, instance_id: str, volume_id: str) -> Dict[str, Any]:
        try:
            return self.client.attach_volume(Device=device, InstanceId=instance_id, VolumeId=volume_id)
        except (BotoCoreError, ClientError) as e:
            raise CloudError(f"error attaching EBS volume {volume_id}: {e}") from e
