import logging

from cloud import CloudError, MetadataSource
from models import InstanceIdentity

from .base import IdentityError

logger = logging.getLogger("volume-agent")


class IdentityResolver:
    """Resolve region, zone and instance id of the local instance.

    Metadata is expected to be available immediately on the host, so a failure
    is reported at once and never retried.
    """

    def __init__(self, metadata: MetadataSource):
        self.metadata = metadata

    def _fetch(self, field: str, fn, *args) -> str:
        try:
            value = fn(*args)
        except CloudError as e:
            raise IdentityError(field, e) from e
        if not value:
            raise IdentityError(field, ValueError("empty value"))
        return value

    def resolve(self) -> InstanceIdentity:
        region = self._fetch("region", self.metadata.region)
        zone = self._fetch("zone", self.metadata.get_metadata, "placement/availability-zone")
        instance_id = self._fetch("instance-id", self.metadata.get_metadata, "instance-id")
        logger.info("Resolved instance %s in %s (%s)", instance_id, zone, region)
        return InstanceIdentity(region=region, zone=zone, instance_id=instance_id)
