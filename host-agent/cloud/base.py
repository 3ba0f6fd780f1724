from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


class CloudError(Exception):
    """A cloud API or metadata call failed."""

    pass


@runtime_checkable
class MetadataSource(Protocol):
    """Instance metadata as seen from the local host.
    Semantics:
      - region(): region the instance runs in.
      - get_metadata(path): raw value of a metadata path (e.g. "instance-id").
    Notes:
      - Raise CloudError when the value cannot be fetched.
    """

    def region(self) -> str:
        ...

    def get_metadata(self, path: str) -> str:
        ...


@runtime_checkable
class Inventory(Protocol):
    """Describe/attach contract of the cloud inventory API.
    Semantics:
      - describe_instances(): every instance matching the id, across all pages.
      - describe_volumes(): every volume matching the filters/ids, across all pages.
      - attach_volume(): submit an attach request; acceptance only, not completion.
    Notes:
      - Results are plain dicts shaped like the EC2 API responses.
      - A failure on any page raises CloudError; partial results are never returned.
    """

    def describe_instances(self, instance_id: str) -> List[Dict[str, Any]]:
        ...

    def describe_volumes(
        self,
        filters: Optional[List[Dict[str, Any]]] = None,
        volume_ids: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        ...

    def attach_volume(self, device: str, instance_id: str, volume_id: str) -> Dict[str, Any]:
        ...
