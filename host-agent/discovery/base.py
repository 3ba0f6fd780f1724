from __future__ import annotations

from typing import Optional


class IdentityError(Exception):
    """The instance identity could not be resolved from metadata."""

    def __init__(self, field: str, cause: Optional[BaseException] = None):
        self.field = field
        message = f"error querying instance metadata (for {field})"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class DiscoveryError(Exception):
    """Cluster membership of this instance could not be determined."""

    def __init__(self, instance_id: str, message: str):
        self.instance_id = instance_id
        super().__init__(message)
