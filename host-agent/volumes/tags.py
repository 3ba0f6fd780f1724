"""
Tag keys recognized on instances and volumes, and decoding of a volume's tags.

Decoding is pure: it never logs. The caller decides what to do with excluded
volumes and unknown tags.
"""

import dataclasses
import enum
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from models import VolumeInfo

from .etcd import parse_etcd_cluster_spec

# Differentiates logically independent clusters running in the same region
TAG_CLUSTER = "KubernetesCluster"
# Present (any value) on volumes in the master role
TAG_ROLE_MASTER = "k8s.io/role/master"
TAG_NAME = "Name"
TAG_MASTER_ID = "k8s.io/master/id"
TAG_ETCD_CLUSTER_PREFIX = "k8s.io/etcd/"

IGNORED_TAGS = frozenset({TAG_CLUSTER, TAG_ROLE_MASTER, TAG_NAME})

_INT_RE = re.compile(r"[+-]?[0-9]+")


class TagOutcome(str, enum.Enum):
    ACCEPTED = "accepted"
    EXCLUDED = "excluded"


@dataclasses.dataclass
class TagDecodeResult:
    """Decoded info plus the verdict on the volume."""

    info: VolumeInfo
    outcome: TagOutcome = TagOutcome.ACCEPTED
    reasons: List[str] = dataclasses.field(default_factory=list)
    unknown: List[Tuple[str, str]] = dataclasses.field(default_factory=list)

    @property
    def excluded(self) -> bool:
        return self.outcome is TagOutcome.EXCLUDED

    def exclude(self, reason: str) -> None:
        self.outcome = TagOutcome.EXCLUDED
        self.reasons.append(reason)


def tag_map(tags: Optional[Iterable[Dict[str, Any]]]) -> Dict[str, str]:
    """Flatten EC2 ``[{"Key": k, "Value": v}]`` tags into a dict."""
    return {t.get("Key") or "": t.get("Value") or "" for t in (tags or [])}


def parse_master_id(value: str) -> int:
    if not _INT_RE.fullmatch(value):
        raise ValueError(f"invalid integer: {value!r}")
    return int(value)


def decode_volume_tags(volume_id: str, tags: Optional[Iterable[Dict[str, Any]]]) -> TagDecodeResult:
    """Decode the tags of one volume.

    A malformed master-id or etcd cluster tag marks the volume excluded, but
    decoding carries on so the result is fully assembled.
    """
    result = TagDecodeResult(info=VolumeInfo(description=volume_id))
    for tag in tags or []:
        key = tag.get("Key") or ""
        value = tag.get("Value") or ""
        if key in IGNORED_TAGS:
            continue
        if key == TAG_MASTER_ID:
            try:
                result.info.master_id = parse_master_id(value)
            except ValueError:
                result.exclude(f"error parsing master-id tag {key}={value}")
        elif key.startswith(TAG_ETCD_CLUSTER_PREFIX):
            cluster_key = key[len(TAG_ETCD_CLUSTER_PREFIX):]
            try:
                result.info.etcd_clusters.append(parse_etcd_cluster_spec(cluster_key, value))
            except ValueError as e:
                result.exclude(f"error parsing etcd cluster tag {key}={value}: {e}")
        else:
            result.unknown.append((key, value))
    return result
