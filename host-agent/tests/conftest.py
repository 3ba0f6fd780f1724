from typing import Any, Dict, List, Optional

import pytest

from cloud import CloudError


def tag(key: str, value: str = "") -> Dict[str, str]:
    return {"Key": key, "Value": value}


def raw_volume(
    volume_id: str,
    state: str = "available",
    tags: Optional[List[Dict[str, str]]] = None,
    attachments: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    return {
        "VolumeId": volume_id,
        "State": state,
        "Tags": tags if tags is not None else [tag("KubernetesCluster", "k1"), tag("k8s.io/role/master", "1")],
        "Attachments": attachments or [],
    }


class FakeMetadata:
    """Metadata source returning fixed values; paths in ``failing`` raise."""

    def __init__(self, values: Optional[Dict[str, str]] = None, failing=()):
        self.values = {
            "placement/region": "us-east-1",
            "placement/availability-zone": "us-east-1a",
            "instance-id": "i-self",
        }
        self.values.update(values or {})
        self.failing = set(failing)
        self.calls: List[str] = []

    def get_metadata(self, path: str) -> str:
        self.calls.append(path)
        if path in self.failing:
            raise CloudError(f"connection refused for {path}")
        return self.values.get(path, "")

    def region(self) -> str:
        return self.get_metadata("placement/region")


class FakeInventory:
    """In-memory inventory.

    ``listed`` is returned for filter queries; ``polls`` is consumed, one entry
    per ``describe_volumes(volume_ids=...)`` call. An entry that is an
    exception instance is raised instead of returned.
    """

    def __init__(self, instances=None, listed=None, polls=None, attach_error: Optional[Exception] = None):
        self.instances = instances if instances is not None else [
            {
                "InstanceId": "i-self",
                "PrivateIpAddress": "10.0.0.5",
                "Tags": [tag("KubernetesCluster", "k1"), tag("Name", "master-1")],
            }
        ]
        self.listed = listed or []
        self.polls = list(polls or [])
        self.attach_error = attach_error
        self.attach_calls: List[tuple] = []
        self.filter_calls: List[Any] = []
        self.poll_calls = 0

    def describe_instances(self, instance_id: str):
        if isinstance(self.instances, Exception):
            raise self.instances
        return list(self.instances)

    def describe_volumes(self, filters=None, volume_ids=None):
        if volume_ids:
            self.poll_calls += 1
            entry = self.polls.pop(0)
            if isinstance(entry, Exception):
                raise entry
            return entry
        self.filter_calls.append(filters)
        if isinstance(self.listed, Exception):
            raise self.listed
        return list(self.listed)

    def attach_volume(self, device: str, instance_id: str, volume_id: str):
        self.attach_calls.append((device, instance_id, volume_id))
        if self.attach_error is not None:
            raise self.attach_error
        return {"Device": device, "InstanceId": instance_id, "VolumeId": volume_id, "State": "attaching"}


class FatalCalled(Exception):
    pass


def raise_fatal(message: str) -> None:
    raise FatalCalled(message)


class SleepRecorder:
    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleeper():
    return SleepRecorder()
