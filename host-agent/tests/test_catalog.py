import logging

import pytest
from botocore.exceptions import ClientError

from cloud import CloudError, Ec2Inventory
from conftest import FakeInventory, raw_volume, tag
from volumes import VolumeCatalog, mountable_filters, mounted_filters

BASE_TAGS = [tag("KubernetesCluster", "k1"), tag("k8s.io/role/master", "1")]


def test_invalid_master_id_excludes_only_that_volume(caplog):
    inventory = FakeInventory(
        listed=[
            raw_volume("vol-good", tags=BASE_TAGS + [tag("k8s.io/master/id", "1")]),
            raw_volume("vol-bad", tags=BASE_TAGS + [tag("k8s.io/master/id", "one")]),
            raw_volume("vol-other", tags=BASE_TAGS + [tag("k8s.io/master/id", "3")]),
        ]
    )
    catalog = VolumeCatalog(inventory, "i-self")
    with caplog.at_level(logging.WARNING, logger="volume-agent"):
        volumes = catalog.list(mountable_filters("k1", "us-east-1a"))

    assert [v.id for v in volumes] == ["vol-good", "vol-other"]
    assert [v.info.master_id for v in volumes] == [1, 3]
    assert "vol-bad" in caplog.text


def test_invalid_etcd_tag_excludes_only_that_volume():
    inventory = FakeInventory(
        listed=[
            raw_volume("vol-bad", tags=BASE_TAGS + [tag("k8s.io/etcd/main", "nope")]),
            raw_volume(
                "vol-good",
                tags=BASE_TAGS + [tag("k8s.io/etcd/main", "a/a,b,c"), tag("k8s.io/master/id", "2")],
            ),
        ]
    )
    volumes = VolumeCatalog(inventory, "i-self").list(mountable_filters("k1", "us-east-1a"))

    assert len(volumes) == 1
    good = volumes[0]
    assert good.id == "vol-good"
    assert good.info.master_id == 2
    assert good.info.etcd_clusters[0].node_names == ["a", "b", "c"]


def test_status_passed_through_and_defaults():
    inventory = FakeInventory(listed=[raw_volume("vol-1", state="creating")])
    volume = VolumeCatalog(inventory, "i-self").list([])[0]
    assert volume.status == "creating"
    assert volume.attached_to == ""
    assert volume.local_device == ""
    assert volume.info.description == "vol-1"


def test_attached_here_sets_local_device():
    inventory = FakeInventory(
        listed=[
            raw_volume(
                "vol-1",
                state="in-use",
                attachments=[{"InstanceId": "", "Device": "/dev/xvdz"}, {"InstanceId": "i-self", "Device": "/dev/xvdu"}],
            )
        ]
    )
    volume = VolumeCatalog(inventory, "i-self").list([])[0]
    assert volume.attached_to == "i-self"
    assert volume.local_device == "/dev/xvdu"


def test_attached_elsewhere_never_sets_local_device():
    inventory = FakeInventory(
        listed=[
            raw_volume(
                "vol-1",
                state="in-use",
                attachments=[{"InstanceId": "i-other", "Device": "/dev/xvdu"}, {"InstanceId": "i-self", "Device": "/dev/xvdv"}],
            )
        ]
    )
    volume = VolumeCatalog(inventory, "i-self").list([])[0]
    assert volume.attached_to == "i-other"
    assert volume.local_device == ""


def test_listing_failure_propagates():
    inventory = FakeInventory(listed=CloudError("throttled"))
    with pytest.raises(CloudError):
        VolumeCatalog(inventory, "i-self").list([])


def test_poll_by_id_uses_volume_id_query():
    inventory = FakeInventory(polls=[[raw_volume("vol-1", state="attaching")]])
    volumes = VolumeCatalog(inventory, "i-self").poll_by_id("vol-1")
    assert [v.status for v in volumes] == ["attaching"]
    assert inventory.poll_calls == 1


def test_filter_presets():
    assert mountable_filters("k1", "us-east-1a") == [
        {"Name": "tag:KubernetesCluster", "Values": ["k1"]},
        {"Name": "tag-key", "Values": ["k8s.io/role/master"]},
        {"Name": "availability-zone", "Values": ["us-east-1a"]},
    ]
    assert mounted_filters("k1", "i-self")[-1] == {"Name": "attachment.instance-id", "Values": ["i-self"]}


class FakePaginator:
    def __init__(self, pages, fail_at=None):
        self.pages = pages
        self.fail_at = fail_at
        self.kwargs = None

    def paginate(self, **kwargs):
        self.kwargs = kwargs
        for i, page in enumerate(self.pages):
            if i == self.fail_at:
                raise ClientError({"Error": {"Code": "RequestLimitExceeded", "Message": "slow down"}}, "DescribeVolumes")
            yield page


class FakeEc2Client:
    def __init__(self, paginators):
        self.paginators = paginators

    def get_paginator(self, operation):
        return self.paginators[operation]

    def attach_volume(self, **kwargs):
        raise ClientError({"Error": {"Code": "IncorrectState", "Message": "busy"}}, "AttachVolume")


def test_ec2_inventory_accumulates_pages():
    paginator = FakePaginator([{"Volumes": [raw_volume("vol-1")]}, {"Volumes": [raw_volume("vol-2")]}, {}])
    inventory = Ec2Inventory(FakeEc2Client({"describe_volumes": paginator}))

    volumes = inventory.describe_volumes(filters=mountable_filters("k1", "z"))

    assert [v["VolumeId"] for v in volumes] == ["vol-1", "vol-2"]
    assert "VolumeIds" not in paginator.kwargs
    assert paginator.kwargs["Filters"][0]["Name"] == "tag:KubernetesCluster"


def test_ec2_inventory_page_failure_discards_partial_results():
    paginator = FakePaginator([{"Volumes": [raw_volume("vol-1")]}, {"Volumes": [raw_volume("vol-2")]}], fail_at=1)
    inventory = Ec2Inventory(FakeEc2Client({"describe_volumes": paginator}))
    with pytest.raises(CloudError, match="describe_volumes"):
        inventory.describe_volumes(volume_ids=["vol-1"])


def test_ec2_inventory_flattens_reservations():
    paginator = FakePaginator(
        [{"Reservations": [{"Instances": [{"InstanceId": "i-1"}]}, {"Instances": [{"InstanceId": "i-2"}]}]}]
    )
    inventory = Ec2Inventory(FakeEc2Client({"describe_instances": paginator}))
    assert [i["InstanceId"] for i in inventory.describe_instances("i-1")] == ["i-1", "i-2"]
    assert paginator.kwargs == {"InstanceIds": ["i-1"]}


def test_ec2_inventory_attach_error_wrapped():
    inventory = Ec2Inventory(FakeEc2Client({}))
    with pytest.raises(CloudError, match="vol-1"):
        inventory.attach_volume("/dev/xvdu", "i-self", "vol-1")
