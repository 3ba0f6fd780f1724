import json

import pytest
import typer

from cli import CLICommands
from conftest import FakeInventory, FakeMetadata, raise_fatal, raw_volume
from orchestration import VolumeManager
from volumes import DeviceAllocator


def commands(inventory, sleeper, metadata=None):
    return CLICommands(
        lambda: VolumeManager.create(
            metadata or FakeMetadata(),
            lambda region: inventory,
            sleep=sleeper,
            allocator=DeviceAllocator(["/dev/xvdu"], fatal=raise_fatal),
        )
    )


def run(fn, capsys, *args):
    with pytest.raises(typer.Exit) as excinfo:
        fn(*args)
    return excinfo.value.exit_code, json.loads(capsys.readouterr().out)


def test_identity(capsys, sleeper):
    code, out = run(commands(FakeInventory(), sleeper).identity, capsys)
    assert code == 0
    assert out["cluster_id"] == "k1"


def test_initialization_failure(capsys, sleeper):
    cmds = commands(FakeInventory(), sleeper, metadata=FakeMetadata(failing=["instance-id"]))
    code, out = run(cmds.identity, capsys)
    assert code == 1
    assert "instance-id" in out["error"]


def test_volumes(capsys, sleeper):
    code, out = run(commands(FakeInventory(listed=[raw_volume("vol-1")]), sleeper).volumes, capsys)
    assert code == 0
    assert out["volumes"][0]["id"] == "vol-1"


def test_attach(capsys, sleeper):
    inventory = FakeInventory(
        listed=[raw_volume("vol-1")],
        polls=[[raw_volume("vol-1", state="attaching")], [raw_volume("vol-1", state="error")]],
    )
    code, out = run(commands(inventory, sleeper).attach, capsys, "vol-1")
    assert code == 1
    assert "FailedUnexpectedState" in out["error"]
