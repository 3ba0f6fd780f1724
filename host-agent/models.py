#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Data models for the Volume Agent.
This module contains the data classes used throughout the application.
"""
import dataclasses
import enum
import ipaddress
from typing import List, Optional, Union

from pydantic import BaseModel, Field

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclasses.dataclass(frozen=True)
class InstanceIdentity:
    """Identity of the instance this agent runs on."""

    region: str
    zone: str
    instance_id: str
    internal_ip: Optional[IPAddress] = None


@dataclasses.dataclass
class EtcdClusterSpec:
    """Membership of one etcd cluster as recorded in a volume tag."""

    cluster_key: str
    node_name: str
    node_names: List[str]


@dataclasses.dataclass
class VolumeInfo:
    """Decoded tag information for a volume."""

    description: str
    master_id: Optional[int] = None
    etcd_clusters: List[EtcdClusterSpec] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Volume:
    """A block volume as last reported by the cloud.

    ``status`` is passed through verbatim from the cloud. ``attached_to`` and
    ``local_device`` are empty strings when unset.
    """

    id: str
    status: str
    info: VolumeInfo
    attached_to: str = ""
    local_device: str = ""


class AttachState(str, enum.Enum):
    """States of a single attach operation."""

    NOT_ATTACHED = "NotAttached"
    DEVICE_ASSIGNED = "DeviceAssigned"
    ATTACH_REQUESTED = "AttachRequested"
    POLLING = "Polling"
    ATTACHED = "Attached"
    FAILED_NO_DEVICE = "FailedNoDevice"
    FAILED_TRANSPORT = "FailedTransport"
    FAILED_VANISHED = "FailedVanished"
    FAILED_AMBIGUOUS = "FailedAmbiguous"
    FAILED_ELSEWHERE = "FailedElsewhere"
    FAILED_UNEXPECTED_STATE = "FailedUnexpectedState"

    @property
    def terminal(self) -> bool:
        return self is AttachState.ATTACHED or self.value.startswith("Failed")


@dataclasses.dataclass
class AttachOperation:
    """State machine value for one attach; ``history`` lists every state entered."""

    volume_id: str
    state: AttachState = AttachState.NOT_ATTACHED
    device: str = ""
    history: List[AttachState] = dataclasses.field(default_factory=lambda: [AttachState.NOT_ATTACHED])

    def enter(self, state: AttachState) -> None:
        self.state = state
        self.history.append(state)


class AttachRequest(BaseModel):
    """FastAPI model for the attach endpoint."""

    poll_interval: Optional[float] = Field(None, gt=0)
