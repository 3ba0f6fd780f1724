#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Attach orchestration for the Volume Agent.

An attach runs NotAttached -> DeviceAssigned -> AttachRequested -> Polling and
ends in Attached or one of the Failed* states. Polling has no deadline: it
stops only on a terminal condition. Callers wanting a deadline must run the
attach in a unit of work they can abandon.
"""
import logging
import time
from typing import Callable, Optional

from cloud import CloudError, Inventory
from models import AttachOperation, AttachState, Volume
from volumes import DeviceAllocator, NoDevicesAvailable, VolumeCatalog

logger = logging.getLogger("volume-agent")

DEFAULT_POLL_INTERVAL = 10.0
ATTACHING_STATUS = "attaching"


class AttachError(Exception):
    """An attach terminated in a failure state."""

    def __init__(self, operation: AttachOperation, message: str):
        self.operation = operation
        self.volume_id = operation.volume_id
        super().__init__(message)

    @property
    def state(self) -> AttachState:
        return self.operation.state


class AttachDeviceError(AttachError):
    pass


class AttachTransportError(AttachError):
    pass


class VolumeVanished(AttachError):
    pass


class AmbiguousVolume(AttachError):
    pass


class AttachedElsewhere(AttachError):
    def __init__(self, operation: AttachOperation, attached_to: str):
        self.attached_to = attached_to
        super().__init__(
            operation, f"unable to attach volume {operation.volume_id!r}, was attached to {attached_to!r}"
        )


class UnexpectedVolumeState(AttachError):
    def __init__(self, operation: AttachOperation, status: str):
        self.status = status
        super().__init__(operation, f"observed unexpected state {status!r} for volume {operation.volume_id!r}")


class AttachOrchestrator:
    """Drive a single volume attach to a terminal state."""

    def __init__(
        self,
        instance_id: str,
        inventory: Inventory,
        catalog: VolumeCatalog,
        allocator: DeviceAllocator,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.instance_id = instance_id
        self.inventory = inventory
        self.catalog = catalog
        self.allocator = allocator
        self.sleep = sleep
        self.poll_interval = poll_interval

    def attach(self, volume: Volume, poll_interval: Optional[float] = None) -> AttachOperation:
        """Attach ``volume`` to this instance; on success ``volume.local_device`` is set.

        Raises ``ValueError`` for a non-positive ``poll_interval`` before any
        device is reserved.
        """
        interval = self.poll_interval if poll_interval is None else poll_interval
        if interval <= 0:
            raise ValueError(f"poll interval must be positive, got {interval!r}")
        op = AttachOperation(volume_id=volume.id)
        if volume.local_device:
            op.device = volume.local_device
            op.enter(AttachState.ATTACHED)
            logger.info("Volume %s already attached at %s", volume.id, op.device)
            return op

        try:
            op.device = self.allocator.assign(volume.id)
        except NoDevicesAvailable as e:
            op.enter(AttachState.FAILED_NO_DEVICE)
            raise AttachDeviceError(op, str(e)) from e
        op.enter(AttachState.DEVICE_ASSIGNED)

        try:
            response = self.inventory.attach_volume(op.device, self.instance_id, volume.id)
        except CloudError as e:
            # device stays reserved until restart
            op.enter(AttachState.FAILED_TRANSPORT)
            raise AttachTransportError(op, f"error attaching EBS volume {volume.id!r}: {e}") from e
        op.enter(AttachState.ATTACH_REQUESTED)
        logger.debug("AttachVolume request for %s returned %s", volume.id, response)

        op.enter(AttachState.POLLING)
        self._wait(op, volume, interval)
        return op

    def _wait(self, op: AttachOperation, volume: Volume, interval: float) -> None:
        while True:
            try:
                found = self.catalog.poll_by_id(volume.id)
            except CloudError as e:
                op.enter(AttachState.FAILED_TRANSPORT)
                raise AttachTransportError(op, f"error describing EBS volume {volume.id!r}: {e}") from e

            if not found:
                op.enter(AttachState.FAILED_VANISHED)
                raise VolumeVanished(op, f"EBS volume {volume.id!r} disappeared during attach")
            if len(found) != 1:
                op.enter(AttachState.FAILED_AMBIGUOUS)
                raise AmbiguousVolume(op, f"multiple volumes found with id {volume.id!r}")

            current = found[0]
            if current.attached_to:
                if current.attached_to == self.instance_id:
                    volume.local_device = op.device
                    op.enter(AttachState.ATTACHED)
                    logger.info("Volume %s attached at %s", volume.id, op.device)
                    return
                self.allocator.release(op.device, volume.id)
                op.enter(AttachState.FAILED_ELSEWHERE)
                raise AttachedElsewhere(op, current.attached_to)

            if current.status != ATTACHING_STATUS:
                op.enter(AttachState.FAILED_UNEXPECTED_STATE)
                raise UnexpectedVolumeState(op, current.status)

            logger.debug("Waiting for volume %s to be attached (currently %s)", volume.id, current.status)
            self.sleep(interval)
