"""Adds desired devices that are missing from the rings."""

import logging
from typing import List, Sequence

from ringsync.models import RINGS, DesiredDevice, PlannedAddition, Ring

logger = logging.getLogger(__name__)


class DeviceReconciler:
    """Brings each ring up to the desired device list.

    Devices are only ever added. A device already present at the same
    (host, device) is left untouched even when its declared weight, zone or
    node label differ; weight changes go through drain/remove instead.
    """

    def __init__(self, builder, rings: Sequence[Ring] = RINGS):
        self.builder = builder
        self.rings = tuple(rings)

    def plan(self, devices: Sequence[DesiredDevice]) -> List[PlannedAddition]:
        """Return the additions reconcile() would make, without changing anything."""
        additions = []
        for ring in self.rings:
            for device in devices:
                if not self.builder.search(ring, ip=device.host, device=device.device):
                    additions.append(PlannedAddition(ring=ring, device=device))
        return additions

    def reconcile(self, devices: Sequence[DesiredDevice]) -> List[PlannedAddition]:
        """Add every desired device that is absent from a ring.

        Returns:
            List[PlannedAddition]: the additions that were made
        """
        added = []
        for ring in self.rings:
            for device in devices:
                if self.builder.search(ring, ip=device.host, device=device.device):
                    logger.debug(f"{device.host}/{device.device} already in {ring.value} ring")
                    continue
                self.builder.add(
                    ring,
                    region=device.region,
                    zone=device.zone,
                    ip=device.host,
                    port=ring.port,
                    device=device.device,
                    weight=device.weight,
                    meta=device.node
                )
                logger.info(f"Added {device.host}:{ring.port}/{device.device} "
                            f"(r{device.region}z{device.zone}, weight {device.weight}) "
                            f"to {ring.value} ring")
                added.append(PlannedAddition(ring=ring, device=device))
        if not added:
            logger.info("All desired devices already present")
        return added
