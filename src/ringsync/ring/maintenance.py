"""Operator actions for taking devices and hosts out of service."""

import logging
from typing import Sequence

from ringsync.models import RINGS, Ring

logger = logging.getLogger(__name__)


def drain(builder, host: str, rings: Sequence[Ring] = RINGS) -> int:
    """Set the weight of every device on a host to zero in every ring.

    The devices stay in the rings, so data can still be moved off them.
    Nothing is rebalanced or pushed.

    Returns:
        int: number of rings in which the host was found
    """
    drained = 0
    for ring in rings:
        if not builder.search(ring, ip=host):
            logger.info(f"No devices for {host} in {ring.value} ring")
            continue
        builder.set_weight(ring, ip=host, weight=0)
        logger.info(f"Set weight of {host} devices to 0 in {ring.value} ring")
        drained += 1
    return drained


def remove(builder, dev_id: int, rings: Sequence[Ring] = RINGS) -> int:
    """Delete a device by id from every ring. Nothing is rebalanced or pushed.

    Returns:
        int: number of rings the device was removed from
    """
    removed = 0
    for ring in rings:
        if not builder.search(ring, dev_id=dev_id):
            logger.info(f"Device id {dev_id} not in {ring.value} ring")
            continue
        builder.remove(ring, dev_id=dev_id)
        logger.info(f"Removed device id {dev_id} from {ring.value} ring")
        removed += 1
    return removed
