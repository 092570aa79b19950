"""Swap of the ip and meta fields of volume-backed devices.

swift-ring-builder validates device addresses in a way that does not accept
the names used for persistent-volume devices. Before a rebalance the address
and the metadata of such devices trade places, and trade back afterwards.
The swap is its own inverse.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_SWAP_DEVICE = "pv"


def swap_device_fields(devs: Iterable[Optional[dict]], swap_device: str = DEFAULT_SWAP_DEVICE) -> int:
    """Swap ip and meta in place. Returns the number of devices touched."""
    swapped = 0
    for dev in devs:
        # removed devices leave None holes in the builder's device list
        if not dev:
            continue
        if dev.get('device') != swap_device or not dev.get('meta'):
            continue
        dev['ip'], dev['meta'] = dev['meta'], dev['ip']
        swapped += 1
    return swapped


def swap_builder_file(builder_file: Union[str, Path], swap_device: str = DEFAULT_SWAP_DEVICE) -> int:
    """Load a builder file, swap its device fields and save it back."""
    from swift.common.ring import RingBuilder

    builder = RingBuilder.load(str(builder_file))
    swapped = swap_device_fields(builder.devs, swap_device)
    if swapped:
        builder.save(str(builder_file))
    logger.info(f"Swapped ip and meta of {swapped} devices in {builder_file}")
    return swapped
