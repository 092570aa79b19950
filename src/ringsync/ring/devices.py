"""Parsing of the desired device list."""

import logging
from pathlib import Path
from typing import Iterable, List, Union

from ringsync.errors import DeviceListError
from ringsync.models import DesiredDevice

logger = logging.getLogger(__name__)

FIELDS = ('region', 'zone', 'host', 'device', 'weight', 'node')


def parse_devices(lines: Iterable[str], source: str = "<devices>") -> List[DesiredDevice]:
    """Parse `region zone host device weight node` records.

    Blank lines and lines starting with '#' are skipped.
    """
    devices = []
    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        parts = line.split()
        if len(parts) != len(FIELDS):
            raise DeviceListError(source, line_no,
                                  f"expected {len(FIELDS)} fields ({' '.join(FIELDS)}), got {len(parts)}")
        region, zone, host, device, weight, node = parts
        try:
            devices.append(DesiredDevice(
                region=int(region),
                zone=int(zone),
                host=host,
                device=device,
                weight=float(weight),
                node=node
            ))
        except ValueError as e:
            raise DeviceListError(source, line_no, str(e))
    return devices


def load_devices(path: Union[str, Path]) -> List[DesiredDevice]:
    """Read the desired device list from a file."""
    try:
        with open(path) as f:
            devices = parse_devices(f, source=str(path))
    except OSError as e:
        raise DeviceListError(str(path), 0, f"cannot read device list: {e}")
    logger.info(f"Loaded {len(devices)} desired devices from {path}")
    return devices
