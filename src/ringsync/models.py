"""Data models shared across the ring synchronization modules."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class Ring(str, Enum):
    ACCOUNT = "account"
    CONTAINER = "container"
    OBJECT = "object"

    @property
    def port(self) -> int:
        return RING_PORTS[self]

    @property
    def builder_file(self) -> str:
        return f"{self.value}.builder"

    @property
    def ring_file(self) -> str:
        return f"{self.value}.ring.gz"


RING_PORTS = {
    Ring.OBJECT: 6200,
    Ring.CONTAINER: 6201,
    Ring.ACCOUNT: 6202,
}

# Order in which rings are processed
RINGS = (Ring.ACCOUNT, Ring.CONTAINER, Ring.OBJECT)

BUNDLE_KEY = "swiftrings.tar.gz"


@dataclass(frozen=True)
class DesiredDevice:
    """One line of the desired device list."""
    region: int
    zone: int
    host: str
    device: str
    weight: float
    node: str


@dataclass
class StoreRecord:
    """Result of reading the ring record from the store."""
    found: bool
    version: Optional[str] = None
    payload: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PlannedAddition:
    ring: Ring
    device: DesiredDevice

    @property
    def port(self) -> int:
        return self.ring.port
