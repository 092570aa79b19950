"""Rebalancing of all rings around the metadata swap."""

import logging
from typing import Sequence

from ringsync.models import RINGS, Ring
from ringsync.ring.metaswap import DEFAULT_SWAP_DEVICE

logger = logging.getLogger(__name__)


class RebalanceOrchestrator:
    """Runs swap, rebalance, swap back and write_ring for each ring in turn.

    The first failure aborts the remaining rings. A failure between the two
    swaps leaves that builder file in the swapped orientation, so it needs
    manual inspection before another attempt.
    """

    def __init__(self, builder, rings: Sequence[Ring] = RINGS,
                 swap_device: str = DEFAULT_SWAP_DEVICE):
        self.builder = builder
        self.rings = tuple(rings)
        self.swap_device = swap_device

    def _rebalance_ring(self, ring: Ring) -> bool:
        self.builder.swap_metadata(ring, self.swap_device)
        try:
            changed = self.builder.rebalance(ring)
        except Exception:
            logger.error(f"Rebalance of {ring.value} ring failed, "
                         f"{ring.builder_file} may be left with ip and meta swapped")
            raise
        self.builder.swap_metadata(ring, self.swap_device)
        self.builder.write_ring(ring)
        logger.info(f"Wrote {ring.ring_file}")
        return changed

    def rebalance(self) -> dict:
        """Rebalance every ring. Returns ring name -> whether partitions were reassigned cleanly."""
        results = {}
        for ring in self.rings:
            results[ring.value] = self._rebalance_ring(ring)
        return results

    def forced_rebalance(self) -> dict:
        """Rebalance regardless of min_part_hours."""
        for ring in self.rings:
            self.builder.pretend_min_part_hours_passed(ring)
            logger.info(f"Reset min_part_hours timer of {ring.value} ring")
        return self.rebalance()
