"""Thin wrapper around the swift-ring-builder command line tool."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from ringsync.errors import RebalanceError, RingBuilderError, RingWriteError
from ringsync.models import Ring
from ringsync.ring.metaswap import swap_builder_file

logger = logging.getLogger(__name__)

# swift-ring-builder exit codes
EXIT_SUCCESS = 0
EXIT_WARNING = 1
EXIT_ERROR = 2


class RingBuilderCli:
    """Runs swift-ring-builder against the builder files in a working directory."""

    def __init__(self, workdir: Union[str, Path], binary: str = "swift-ring-builder"):
        self.workdir = Path(workdir)
        self.binary = binary

    def builder_path(self, ring: Ring) -> Path:
        return self.workdir / ring.builder_file

    def _run(self, ring: Ring, *args: str) -> subprocess.CompletedProcess:
        cmd = [self.binary, ring.builder_file] + [str(a) for a in args]
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=str(self.workdir),
                capture_output=True,
                text=True,
                check=False
            )
        except OSError as e:
            raise RingBuilderError(f"Cannot run {self.binary}: {e}")
        if result.stdout:
            logger.debug(result.stdout.rstrip())
        if result.stderr:
            logger.debug(result.stderr.rstrip())
        return result

    def _check(self, result: subprocess.CompletedProcess, ring: Ring, action: str,
               error_class=RingBuilderError, allowed: Optional[List[int]] = None) -> int:
        allowed = allowed or [EXIT_SUCCESS]
        if result.returncode not in allowed:
            output = (result.stdout or "") + (result.stderr or "")
            raise error_class(
                f"{action} failed for {ring.value} ring (exit code {result.returncode})",
                returncode=result.returncode,
                output=output
            )
        return result.returncode

    def create(self, ring: Ring, part_power: int, replicas: int, min_part_hours: int) -> None:
        result = self._run(ring, "create", part_power, replicas, min_part_hours)
        self._check(result, ring, "create")
        logger.info(f"Created {ring.builder_file} (part power {part_power}, "
                    f"{replicas} replicas, min_part_hours {min_part_hours})")

    def search(self, ring: Ring, ip: Optional[str] = None, device: Optional[str] = None,
               dev_id: Optional[int] = None) -> bool:
        """Return True if at least one device matches."""
        args = ["search"]
        if dev_id is not None:
            args += ["--id", dev_id]
        if ip is not None:
            args += ["--ip", ip]
        if device is not None:
            args += ["--device", device]
        result = self._run(ring, *args)
        code = self._check(result, ring, "search", allowed=[EXIT_SUCCESS, EXIT_ERROR])
        return code == EXIT_SUCCESS

    def add(self, ring: Ring, region: int, zone: int, ip: str, port: int,
            device: str, weight: float, meta: str = "") -> None:
        result = self._run(
            ring, "add",
            "--region", region,
            "--zone", zone,
            "--ip", ip,
            "--port", port,
            "--device", device,
            "--weight", weight,
            "--meta", meta
        )
        self._check(result, ring, "add")

    def set_weight(self, ring: Ring, ip: str, weight: float) -> None:
        result = self._run(ring, "set_weight", "--ip", ip, weight, "--yes")
        self._check(result, ring, "set_weight")

    def remove(self, ring: Ring, dev_id: int) -> None:
        result = self._run(ring, "remove", "--id", dev_id, "--yes")
        self._check(result, ring, "remove")

    def rebalance(self, ring: Ring) -> bool:
        """Rebalance one ring.

        Exit code 1 only warns (nothing to move, min_part_hours not yet
        elapsed, or balance not ideal). Returns True when the tool reported
        a clean rebalance.
        """
        result = self._run(ring, "rebalance")
        code = self._check(result, ring, "rebalance", error_class=RebalanceError,
                           allowed=[EXIT_SUCCESS, EXIT_WARNING])
        if code == EXIT_WARNING:
            logger.warning(f"Rebalance of {ring.value} ring finished with warnings: "
                           f"{(result.stdout or '').strip()}")
        return code == EXIT_SUCCESS

    def pretend_min_part_hours_passed(self, ring: Ring) -> None:
        result = self._run(ring, "pretend_min_part_hours_passed")
        self._check(result, ring, "pretend_min_part_hours_passed")

    def swap_metadata(self, ring: Ring, swap_device: str) -> int:
        try:
            return swap_builder_file(self.builder_path(ring), swap_device)
        except Exception as e:
            raise RingBuilderError(f"metaswap failed for {ring.value} ring: {e}")

    def write_ring(self, ring: Ring) -> None:
        result = self._run(ring, "write_ring")
        self._check(result, ring, "write_ring", error_class=RingWriteError)
