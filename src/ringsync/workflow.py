"""Named ring workflow steps: get, init, update, rebalance, push and all."""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from ringsync.codec.artifacts import (
    clear_files,
    collect_files,
    encode_single,
    pack,
    unpack,
    write_files,
)
from ringsync.config.settings import RingSyncConfig
from ringsync.errors import InconsistentLocalStateError, RingBuilderError, RingSyncError
from ringsync.models import BUNDLE_KEY, RINGS, PlannedAddition
from ringsync.ring import maintenance
from ringsync.ring.builder import RingBuilderCli
from ringsync.ring.devices import load_devices
from ringsync.ring.metaswap import swap_builder_file
from ringsync.ring.rebalancer import RebalanceOrchestrator
from ringsync.ring.reconciler import DeviceReconciler
from ringsync.store.configmap_client import RingStoreClient

logger = logging.getLogger(__name__)

# Records what `get` observed so a later `push` writes against that version
STATE_FILE = ".ringsync-state.json"


class RingWorkflow:
    def __init__(self, config: RingSyncConfig, store=None, builder=None):
        self.config = config
        self.workdir = Path(config.ring.workdir)
        self._store = store
        self.builder = builder or RingBuilderCli(self.workdir, config.ring.builder_binary)

    @property
    def store(self):
        # Credentials are only needed by the steps that talk to the API server
        if self._store is None:
            self._store = RingStoreClient(self.config.store)
        return self._store

    @property
    def record_name(self) -> str:
        return self.config.store.configmap_name

    def _state_path(self) -> Path:
        return self.workdir / STATE_FILE

    def _save_state(self, found: bool, version: Optional[str]) -> None:
        with open(self._state_path(), 'w') as f:
            json.dump({'found': found, 'resource_version': version}, f)

    def _load_state(self) -> Dict:
        try:
            with open(self._state_path()) as f:
                return json.load(f)
        except FileNotFoundError:
            raise RingSyncError("No record state found, run get before push")
        except (OSError, ValueError) as e:
            raise RingSyncError(f"Unreadable record state {self._state_path()}: {e}")

    def get(self) -> Dict[str, bytes]:
        """Fetch the ring bundle and unpack it into the working directory."""
        os.makedirs(self.workdir, exist_ok=True)
        record = self.store.fetch(self.record_name)
        # local files from earlier runs must not leak into the next push
        clear_files(self.workdir)
        if not record.found:
            logger.info("No ring record yet, starting from empty state")
            self._save_state(found=False, version=None)
            return {}

        files = unpack(record.payload.get(BUNDLE_KEY))
        write_files(self.workdir, files)
        self._save_state(found=True, version=record.version)
        logger.info(f"Restored {len(files)} ring files into {self.workdir}")
        return files

    def init(self) -> List[str]:
        """Create builder files for rings that have none yet.

        Refuses to do anything when a ring file exists without its builder,
        since a new builder would silently replace that ring's topology.
        """
        os.makedirs(self.workdir, exist_ok=True)
        for ring in RINGS:
            builder_exists = (self.workdir / ring.builder_file).exists()
            ring_exists = (self.workdir / ring.ring_file).exists()
            if ring_exists and not builder_exists:
                raise InconsistentLocalStateError(
                    f"{ring.ring_file} exists without {ring.builder_file}, refusing to create a new builder"
                )

        created = []
        for ring in RINGS:
            if (self.workdir / ring.builder_file).exists():
                continue
            self.builder.create(
                ring,
                self.config.ring.part_power,
                self.config.ring.replicas,
                self.config.ring.min_part_hours
            )
            created.append(ring.builder_file)
        if not created:
            logger.info("All builder files already present")
        return created

    def plan(self, devices_file: Optional[str] = None) -> List[PlannedAddition]:
        devices = load_devices(devices_file or self.config.ring.devices_file)
        return DeviceReconciler(self.builder).plan(devices)

    def update(self, devices_file: Optional[str] = None) -> List[PlannedAddition]:
        """Add missing desired devices to every ring."""
        devices = load_devices(devices_file or self.config.ring.devices_file)
        return DeviceReconciler(self.builder).reconcile(devices)

    def _orchestrator(self) -> RebalanceOrchestrator:
        return RebalanceOrchestrator(self.builder, swap_device=self.config.ring.swap_device)

    def rebalance(self) -> dict:
        return self._orchestrator().rebalance()

    def forced_rebalance(self) -> dict:
        return self._orchestrator().forced_rebalance()

    def build_payload(self) -> Dict[str, str]:
        """Bundle all ring files and add each compiled ring on its own key.

        Rings that were never rebalanced have no ring file yet and only
        travel inside the bundle.
        """
        files = collect_files(self.workdir)
        payload = {BUNDLE_KEY: pack(files)}
        for ring in RINGS:
            if ring.ring_file in files:
                payload[ring.ring_file] = encode_single(files[ring.ring_file])
        return payload

    def push(self) -> str:
        """Publish the local ring files against the version seen by get."""
        state = self._load_state()
        version = state.get('resource_version') if state.get('found') else None
        payload = self.build_payload()
        new_version = self.store.publish(self.record_name, version, payload)
        self._save_state(found=True, version=new_version)
        return new_version

    def run_all(self) -> None:
        """Run get, init, update, rebalance and push, stopping at the first error."""
        for step in (self.get, self.init, self.update, self.rebalance, self.push):
            logger.info(f"Running {step.__name__}")
            step()

    def drain(self, host: str) -> int:
        return maintenance.drain(self.builder, host)

    def remove(self, dev_id: int) -> int:
        return maintenance.remove(self.builder, dev_id)

    def metaswap(self, builder_file: str) -> int:
        try:
            return swap_builder_file(builder_file, self.config.ring.swap_device)
        except Exception as e:
            raise RingBuilderError(f"metaswap failed for {builder_file}: {e}")
