"""Global test configuration and fixtures."""
import copy
import sys
from pathlib import Path

import pytest

# Add src to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from ringsync.config.settings import RingConfig, RingSyncConfig, StoreConfig
from ringsync.errors import RebalanceError, RingWriteError, VersionConflictError
from ringsync.models import Ring, StoreRecord
from ringsync.ring.metaswap import swap_device_fields


class FakeRingBuilder:
    """In-memory stand-in for swift-ring-builder."""

    def __init__(self, workdir=None):
        self.workdir = Path(workdir) if workdir else None
        self.devs = {ring: [] for ring in Ring}
        self.calls = []
        self.fail_rebalance = set()
        self.fail_write = set()

    def _next_id(self, ring):
        return len(self.devs[ring])

    def snapshot(self):
        return copy.deepcopy(self.devs)

    def live_devs(self, ring):
        return [d for d in self.devs[ring] if d is not None]

    def create(self, ring, part_power, replicas, min_part_hours):
        self.calls.append(("create", ring, part_power, replicas, min_part_hours))
        if self.workdir is not None:
            (self.workdir / ring.builder_file).write_bytes(b"builder")

    def search(self, ring, ip=None, device=None, dev_id=None):
        self.calls.append(("search", ring))
        for dev in self.live_devs(ring):
            if dev_id is not None and dev['id'] != dev_id:
                continue
            if ip is not None and dev['ip'] != ip:
                continue
            if device is not None and dev['device'] != device:
                continue
            return True
        return False

    def add(self, ring, region, zone, ip, port, device, weight, meta=""):
        self.calls.append(("add", ring, ip, port, device))
        self.devs[ring].append({
            'id': self._next_id(ring),
            'region': region,
            'zone': zone,
            'ip': ip,
            'port': port,
            'device': device,
            'weight': weight,
            'meta': meta,
        })

    def set_weight(self, ring, ip, weight):
        self.calls.append(("set_weight", ring, ip, weight))
        for dev in self.live_devs(ring):
            if dev['ip'] == ip:
                dev['weight'] = weight

    def remove(self, ring, dev_id):
        self.calls.append(("remove", ring, dev_id))
        for index, dev in enumerate(self.devs[ring]):
            if dev is not None and dev['id'] == dev_id:
                self.devs[ring][index] = None

    def swap_metadata(self, ring, swap_device):
        self.calls.append(("swap", ring))
        return swap_device_fields(self.devs[ring], swap_device)

    def rebalance(self, ring):
        self.calls.append(("rebalance", ring))
        if ring in self.fail_rebalance:
            raise RebalanceError(f"rebalance failed for {ring.value} ring", returncode=2)
        return True

    def pretend_min_part_hours_passed(self, ring):
        self.calls.append(("pretend", ring))

    def write_ring(self, ring):
        self.calls.append(("write_ring", ring))
        if ring in self.fail_write:
            raise RingWriteError(f"write_ring failed for {ring.value} ring", returncode=2)
        if self.workdir is not None:
            (self.workdir / ring.ring_file).write_bytes(f"{ring.value}-ring".encode())


class FakeStore:
    """In-memory ConfigMap with resourceVersion checks."""

    def __init__(self):
        self.record = None
        self.version = 0
        self.publishes = []

    def fetch(self, name):
        if self.record is None:
            return StoreRecord(found=False)
        return StoreRecord(found=True, version=str(self.version), payload=dict(self.record))

    def publish(self, name, version, payload):
        self.publishes.append((name, version))
        if version is None and self.record is not None:
            raise VersionConflictError("already exists", status=409)
        if version is not None and (self.record is None or version != str(self.version)):
            raise VersionConflictError("stale resourceVersion", status=409)
        self.record = dict(payload)
        self.version += 1
        return str(self.version)


@pytest.fixture
def workdir(tmp_path):
    path = tmp_path / "swift"
    path.mkdir()
    return path


@pytest.fixture
def devices_file(tmp_path):
    path = tmp_path / "devices.list"
    path.write_text(
        "1 1 10.0.0.5 d1 100 storage-0\n"
        "1 2 10.0.0.6 pv 100 swift-storage-0.swift-storage\n"
    )
    return path


@pytest.fixture
def ringsync_config(workdir, devices_file, tmp_path):
    return RingSyncConfig(
        store=StoreConfig(
            namespace="openstack",
            configmap_name="swift-ring-files",
            owner_api_version="swift.openstack.org/v1beta1",
            owner_kind="SwiftRing",
            owner_name="swift-ring",
            owner_uid="1234-5678",
            finalizer="swift.openstack.org/swiftring",
            diagnostic_path=str(tmp_path / "configmap"),
            timeout=10,
        ),
        ring=RingConfig(
            part_power=10,
            replicas=3,
            min_part_hours=1,
            workdir=str(workdir),
            devices_file=str(devices_file),
            swap_device="pv",
            builder_binary="swift-ring-builder",
        ),
    )


@pytest.fixture
def fake_builder(workdir):
    return FakeRingBuilder(workdir)


@pytest.fixture
def fake_store():
    return FakeStore()
