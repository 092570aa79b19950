"""Configuration for the ring synchronization tool."""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from ringsync.errors import ConfigError

DEFAULT_FINALIZER = "swift.openstack.org/swiftring"


@dataclass
class StoreConfig:
    namespace: str
    configmap_name: str
    owner_api_version: str
    owner_kind: str
    owner_name: str
    owner_uid: str
    finalizer: str
    diagnostic_path: str
    timeout: int


@dataclass
class RingConfig:
    part_power: int
    replicas: int
    min_part_hours: int
    workdir: str
    devices_file: str
    swap_device: str
    builder_binary: str


@dataclass
class RingSyncConfig:
    store: StoreConfig
    ring: RingConfig


def _load_yaml(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _setting(section: Dict[str, Any], key: str, env: str, default: Any) -> Any:
    """Environment beats the config file, which beats the default."""
    value = os.getenv(env)
    if value is not None:
        return value
    return section.get(key, default)


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}")


def load_ringsync_config(config_file: Optional[str] = None) -> RingSyncConfig:
    """Load configuration from defaults, an optional YAML file, .env and the environment."""
    load_dotenv()
    data = _load_yaml(config_file or os.getenv('RINGSYNC_CONFIG'))
    store = data.get('store') or {}
    ring = data.get('ring') or {}

    store_config = StoreConfig(
        namespace=_setting(store, 'namespace', 'NAMESPACE', 'openstack'),
        configmap_name=_setting(store, 'configmap_name', 'CM_NAME', 'swift-ring-files'),
        owner_api_version=_setting(store, 'owner_api_version', 'OWNER_APIVERSION',
                                   'swift.openstack.org/v1beta1'),
        owner_kind=_setting(store, 'owner_kind', 'OWNER_KIND', 'SwiftRing'),
        owner_name=_setting(store, 'owner_name', 'OWNER_NAME', ''),
        owner_uid=_setting(store, 'owner_uid', 'OWNER_UID', ''),
        finalizer=_setting(store, 'finalizer', 'FINALIZER', DEFAULT_FINALIZER),
        diagnostic_path=_setting(store, 'diagnostic_path', 'DIAGNOSTIC_PATH', '/tmp/configmap'),
        timeout=_as_int(_setting(store, 'timeout', 'STORE_TIMEOUT', 30), 'timeout'),
    )

    ring_config = RingConfig(
        part_power=_as_int(_setting(ring, 'part_power', 'SWIFT_PART_POWER', 10), 'part_power'),
        replicas=_as_int(_setting(ring, 'replicas', 'SWIFT_REPLICAS', 3), 'replicas'),
        min_part_hours=_as_int(_setting(ring, 'min_part_hours', 'SWIFT_MIN_PART_HOURS', 1),
                               'min_part_hours'),
        workdir=_setting(ring, 'workdir', 'RING_WORKDIR', '/etc/swift'),
        devices_file=_setting(ring, 'devices_file', 'DEVICESFILE', '/var/lib/config-data/ring-devices/devices.list'),
        swap_device=_setting(ring, 'swap_device', 'SWAP_DEVICE', 'pv'),
        builder_binary=_setting(ring, 'builder_binary', 'SWIFT_RING_BUILDER', 'swift-ring-builder'),
    )

    if ring_config.part_power < 1 or ring_config.part_power > 32:
        raise ConfigError(f"part_power must be between 1 and 32, got {ring_config.part_power}")
    if ring_config.replicas < 1:
        raise ConfigError(f"replicas must be at least 1, got {ring_config.replicas}")
    if ring_config.min_part_hours < 0:
        raise ConfigError(f"min_part_hours must not be negative, got {ring_config.min_part_hours}")

    return RingSyncConfig(store=store_config, ring=ring_config)
