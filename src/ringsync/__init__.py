"""Ring-state synchronization for Swift clusters backed by a Kubernetes ConfigMap."""

__version__ = "0.1.0"
