"""Error types raised by the ring synchronization workflow."""

from typing import Optional


class RingSyncError(Exception):
    """Base class for ring synchronization errors."""
    pass


class ConfigError(RingSyncError):
    """Raised when the configuration cannot be loaded or is invalid."""
    pass


class StoreError(RingSyncError):
    """Raised when the store answers with a status that is neither found nor absent."""

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body


class StoreUnreachableError(StoreError):
    """Raised when the store cannot be reached at all."""
    pass


class VersionConflictError(StoreError):
    """Raised when another writer changed the record since it was read."""
    pass


class InconsistentLocalStateError(RingSyncError):
    """Raised when a ring file exists without the builder it was compiled from."""
    pass


class ArtifactError(RingSyncError):
    """Raised when a ring-state bundle cannot be encoded or decoded."""
    pass


class DeviceListError(RingSyncError):
    """Raised for malformed lines in the desired device list."""

    def __init__(self, path: str, line_no: int, reason: str):
        super().__init__(f"{path}:{line_no}: {reason}")
        self.path = path
        self.line_no = line_no


class RingBuilderError(RingSyncError):
    """Raised when a swift-ring-builder invocation fails."""

    def __init__(self, message: str, returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.message = message
        self.returncode = returncode
        self.output = output


class RebalanceError(RingBuilderError):
    """Raised when rebalancing a ring fails."""
    pass


class RingWriteError(RingBuilderError):
    """Raised when compiling a ring file fails."""
    pass
