from .settings import RingConfig, RingSyncConfig, StoreConfig, load_ringsync_config

__all__ = ['RingConfig', 'RingSyncConfig', 'StoreConfig', 'load_ringsync_config']
