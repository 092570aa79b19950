from .configmap_client import RingStoreClient

__all__ = ['RingStoreClient']
