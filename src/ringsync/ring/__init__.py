from .builder import RingBuilderCli
from .rebalancer import RebalanceOrchestrator
from .reconciler import DeviceReconciler

__all__ = ['DeviceReconciler', 'RebalanceOrchestrator', 'RingBuilderCli']
