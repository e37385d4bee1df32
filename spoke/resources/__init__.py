from .loader import ResourceLoader
from .reconciler import Reconciler
from .klusterlet import KlusterletReconciler
from .batch import BatchApply, BatchState

__all__ = [
    "ResourceLoader",
    "Reconciler",
    "KlusterletReconciler",
    "BatchApply",
    "BatchState",
]
