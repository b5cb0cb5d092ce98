"""Delta reconciliation engine."""

from onedrive_mirror.reconcile.engine import DeltaEngine
from onedrive_mirror.reconcile.models import ActionKind, ItemKind, Namespace, SyncAction
from onedrive_mirror.reconcile.state import ReconciliationState

__all__ = [
    "ActionKind",
    "DeltaEngine",
    "ItemKind",
    "Namespace",
    "ReconciliationState",
    "SyncAction",
]
