"""
Read-only protection of ignored documents
"""

from .batch import BatchChoice, BatchDecision, ReconciliationBatch
from .host import ChangeKind, Document, EditorHost
from .reconciler import ProtectionReconciler, ReconcileReport
from .state import ProtectionState, ProtectionTracker

__all__ = [
    'BatchChoice',
    'BatchDecision',
    'ReconciliationBatch',
    'ChangeKind',
    'Document',
    'EditorHost',
    'ProtectionReconciler',
    'ReconcileReport',
    'ProtectionState',
    'ProtectionTracker',
]
