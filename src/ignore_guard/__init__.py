"""
Gitignore Guard

Warns about and protects editor documents that version control ignores.
"""

__version__ = "1.0.0"

from .classifier import Classification, WarningClassifier
from .config import GuardConfig, WarningLevel, WarningLevels, WarningTier
from .guard import IgnoreGuard
from .ignore import IgnoreMatch, IgnoreResolver, IgnoreSource
from .patterns import PatternMatcher
from .probe import ProbeResult, WorkspaceMode, WorkspaceStatusProbe
from .protection import ChangeKind, Document, EditorHost, ProtectionReconciler, ProtectionState
from .workspace import Workspace

__all__ = [
    'Classification',
    'WarningClassifier',
    'GuardConfig',
    'WarningLevel',
    'WarningLevels',
    'WarningTier',
    'IgnoreGuard',
    'IgnoreMatch',
    'IgnoreResolver',
    'IgnoreSource',
    'PatternMatcher',
    'ProbeResult',
    'WorkspaceMode',
    'WorkspaceStatusProbe',
    'ChangeKind',
    'Document',
    'EditorHost',
    'ProtectionReconciler',
    'ProtectionState',
    'Workspace',
]
