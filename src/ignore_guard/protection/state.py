"""
Per-document protection state
"""

from enum import Enum
from typing import Dict, List

from ..utils import get_logger
from ..workspace import PathLike, normalize_path

logger = get_logger(__name__)


class ProtectionState(Enum):
    UNPROTECTED = "unprotected"
    ENFORCED = "enforced"
    TEMPORARILY_EDITABLE = "temporarily-editable"


class ProtectionTracker:
    """
    Protection state of open documents, keyed by absolute path.

    Documents start unprotected when first observed and are forgotten when
    closed, so a reopened path starts over.
    """

    def __init__(self):
        self._states: Dict[str, ProtectionState] = {}

    @staticmethod
    def key(path: PathLike) -> str:
        return str(normalize_path(path))

    def state_of(self, path: PathLike) -> ProtectionState:
        return self._states.get(self.key(path), ProtectionState.UNPROTECTED)

    def observe(self, path: PathLike) -> ProtectionState:
        return self._states.setdefault(self.key(path), ProtectionState.UNPROTECTED)

    def _transition(self, path: PathLike, state: ProtectionState):
        key = self.key(path)
        previous = self._states.get(key, ProtectionState.UNPROTECTED)
        self._states[key] = state
        if previous is not state:
            logger.debug(f"{key}: {previous.value} -> {state.value}")

    def enforce(self, path: PathLike):
        self._transition(path, ProtectionState.ENFORCED)

    def release(self, path: PathLike):
        self._transition(path, ProtectionState.UNPROTECTED)

    def allow_editing(self, path: PathLike):
        self._transition(path, ProtectionState.TEMPORARILY_EDITABLE)

    def forget(self, path: PathLike):
        self._states.pop(self.key(path), None)

    def paths_in(self, state: ProtectionState) -> List[str]:
        return [path for path, current in self._states.items() if current is state]

    def __len__(self) -> int:
        return len(self._states)
