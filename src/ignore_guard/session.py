"""
Per-workspace persisted flags (enableWithoutGit, hasShownNoGitMessage)
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Union

from .utils import get_logger

logger = get_logger(__name__)

ENABLE_WITHOUT_GIT = 'enableWithoutGit'
HAS_SHOWN_NO_GIT_MESSAGE = 'hasShownNoGitMessage'


class SessionStore(ABC):
    """Workspace-scoped flag storage provided by the host"""

    @abstractmethod
    def get_flag(self, key: str, default: bool = False) -> bool:
        raise NotImplementedError

    @abstractmethod
    def set_flag(self, key: str, value: bool) -> None:
        raise NotImplementedError

    @property
    def enable_without_git(self) -> bool:
        return self.get_flag(ENABLE_WITHOUT_GIT)

    @enable_without_git.setter
    def enable_without_git(self, value: bool) -> None:
        self.set_flag(ENABLE_WITHOUT_GIT, value)

    @property
    def has_shown_no_git_message(self) -> bool:
        return self.get_flag(HAS_SHOWN_NO_GIT_MESSAGE)

    @has_shown_no_git_message.setter
    def has_shown_no_git_message(self, value: bool) -> None:
        self.set_flag(HAS_SHOWN_NO_GIT_MESSAGE, value)


class MemorySessionStore(SessionStore):
    """Flags that live as long as the process"""

    def __init__(self):
        self._flags: Dict[str, bool] = {}

    def get_flag(self, key: str, default: bool = False) -> bool:
        return self._flags.get(key, default)

    def set_flag(self, key: str, value: bool) -> None:
        self._flags[key] = bool(value)


class JsonSessionStore(SessionStore):
    """
    Flags persisted in a small JSON file.

    An unreadable file is logged and treated as empty; write failures are
    logged and the in-memory value still applies for this session.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._flags: Dict[str, bool] = self._read()

    def _read(self) -> Dict[str, bool]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read session flags from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed session flags in {self.path}")
            return {}
        return {k: bool(v) for k, v in data.items()}

    def get_flag(self, key: str, default: bool = False) -> bool:
        return self._flags.get(key, default)

    def set_flag(self, key: str, value: bool) -> None:
        self._flags[key] = bool(value)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._flags, indent=2), encoding='utf-8')
        except OSError as e:
            logger.error(f"Could not persist session flag {key} to {self.path}: {e}")
