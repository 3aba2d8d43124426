"""
Editor host interface consumed by the protection layer.

The host owns documents, editors, prompts and settings storage. Operations
that fail raise `HostOperationError` (or any exception); callers in this
package catch and log them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Sequence


class ChangeKind(Enum):
    """Why a reconciliation pass was started"""
    READ_ONLY_POLICY = "openAsReadOnly"
    WHITELIST = "readOnlyWhitelist"
    ENABLED = "enabled"
    IGNORE_STATUS = "ignoreStatus"
    DOCUMENT_OPENED = "documentOpened"

    @property
    def prompts_user(self) -> bool:
        """Whether documents with unsaved changes may be asked about"""
        return self is not ChangeKind.DOCUMENT_OPENED


@dataclass(eq=False)
class Document:
    """An open document as the host reports it"""
    path: Path
    is_dirty: bool = False
    is_closed: bool = False

    def __post_init__(self):
        self.path = Path(self.path)


class EditorHost(ABC):
    """Operations the guard needs from the editor"""

    @abstractmethod
    def open_documents(self) -> List[Document]:
        raise NotImplementedError

    @abstractmethod
    def active_document(self) -> Optional[Document]:
        raise NotImplementedError

    @abstractmethod
    async def activate(self, document: Document) -> bool:
        """Make document the active editor; False if it did not become active"""
        raise NotImplementedError

    @abstractmethod
    async def set_active_read_only(self, read_only: bool) -> None:
        """Set or clear the session read-only marker on the active editor"""
        raise NotImplementedError

    @abstractmethod
    async def revert_active(self) -> None:
        """Discard unsaved changes in the active editor"""
        raise NotImplementedError

    @abstractmethod
    async def choose(self, message: str, options: Sequence[str]) -> Optional[str]:
        """Modal choice; None when the user dismisses it"""
        raise NotImplementedError

    @abstractmethod
    async def notify(self, message: str, options: Sequence[str] = ()) -> Optional[str]:
        """Non-modal information message, optionally with buttons"""
        raise NotImplementedError

    @abstractmethod
    async def update_setting(self, key: str, value: Any) -> None:
        """Write a camelCase setting in the guard's section"""
        raise NotImplementedError

    @abstractmethod
    async def open_path(self, path: Path) -> None:
        raise NotImplementedError
