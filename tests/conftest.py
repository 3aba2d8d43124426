"""
Shared fixtures: a scripted editor host and a git runner stub
"""

from collections import deque
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytest

from ignore_guard.errors import HostOperationError, VcsQueryError
from ignore_guard.ignore.git_source import GitResult
from ignore_guard.protection import Document, EditorHost
from ignore_guard.workspace import Workspace


class FakeGitRunner:
    """
    Answers `check-ignore` and `rev-parse` from a fixed set of ignored paths.

    Every call is recorded so tests can count VCS invocations.
    """

    def __init__(self, ignored: Iterable[str] = (), repository: bool = True):
        self.ignored = set(ignored)
        self.repository = repository
        self.verbose: Dict[str, str] = {}
        self.error: Optional[VcsQueryError] = None
        self.returncode: Optional[int] = None
        self.calls: List[Tuple[Tuple[str, ...], Path]] = []

    async def run(self, args, cwd) -> GitResult:
        self.calls.append((tuple(args), Path(cwd)))
        if self.error is not None:
            raise self.error
        if self.returncode is not None:
            return GitResult(self.returncode, '', 'fatal: something went wrong')

        if args[0] == 'rev-parse':
            if self.repository:
                return GitResult(0, '.git\n', '')
            return GitResult(128, '', 'fatal: not a git repository')

        relative = args[-1]
        if relative not in self.ignored:
            return GitResult(1, '', '')
        if '-v' in args:
            info = self.verbose.get(relative, '.gitignore:1:*.log')
            return GitResult(0, f"{info}\t{relative}\n", '')
        return GitResult(0, f"{relative}\n", '')

    def count(self, command: str) -> int:
        return sum(1 for args, _ in self.calls if args[0] == command)


class FakeHost(EditorHost):
    """Editor host double that records every operation"""

    def __init__(self, documents: Iterable[Document] = (), choices: Iterable[Optional[str]] = ()):
        self.documents: List[Document] = list(documents)
        self.active: Optional[Document] = None
        self.read_only: Dict[Path, bool] = {}
        self.choices = deque(choices)
        self.prompts: List[Tuple[str, List[str]]] = []
        self.messages: List[str] = []
        self.notify_answer: Optional[str] = None
        self.settings: Dict[str, object] = {}
        self.reverted: List[Path] = []
        self.opened_paths: List[Path] = []
        self.refuse_activation: set = set()
        self.read_only_failures = 0
        self.read_only_calls = 0

    def add(self, document: Document) -> Document:
        self.documents.append(document)
        return document

    def close(self, document: Document):
        document.is_closed = True
        self.read_only.pop(document.path, None)
        if self.active is document:
            self.active = None

    def is_read_only(self, document: Document) -> bool:
        return self.read_only.get(document.path, False)

    def open_documents(self) -> List[Document]:
        return [d for d in self.documents if not d.is_closed]

    def active_document(self) -> Optional[Document]:
        return self.active

    async def activate(self, document: Document) -> bool:
        if document.path in self.refuse_activation:
            return False
        self.active = document
        return True

    async def set_active_read_only(self, read_only: bool) -> None:
        self.read_only_calls += 1
        if self.read_only_failures:
            self.read_only_failures -= 1
            raise HostOperationError("editor did not accept the read-only change")
        self.read_only[self.active.path] = read_only

    async def revert_active(self) -> None:
        self.active.is_dirty = False
        self.reverted.append(self.active.path)

    async def choose(self, message: str, options: Sequence[str]) -> Optional[str]:
        self.prompts.append((message, list(options)))
        return self.choices.popleft() if self.choices else None

    async def notify(self, message: str, options: Sequence[str] = ()) -> Optional[str]:
        self.messages.append(message)
        return self.notify_answer

    async def update_setting(self, key: str, value) -> None:
        self.settings[key] = value

    async def open_path(self, path: Path) -> None:
        self.opened_paths.append(Path(path))


@pytest.fixture
def repo(tmp_path):
    """Workspace folder holding a repository marker and a .gitignore"""
    (tmp_path / '.git').mkdir()
    (tmp_path / '.gitignore').write_text("*.log\n.env\n")
    return tmp_path


@pytest.fixture
def workspace(repo):
    return Workspace.from_paths([repo])


@pytest.fixture
def git_runner():
    return FakeGitRunner(ignored={'build/app.log', '.env', 'debug.log'})


@pytest.fixture
def host():
    return FakeHost()
