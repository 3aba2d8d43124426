"""
Startup check of what the workspace offers to enforce.

Runs once per workspace session. A workspace with a repository needs no
notice. Without one, the user is told once whether the pattern file will be
read directly or whether there is nothing to enforce at all; the notice flag
is persisted in the session store so later activations stay quiet.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from .constants import NOTICE_NO_SIGNAL, NOTICE_PATTERN_FILE_ONLY
from .ignore import IgnoreResolver, IgnoreSource
from .session import SessionStore
from .utils import get_logger
from .workspace import PathLike, normalize_path

logger = get_logger(__name__)

Notifier = Callable[[str], Awaitable[Any]]


class WorkspaceMode(Enum):
    FULL = "full"
    PATTERN_FILE_ONLY = "gitignoreOnly"
    NO_SIGNAL = "noSignal"


@dataclass(frozen=True)
class ProbeResult:
    has_repository: bool
    has_pattern_file: bool
    mode: WorkspaceMode
    notice: Optional[str] = None
    non_git_mode: bool = False

    @property
    def pattern_file_only(self) -> bool:
        return self.mode is WorkspaceMode.PATTERN_FILE_ONLY


class WorkspaceStatusProbe:
    """One-shot repository / pattern file check with a once-per-session notice"""

    def __init__(self, source: Union[IgnoreSource, IgnoreResolver], session: SessionStore,
                 notify: Optional[Notifier] = None):
        self.source = source
        self.session = session
        self.notify = notify
        self._result: Optional[ProbeResult] = None

    @property
    def result(self) -> Optional[ProbeResult]:
        return self._result

    async def run(self, root: PathLike) -> ProbeResult:
        if self._result is not None:
            return self._result

        root = normalize_path(root)
        has_repository = await self._ask(self.source.is_repository, root)
        has_pattern_file = await self._ask(self.source.has_pattern_file, root)

        if has_repository:
            mode = WorkspaceMode.FULL
        elif has_pattern_file:
            mode = WorkspaceMode.PATTERN_FILE_ONLY
        else:
            mode = WorkspaceMode.NO_SIGNAL

        notice = None
        if not has_repository and not self.session.has_shown_no_git_message:
            notice = NOTICE_PATTERN_FILE_ONLY if has_pattern_file else NOTICE_NO_SIGNAL
            await self._emit(notice)
            self.session.has_shown_no_git_message = True

        self._result = ProbeResult(
            has_repository=has_repository,
            has_pattern_file=has_pattern_file,
            mode=mode,
            notice=notice,
            non_git_mode=self.session.enable_without_git and not has_repository,
        )
        logger.info(
            f"Workspace {root}: repository={has_repository}, "
            f"pattern file={has_pattern_file}, mode={mode.value}"
        )
        return self._result

    async def _ask(self, check: Callable[[PathLike], Awaitable[bool]], root) -> bool:
        try:
            return await check(root)
        except Exception as e:
            logger.error(f"Workspace check {check.__name__} failed for {root}: {e}")
            return False

    async def _emit(self, notice: str):
        logger.info(notice)
        if self.notify is None:
            return
        try:
            await self.notify(notice)
        except Exception as e:
            logger.error(f"Failed to show workspace notice: {e}")
