"""
VCS-backed ignore source.

Finds the repository that controls a path, then asks `git check-ignore`
with the root-relative path. Paths with no controlling repository, or a
missing git executable, go to the pattern-file interpreter. Any other git
failure, including a timeout, is logged and answered as "not ignored".
"""

import asyncio
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..constants import DEFAULT_VCS_TIMEOUT, GIT_EXECUTABLE, REPOSITORY_MARKER
from ..errors import VcsQueryError, VcsUnavailableError
from ..utils import get_logger
from ..workspace import PathLike, Workspace, normalize_path
from .base import IgnoreMatch, IgnoreSource
from .pattern_file import PatternFileInterpreter

logger = get_logger(__name__)

# <source>:<linenum>:<pattern>\t<pathname>
VERBOSE_LINE = re.compile(r'^(?P<source>.*?):(?P<line>\d+):(?P<pattern>.*)$')


@dataclass
class GitResult:
    returncode: int
    stdout: str
    stderr: str


class GitRunner:
    """Runs git commands as subprocesses with a bounded wait"""

    def __init__(self, executable: str = GIT_EXECUTABLE, timeout: float = DEFAULT_VCS_TIMEOUT):
        self.executable = shutil.which(executable) or executable
        self.timeout = timeout

    async def run(self, args: List[str], cwd: Union[str, Path]) -> GitResult:
        """
        Run git and collect its output.

        Raises:
            VcsUnavailableError: git could not be started
            VcsQueryError: cwd is missing or the command timed out
        """
        cwd = Path(cwd)
        if not cwd.is_dir():
            raise VcsQueryError(f"working directory does not exist: {cwd}")

        cmd = [self.executable, *args]
        logger.trace(f"Running {' '.join(cmd)} in {cwd}")
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise VcsUnavailableError(f"cannot run {self.executable}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise VcsQueryError(f"git {args[0]} timed out after {self.timeout}s")

        return GitResult(
            returncode=process.returncode,
            stdout=stdout.decode(errors='replace'),
            stderr=stderr.decode(errors='replace'),
        )


class RepositoryRootIndex:
    """
    Memoized repository root lookup per directory.

    A marker at the workspace folder wins over any deeper one. Otherwise the
    walk goes upward from the file's directory and stops at the workspace
    folder, unless `search_above_workspace` lets it continue to the
    filesystem root.
    """

    def __init__(self, workspace: Workspace, marker: str = REPOSITORY_MARKER,
                 search_above_workspace: bool = False):
        self.workspace = workspace
        self.marker = marker
        self.search_above_workspace = search_above_workspace
        self._roots: Dict[Path, Optional[Path]] = {}

    def _has_marker(self, directory: Path) -> bool:
        return (directory / self.marker).is_dir()

    def find_root(self, path: PathLike) -> Optional[Path]:
        absolute = normalize_path(path)
        directory = absolute.parent
        if directory in self._roots:
            return self._roots[directory]
        root = self._discover(absolute)
        self._roots[directory] = root
        return root

    def _discover(self, file_path: Path) -> Optional[Path]:
        boundary = self.workspace.folder_for(file_path)
        if boundary is None and not self.search_above_workspace:
            return None
        if boundary is not None and self._has_marker(boundary):
            return boundary

        current = file_path.parent
        while True:
            if current != boundary and self._has_marker(current):
                return current
            if current == boundary and not self.search_above_workspace:
                return None
            if current.parent == current:
                return None
            current = current.parent

    def clear(self):
        self._roots.clear()

    def __len__(self) -> int:
        return len(self._roots)


class GitIgnoreSource(IgnoreSource):
    """Ignore source that prefers `git check-ignore`"""

    def __init__(self, workspace: Workspace,
                 fallback: Optional[PatternFileInterpreter] = None,
                 runner: Optional[GitRunner] = None,
                 search_above_workspace: bool = False):
        self.workspace = workspace
        self.fallback = fallback or PatternFileInterpreter(workspace)
        self.runner = runner or GitRunner()
        self.roots = RepositoryRootIndex(workspace, search_above_workspace=search_above_workspace)
        self._repositories: Dict[Path, bool] = {}

    async def is_ignored(self, path: PathLike) -> bool:
        absolute = normalize_path(path)
        root = self.roots.find_root(absolute)
        if root is None:
            logger.debug(f"No repository controls {absolute}, using pattern file")
            return await self.fallback.is_ignored(absolute)

        relative = absolute.relative_to(root).as_posix()
        try:
            result = await self.runner.run(['check-ignore', '--', relative], cwd=root)
        except VcsUnavailableError as e:
            logger.warning(f"{e}; using pattern file for {relative}")
            return await self.fallback.is_ignored(absolute)
        except VcsQueryError as e:
            logger.warning(f"git check-ignore failed for {relative}: {e}; treating as not ignored")
            return False

        if result.returncode == 0:
            ignored = bool(result.stdout.strip())
            logger.debug(f"git check-ignore {relative}: ignored={ignored}")
            return ignored
        if result.returncode == 1:
            logger.debug(f"git check-ignore {relative}: not ignored")
            return False

        logger.warning(
            f"git check-ignore exited {result.returncode} for {relative}: "
            f"{result.stderr.strip()}; treating as not ignored"
        )
        return False

    async def explain(self, path: PathLike) -> Optional[IgnoreMatch]:
        absolute = normalize_path(path)
        root = self.roots.find_root(absolute)
        if root is None:
            return await self.fallback.explain(absolute)

        relative = absolute.relative_to(root).as_posix()
        try:
            result = await self.runner.run(['check-ignore', '-v', '--', relative], cwd=root)
        except VcsUnavailableError as e:
            logger.warning(f"{e}; using pattern file to explain {relative}")
            return await self.fallback.explain(absolute)
        except VcsQueryError as e:
            logger.warning(f"git check-ignore -v failed for {relative}: {e}")
            return None

        if result.returncode != 0:
            return None
        return parse_verbose_output(result.stdout, root)

    async def is_repository(self, root: PathLike) -> bool:
        root = normalize_path(root)
        if root in self._repositories:
            return self._repositories[root]
        try:
            result = await self.runner.run(['rev-parse', '--git-dir'], cwd=root)
            is_repo = result.returncode == 0
        except VcsQueryError as e:
            logger.debug(f"Repository check failed for {root}: {e}")
            is_repo = False
        self._repositories[root] = is_repo
        return is_repo

    async def has_pattern_file(self, root: PathLike) -> bool:
        return await self.fallback.has_pattern_file(root)

    def invalidate(self, path: Optional[PathLike] = None) -> None:
        if path is None:
            self.roots.clear()
            self._repositories.clear()
        self.fallback.invalidate(path)


def parse_verbose_output(output: str, root: Path) -> Optional[IgnoreMatch]:
    """Parse the first line of `git check-ignore -v` output"""
    first = output.strip().splitlines()[0] if output.strip() else ''
    info = first.split('\t', 1)[0]
    match = VERBOSE_LINE.match(info)
    if not match:
        return None
    source = match.group('source')
    return IgnoreMatch(
        pattern=match.group('pattern'),
        source=(root / source) if source else None,
        line=int(match.group('line')),
    )
