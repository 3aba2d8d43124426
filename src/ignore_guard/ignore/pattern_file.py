"""
Pattern-file ignore source.

Evaluates the gitignore-syntax file at the root of a workspace folder
without any VCS tool. Nested pattern files are not read. One compiled
matcher is kept per folder until `invalidate()` is called for a change
signal; files are never polled.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pathspec

from ..constants import PATTERN_FILENAME
from ..utils import get_logger
from ..workspace import PathLike, Workspace, normalize_path
from .base import IgnoreMatch, IgnoreSource
from .file_loader import PatternFileInfo, PatternFileLoader

logger = get_logger(__name__)


@dataclass
class CompiledPatternFile:
    """Loaded pattern file and its combined matcher"""
    info: PatternFileInfo
    spec: Optional[pathspec.GitIgnoreSpec]


class PatternFileInterpreter(IgnoreSource):
    """Answers ignore questions from the workspace-root pattern file"""

    def __init__(self, workspace: Workspace, pattern_filename: str = PATTERN_FILENAME):
        self.workspace = workspace
        self.pattern_filename = pattern_filename
        self._loader = PatternFileLoader(pattern_filename)
        self._compiled: Dict[Path, CompiledPatternFile] = {}

    def _relative(self, path: PathLike):
        """(folder, relative path) or (None, None) outside the workspace"""
        absolute = normalize_path(path)
        folder = self.workspace.folder_for(absolute)
        if folder is None or absolute == folder:
            return None, None
        return folder, absolute.relative_to(folder).as_posix()

    def _compiled_for(self, folder: Path) -> CompiledPatternFile:
        compiled = self._compiled.get(folder)
        if compiled is not None:
            return compiled

        info = self._loader.load_file(self._loader.path_for(folder))
        spec = None
        if info.lines:
            try:
                spec = pathspec.GitIgnoreSpec.from_lines(info.patterns)
            except Exception as e:
                logger.error(f"Failed to compile patterns for {info.path}: {e}")
        compiled = CompiledPatternFile(info=info, spec=spec)
        self._compiled[folder] = compiled
        logger.debug(f"Compiled {len(info.lines)} patterns from {info.path}")
        return compiled

    async def is_ignored(self, path: PathLike) -> bool:
        folder, relative = self._relative(path)
        if folder is None:
            logger.debug(f"No workspace folder for {path}")
            return False
        compiled = self._compiled_for(folder)
        if compiled.spec is None:
            return False
        return compiled.spec.match_file(relative)

    async def explain(self, path: PathLike) -> Optional[IgnoreMatch]:
        """
        First line that on its own would ignore path.

        This scans lines one at a time instead of using the combined
        matcher, so a later negation that re-includes the path is not seen.
        """
        folder, relative = self._relative(path)
        if folder is None:
            return None
        info = self._compiled_for(folder).info
        for entry in info.lines:
            try:
                single = pathspec.GitIgnoreSpec.from_lines([entry.pattern])
            except Exception as e:
                logger.warning(f"{info.path}:{entry.line}: cannot test pattern: {e}")
                continue
            if single.match_file(relative):
                return IgnoreMatch(pattern=entry.pattern, source=info.path, line=entry.line)
        return None

    async def is_repository(self, root: PathLike) -> bool:
        return False

    async def has_pattern_file(self, root: PathLike) -> bool:
        return self._loader.path_for(normalize_path(root)).exists()

    def preview(self, root: PathLike, max_lines: int = 10) -> List[str]:
        """First patterns of the pattern file at root"""
        info = self._loader.load_file(self._loader.path_for(normalize_path(root)))
        return info.patterns[:max_lines]

    def invalidate(self, path: Optional[PathLike] = None) -> None:
        """
        Forget compiled matchers.

        Args:
            path: A pattern file or workspace folder to forget; None forgets all
        """
        if path is None:
            self._compiled.clear()
            return
        target = normalize_path(path)
        if target.name == self.pattern_filename:
            target = target.parent
        self._compiled.pop(target, None)
