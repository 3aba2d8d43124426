"""
Ignore resolver: the single entry point for "is this path ignored?"
"""

from pathlib import Path
from typing import Dict, Optional, Union

from ..constants import DEFAULT_VCS_TIMEOUT, MAX_CACHE_SIZE, PATTERN_FILENAME
from ..utils import get_logger
from ..workspace import PathLike, Workspace, normalize_path
from .base import IgnoreMatch, IgnoreSource
from .cache import IgnoreCache
from .git_source import GitIgnoreSource, GitRunner
from .pattern_file import PatternFileInterpreter

logger = get_logger(__name__)


class IgnoreResolver:
    """
    Caches ignore decisions from one ignore source.

    Repeated queries for a path return the cached answer without touching
    the source until `invalidate()` drops it. Failures inside the source
    degrade to "not ignored" and never propagate to callers.
    """

    def __init__(self, source: IgnoreSource, cache_size: int = MAX_CACHE_SIZE):
        self.source = source
        self._cache = IgnoreCache(cache_size)

    @classmethod
    def create(cls, workspace: Workspace,
               pattern_file_only: bool = False,
               search_above_workspace: bool = False,
               runner: Optional[GitRunner] = None,
               vcs_timeout: float = DEFAULT_VCS_TIMEOUT,
               cache_size: int = MAX_CACHE_SIZE) -> "IgnoreResolver":
        """
        Build a resolver with the ignore source for this workspace.

        Args:
            workspace: Workspace folders that bound root discovery
            pattern_file_only: Skip the VCS tool and read the pattern file directly
            search_above_workspace: Let root discovery walk above the workspace folder
            runner: Git runner to use (tests pass a stub)
            vcs_timeout: Seconds before a git query counts as failed
            cache_size: Maximum cached decisions
        """
        interpreter = PatternFileInterpreter(workspace)
        if pattern_file_only:
            source: IgnoreSource = interpreter
        else:
            source = GitIgnoreSource(
                workspace,
                fallback=interpreter,
                runner=runner or GitRunner(timeout=vcs_timeout),
                search_above_workspace=search_above_workspace,
            )
        return cls(source, cache_size=cache_size)

    @property
    def pattern_file_only(self) -> bool:
        return isinstance(self.source, PatternFileInterpreter)

    async def is_ignored(self, path: PathLike) -> bool:
        key = str(normalize_path(path))

        cached = self._cache.get_decision(key)
        if cached is not None:
            logger.trace(f"Cache hit for {key}: {cached}")
            return cached

        try:
            ignored = await self.source.is_ignored(key)
        except Exception as e:
            logger.error(f"Error checking if {key} is ignored: {e}", exc_info=True)
            return False

        self._cache.cache_decision(key, ignored)
        logger.debug(f"Ignore check for {key}: {ignored}")
        return ignored

    async def explain(self, path: PathLike) -> Optional[IgnoreMatch]:
        try:
            return await self.source.explain(path)
        except Exception as e:
            logger.error(f"Error getting ignore pattern for {path}: {e}", exc_info=True)
            return None

    async def ignoring_pattern(self, path: PathLike) -> Optional[str]:
        match = await self.explain(path)
        return match.pattern if match else None

    async def is_repository(self, root: PathLike) -> bool:
        try:
            return await self.source.is_repository(root)
        except Exception as e:
            logger.error(f"Error checking if {root} is a repository: {e}", exc_info=True)
            return False

    async def has_pattern_file(self, root: PathLike) -> bool:
        try:
            return await self.source.has_pattern_file(root)
        except Exception as e:
            logger.error(f"Error checking for pattern file in {root}: {e}", exc_info=True)
            return False

    def invalidate(self, path: Optional[PathLike] = None) -> None:
        """
        Drop cached decisions.

        Args:
            path: Recompute only this path (and anything below it); None clears
                every decision and the source's compiled state
        """
        if path is None:
            self._cache.clear()
            self.source.invalidate()
            logger.info("Ignore cache invalidated")
        else:
            self._cache.invalidate_path(str(normalize_path(path)))

    invalidate_cache = invalidate

    def notify_file_changed(self, file_path: PathLike) -> bool:
        """
        Handle a watched-file change notification.

        Returns:
            True when the file was a pattern file and caches were dropped
        """
        if Path(file_path).name != PATTERN_FILENAME:
            logger.debug(f"Not a pattern file: {file_path}")
            return False
        logger.info(f"Pattern file changed: {file_path}")
        self.invalidate()
        return True

    def get_stats(self) -> Dict[str, Union[str, object]]:
        return {
            'source': type(self.source).__name__,
            'cache': self._cache.get_stats(),
        }
