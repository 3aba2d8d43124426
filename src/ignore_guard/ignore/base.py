"""
Capability interface shared by the ignore sources.

Two implementations exist: `GitIgnoreSource` asks the VCS tool and
`PatternFileInterpreter` reads the workspace pattern file directly. The
resolver picks one at construction time and owns the decision cache.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..workspace import PathLike


@dataclass(frozen=True)
class IgnoreMatch:
    """Pattern responsible for ignoring a path"""
    pattern: str
    source: Optional[Path] = None
    line: Optional[int] = None

    def describe(self) -> str:
        if self.source is None:
            return self.pattern
        if self.line is None:
            return f"{self.pattern} ({self.source})"
        return f"{self.pattern} ({self.source}:{self.line})"


class IgnoreSource(ABC):
    """Answers ignore questions for paths inside one workspace"""

    @abstractmethod
    async def is_ignored(self, path: PathLike) -> bool:
        """Whether path is excluded from version control"""
        raise NotImplementedError

    @abstractmethod
    async def explain(self, path: PathLike) -> Optional[IgnoreMatch]:
        """Best-effort report of the pattern that ignores path"""
        raise NotImplementedError

    @abstractmethod
    async def is_repository(self, root: PathLike) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def has_pattern_file(self, root: PathLike) -> bool:
        raise NotImplementedError

    async def ignoring_pattern(self, path: PathLike) -> Optional[str]:
        match = await self.explain(path)
        return match.pattern if match else None

    def invalidate(self, path: Optional[PathLike] = None) -> None:
        """Drop source-level memoization (compiled matchers, root lookups)"""
