"""
Glob matching for warning tiers and read-only whitelists.

A pattern without wildcards matches by exact string equality. Otherwise
`*` matches any run of characters (separators included), `?` matches one
character, and `**/` also matches an empty directory prefix. Matches are
anchored at both ends. Each pattern is tried against the workspace-relative
path and against the bare filename; either one succeeding is a match.
"""

import re
from functools import lru_cache
from pathlib import PurePosixPath
from typing import Iterable, Optional, Pattern, Sequence, Tuple

from .utils import get_logger
from .workspace import PathLike, Workspace

logger = get_logger(__name__)

WILDCARDS = ('*', '?')


def has_wildcard(pattern: str) -> bool:
    return any(char in pattern for char in WILDCARDS)


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> Pattern[str]:
    """Translate a glob pattern into an anchored regular expression"""
    parts = []
    i = 0
    while i < len(pattern):
        if pattern.startswith('**/', i):
            parts.append('(?:.*/)?')
            i += 3
        elif pattern[i] == '*':
            parts.append('.*')
            i += 1
        elif pattern[i] == '?':
            parts.append('.')
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile(''.join(parts), re.DOTALL)


def candidate_paths(path: PathLike, workspace: Optional[Workspace] = None) -> Tuple[str, str]:
    """(relative path, basename) pair a pattern is tested against"""
    if workspace is not None:
        relative = workspace.relative_path(path)
    else:
        relative = str(path)
    relative = relative.replace('\\', '/')
    return relative, PurePosixPath(relative).name


class PatternMatcher:
    """Ordered set of glob patterns; any match wins, order is kept for display"""

    def __init__(self, patterns: Iterable[str] = ()):
        self.patterns: Tuple[str, ...] = tuple(patterns)

    def __repr__(self) -> str:
        return f"PatternMatcher({list(self.patterns)!r})"

    @staticmethod
    def matches(pattern: str, candidates: Sequence[str]) -> bool:
        """
        Check one pattern against the candidate strings.

        Unusable patterns are reported and treated as matching nothing.
        """
        try:
            if not has_wildcard(pattern):
                return any(candidate == pattern for candidate in candidates)
            regex = compile_pattern(pattern)
            return any(regex.fullmatch(candidate) for candidate in candidates)
        except (TypeError, re.error) as e:
            logger.error(f"Classification error for pattern {pattern!r}: {e}")
            return False

    def first_match(self, candidates: Sequence[str]) -> Optional[str]:
        """First pattern (in declared order) matching any candidate"""
        for pattern in self.patterns:
            if self.matches(pattern, candidates):
                return pattern
        return None

    def matches_path(self, path: PathLike, workspace: Optional[Workspace] = None) -> bool:
        return self.first_match(candidate_paths(path, workspace)) is not None


def is_whitelisted(path: PathLike, whitelist: Iterable[str],
                   workspace: Optional[Workspace] = None) -> bool:
    """Whether a read-only whitelist exempts path"""
    return PatternMatcher(whitelist).matches_path(path, workspace)
