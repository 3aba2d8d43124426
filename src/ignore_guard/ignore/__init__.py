"""
Ignore resolution for Gitignore Guard

This package answers "is this path ignored?" through a fallback chain:
- `git check-ignore` against the controlling repository
- The workspace-root .gitignore read directly when no repository exists
- A per-path decision cache cleared on pattern file changes
"""

from .base import IgnoreMatch, IgnoreSource
from .cache import IgnoreCache
from .file_loader import PatternFileLoader, PatternFileInfo
from .git_source import GitIgnoreSource, GitRunner, RepositoryRootIndex
from .pattern_file import PatternFileInterpreter
from .resolver import IgnoreResolver

__all__ = [
    'IgnoreMatch',
    'IgnoreSource',
    'IgnoreCache',
    'PatternFileLoader',
    'PatternFileInfo',
    'GitIgnoreSource',
    'GitRunner',
    'RepositoryRootIndex',
    'PatternFileInterpreter',
    'IgnoreResolver',
]
