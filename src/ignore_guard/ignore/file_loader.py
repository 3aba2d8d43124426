"""
File loader for parsing and validating gitignore-syntax pattern files
"""

from pathlib import Path
from typing import List, Optional, Dict, Tuple
from dataclasses import dataclass, field

import pathspec

from ..constants import PATTERN_FILENAME, MAX_PATTERN_FILE_SIZE, MAX_PATTERNS_PER_FILE
from ..utils import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationIssue:
    """A problem found on one line of a pattern file"""
    line: int
    pattern: str
    message: str


@dataclass(frozen=True)
class PatternLine:
    """A pattern together with its 1-based line number"""
    line: int
    pattern: str


@dataclass
class PatternFileInfo:
    """Information about a loaded pattern file"""
    path: Path
    lines: List[PatternLine] = field(default_factory=list)
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def patterns(self) -> List[str]:
        return [entry.pattern for entry in self.lines]

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0


def validate_pattern(pattern: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a single gitignore pattern

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        pathspec.GitIgnoreSpec.from_lines([pattern])
        return True, None
    except Exception as e:
        return False, str(e)


class PatternFileLoader:
    """
    Handles loading, parsing, and validating pattern files.

    Read failures never raise: they are recorded on the returned info and
    the file contributes no patterns.
    """

    def __init__(self, pattern_filename: str = PATTERN_FILENAME):
        self.pattern_filename = pattern_filename

    def path_for(self, root: Path) -> Path:
        return Path(root) / self.pattern_filename

    def load_file(self, file_path: Path) -> PatternFileInfo:
        """
        Load and validate a pattern file

        Args:
            file_path: Path to the pattern file

        Returns:
            PatternFileInfo with the usable patterns and validation results
        """
        info = PatternFileInfo(
            path=file_path,
            stats={
                'total_lines': 0,
                'empty_lines': 0,
                'comment_lines': 0,
                'pattern_lines': 0,
            }
        )

        if not file_path.exists():
            return info

        try:
            file_size = file_path.stat().st_size
            if file_size > MAX_PATTERN_FILE_SIZE:
                info.errors.append(ValidationIssue(
                    line=0,
                    pattern="",
                    message=f"File too large: {file_size} bytes (max: {MAX_PATTERN_FILE_SIZE})"
                ))
                return info
            text = file_path.read_text(encoding='utf-8', errors='replace')
        except OSError as e:
            logger.warning(f"Cannot read pattern file {file_path}: {e}")
            info.errors.append(ValidationIssue(
                line=0,
                pattern="",
                message=f"Error reading file: {e}"
            ))
            return info

        lines = text.splitlines()
        info.stats['total_lines'] = len(lines)

        for line_num, line in enumerate(lines, 1):
            # Only blank and comment detection looks at stripped text; the
            # raw line goes to pathspec, which applies git's whitespace rules
            if not line.strip():
                info.stats['empty_lines'] += 1
                continue

            if line.startswith('#'):
                info.stats['comment_lines'] += 1
                continue

            info.stats['pattern_lines'] += 1
            pattern = line.rstrip('\r\n')

            is_valid, error = validate_pattern(pattern)
            if is_valid:
                info.lines.append(PatternLine(line=line_num, pattern=pattern))
            else:
                info.errors.append(ValidationIssue(
                    line=line_num,
                    pattern=pattern,
                    message=error or "Invalid pattern"
                ))

            for warning_msg in self._check_pattern_warnings(pattern.strip()):
                info.warnings.append(ValidationIssue(
                    line=line_num,
                    pattern=pattern,
                    message=warning_msg
                ))

        if len(info.lines) > MAX_PATTERNS_PER_FILE:
            info.errors.append(ValidationIssue(
                line=0,
                pattern="",
                message=f"Too many patterns: {len(info.lines)} (max: {MAX_PATTERNS_PER_FILE})"
            ))
            info.lines = info.lines[:MAX_PATTERNS_PER_FILE]

        for issue in info.errors:
            logger.error(f"{file_path}:{issue.line}: {issue.message}")
        for issue in info.warnings:
            logger.debug(f"{file_path}:{issue.line}: {issue.message}")

        return info

    def _check_pattern_warnings(self, pattern: str) -> List[str]:
        """Check pattern for potential issues that aren't errors"""
        warnings = []

        if '\\' in pattern and not pattern.startswith('\\'):
            warnings.append(
                "Pattern contains backslash. Use forward slashes for paths."
            )

        if pattern in ['*', '**', '**/*']:
            warnings.append(
                "Very broad pattern - will ignore every file"
            )

        return warnings
