"""
Warning tier classification for ignored files
"""

from dataclasses import dataclass
from typing import Optional

from .config import GuardConfig, WarningLevel, WarningTier
from .patterns import PatternMatcher, candidate_paths
from .utils import get_logger
from .workspace import PathLike, Workspace

logger = get_logger(__name__)


@dataclass(frozen=True)
class Classification:
    tier: WarningTier
    messages: WarningLevel
    matched_pattern: Optional[str] = None


class WarningClassifier:
    """
    Sizes the warning shown for an ignored path.

    Critical patterns are checked first, then low-priority patterns; a path
    matching neither is moderate. Message texts come from the configured
    warning-level table.
    """

    def __init__(self, config: GuardConfig, workspace: Optional[Workspace] = None):
        self.workspace = workspace
        self.update_configuration(config)

    def update_configuration(self, config: GuardConfig) -> None:
        self.config = config
        self._critical = PatternMatcher(config.critical_file_patterns)
        self._low_priority = PatternMatcher(config.low_priority_file_patterns)

    def classify(self, path: PathLike) -> Classification:
        candidates = candidate_paths(path, self.workspace)
        levels = self.config.warning_levels

        matched = self._critical.first_match(candidates)
        if matched is not None:
            tier = WarningTier.CRITICAL
        else:
            matched = self._low_priority.first_match(candidates)
            tier = WarningTier.LOW if matched is not None else WarningTier.MODERATE

        logger.debug(f"Classified {candidates[0]} as {tier.value} (pattern: {matched})")
        return Classification(tier=tier, messages=levels.for_tier(tier), matched_pattern=matched)
