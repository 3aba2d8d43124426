"""
Configuration snapshot for Gitignore Guard.

A `GuardConfig` is immutable. Reloading settings builds a new snapshot and
replaces the old one wholesale; whitelist edits return a new snapshot too.
Host settings use camelCase keys, optionally under the `gitignoreGuard.`
section prefix. Resolver tuning can be overridden from the environment.
"""

import json
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .constants import (
    DEFAULT_CRITICAL_FILE_PATTERNS,
    DEFAULT_LOW_PRIORITY_FILE_PATTERNS,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TEMPORARY_DISABLE_SECONDS,
    DEFAULT_VCS_TIMEOUT,
    SETTINGS_SECTION,
)
from .errors import ConfigurationError
from .utils import get_logger

logger = get_logger(__name__)


class WarningTier(str, Enum):
    CRITICAL = "critical"
    MODERATE = "moderate"
    LOW = "low"


@dataclass(frozen=True)
class WarningLevel:
    """User-visible texts for one warning tier"""
    code_lens_message: str
    status_bar_message: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: "WarningLevel") -> "WarningLevel":
        return cls(
            code_lens_message=data.get('codeLensMessage', default.code_lens_message),
            status_bar_message=data.get('statusBarMessage', default.status_bar_message),
        )


DEFAULT_WARNING_LEVELS = {
    WarningTier.CRITICAL: WarningLevel(
        code_lens_message='⚠️ This file is ignored by .gitignore ⚠️',
        status_bar_message='⚠️ Ignored file',
    ),
    WarningTier.MODERATE: WarningLevel(
        code_lens_message='⚠️ This file is ignored by .gitignore ⚠️',
        status_bar_message='⚠️ Ignored file',
    ),
    WarningTier.LOW: WarningLevel(
        code_lens_message='ℹ️ This file is ignored by .gitignore',
        status_bar_message='ℹ️ Ignored file',
    ),
}


@dataclass(frozen=True)
class WarningLevels:
    critical: WarningLevel = DEFAULT_WARNING_LEVELS[WarningTier.CRITICAL]
    moderate: WarningLevel = DEFAULT_WARNING_LEVELS[WarningTier.MODERATE]
    low: WarningLevel = DEFAULT_WARNING_LEVELS[WarningTier.LOW]

    def for_tier(self, tier: WarningTier) -> WarningLevel:
        return getattr(self, WarningTier(tier).value)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "WarningLevels":
        """Build from the host table; missing tiers and texts keep the defaults"""
        if not data:
            return cls()
        levels = {}
        for tier in WarningTier:
            entry = data.get(tier.value)
            if isinstance(entry, Mapping):
                levels[tier.value] = WarningLevel.from_mapping(entry, DEFAULT_WARNING_LEVELS[tier])
        return cls(**levels)


# camelCase host key -> GuardConfig field
SETTING_KEYS = {
    'enabled': 'enabled',
    'showStatusBar': 'show_status_bar',
    'showCodeLens': 'show_code_lens',
    'openAsReadOnly': 'open_as_read_only',
    'readOnlyWhitelist': 'read_only_whitelist',
    'warningLevels': 'warning_levels',
    'criticalFilePatterns': 'critical_file_patterns',
    'lowPriorityFilePatterns': 'low_priority_file_patterns',
    'searchAboveWorkspace': 'search_above_workspace',
    'vcsTimeout': 'vcs_timeout',
    'retryDelay': 'retry_delay',
    'temporaryDisableSeconds': 'temporary_disable_seconds',
}
FIELD_KEYS = {field_name: key for key, field_name in SETTING_KEYS.items()}


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None:
        return None
    return value.lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class GuardConfig:
    """Read-only snapshot of every setting the guard consults"""
    enabled: bool = True
    show_status_bar: bool = True
    show_code_lens: bool = True
    open_as_read_only: bool = False
    read_only_whitelist: Tuple[str, ...] = ()
    warning_levels: WarningLevels = field(default_factory=WarningLevels)
    critical_file_patterns: Tuple[str, ...] = tuple(DEFAULT_CRITICAL_FILE_PATTERNS)
    low_priority_file_patterns: Tuple[str, ...] = tuple(DEFAULT_LOW_PRIORITY_FILE_PATTERNS)
    search_above_workspace: bool = False
    vcs_timeout: float = DEFAULT_VCS_TIMEOUT
    retry_delay: float = DEFAULT_RETRY_DELAY
    temporary_disable_seconds: int = DEFAULT_TEMPORARY_DISABLE_SECONDS

    def __post_init__(self):
        """Validate configuration"""
        for name in ('read_only_whitelist', 'critical_file_patterns', 'low_priority_file_patterns'):
            value = getattr(self, name)
            if isinstance(value, str):
                raise ValueError(f"{name} must be a list of patterns, got a string")
            patterns = tuple(value)
            if not all(isinstance(p, str) for p in patterns):
                raise ValueError(f"{name} must only contain strings")
            object.__setattr__(self, name, patterns)
        if self.vcs_timeout <= 0:
            raise ValueError(f"vcs_timeout must be positive, got {self.vcs_timeout}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must not be negative, got {self.retry_delay}")
        if self.temporary_disable_seconds <= 0:
            raise ValueError(
                f"temporary_disable_seconds must be positive, got {self.temporary_disable_seconds}"
            )

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any], apply_env: bool = True) -> "GuardConfig":
        """
        Build a snapshot from host settings.

        Args:
            settings: camelCase keys, bare or prefixed with `gitignoreGuard.`
            apply_env: Whether IGNORE_GUARD_* environment overrides apply

        Returns:
            New GuardConfig; unknown keys are logged and skipped
        """
        values: Dict[str, Any] = {}
        prefix = SETTINGS_SECTION + '.'
        for key, value in settings.items():
            bare = key[len(prefix):] if key.startswith(prefix) else key
            field_name = SETTING_KEYS.get(bare)
            if field_name is None:
                logger.debug(f"Skipping unknown setting: {key}")
                continue
            if field_name == 'warning_levels':
                value = WarningLevels.from_mapping(value)
            values[field_name] = value

        if apply_env:
            timeout = os.getenv("IGNORE_GUARD_VCS_TIMEOUT")
            if timeout:
                values['vcs_timeout'] = float(timeout)
            search_above = _env_flag("IGNORE_GUARD_SEARCH_ABOVE_WORKSPACE")
            if search_above is not None:
                values['search_above_workspace'] = search_above

        return cls(**values)

    @classmethod
    def load(cls, path: Union[str, Path], apply_env: bool = True) -> "GuardConfig":
        """Load a JSON settings file (a VS Code style settings.json works)"""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read settings from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {path} must hold a JSON object")
        try:
            return cls.from_mapping(data, apply_env=apply_env)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid settings in {path}: {e}") from e

    def to_mapping(self) -> Dict[str, Any]:
        """camelCase view, the shape host settings are written in"""
        result = {}
        for field_name, key in FIELD_KEYS.items():
            value = getattr(self, field_name)
            if isinstance(value, tuple):
                value = list(value)
            elif isinstance(value, WarningLevels):
                value = {
                    tier.value: {
                        'codeLensMessage': value.for_tier(tier).code_lens_message,
                        'statusBarMessage': value.for_tier(tier).status_bar_message,
                    }
                    for tier in WarningTier
                }
            result[key] = value
        return result

    def with_whitelist_entry(self, relative_path: str) -> "GuardConfig":
        if relative_path in self.read_only_whitelist:
            return self
        return replace(self, read_only_whitelist=self.read_only_whitelist + (relative_path,))

    def without_whitelist_entry(self, relative_path: str) -> "GuardConfig":
        return replace(
            self,
            read_only_whitelist=tuple(p for p in self.read_only_whitelist if p != relative_path),
        )

    def changed_keys(self, other: "GuardConfig") -> Tuple[str, ...]:
        """camelCase keys whose values differ between two snapshots"""
        return tuple(
            key for field_name, key in FIELD_KEYS.items()
            if getattr(self, field_name) != getattr(other, field_name)
        )
