"""
Central configuration constants for Gitignore Guard
"""

# Pattern file read at the workspace root in pattern-file mode
PATTERN_FILENAME = ".gitignore"

# Metadata directory that marks a repository root
REPOSITORY_MARKER = ".git"

# VCS executable used for ignore queries
GIT_EXECUTABLE = "git"

# Prefix of the host settings section
SETTINGS_SECTION = "gitignoreGuard"

# Seconds before a VCS query is abandoned and treated as not ignored
DEFAULT_VCS_TIMEOUT = 5.0

# Delay before the single retry of a failed read-only removal
DEFAULT_RETRY_DELAY = 0.5

# Temporary disable duration (5 minutes)
DEFAULT_TEMPORARY_DISABLE_SECONDS = 300

# Debounce window for pattern file change events
PATTERN_FILE_DEBOUNCE_SECONDS = 0.1

# Maximum cached ignore decisions per resolver
MAX_CACHE_SIZE = 10000

# Limits for loaded pattern files
MAX_PATTERN_FILE_SIZE = 1024 * 1024  # 1MB
MAX_PATTERNS_PER_FILE = 5000

DEFAULT_CRITICAL_FILE_PATTERNS = [
    ".env",
    "*.key",
    "*.pem",
    "**/secrets/*",
    "**/.env.*",
]

DEFAULT_LOW_PRIORITY_FILE_PATTERNS = [
    "dist/*",
    "build/*",
    "out/*",
    "node_modules/*",
    "*.min.js",
    "*.min.css",
]

# Choice labels offered when a document with unsaved changes becomes read-only
CHOICE_KEEP_EDITABLE = "Keep Editable Until Closed"
CHOICE_KEEP_ALL_EDITABLE = "Keep All Remaining Editable"
CHOICE_DISCARD_AND_PROTECT = "Discard Changes & Make Read-Only"
CHOICE_DISCARD_ALL_AND_PROTECT = "Discard All & Make Read-Only"

# Informational notices
NOTICE_NO_SIGNAL = (
    "Gitignore Guard: No .gitignore file found. "
    "The extension monitors files ignored by .gitignore."
)
NOTICE_PATTERN_FILE_ONLY = (
    "Gitignore Guard: Using .gitignore file directly (no Git repository detected)."
)
VIEW_PATTERN_FILE_OPTION = "View .gitignore"
