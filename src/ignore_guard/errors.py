"""
Exception types raised inside Gitignore Guard.

None of these escape the resolver or reconciler entry points; they mark
failures that are caught and degraded at that boundary.
"""

from typing import Optional


class IgnoreGuardError(Exception):
    """Base class for all Gitignore Guard errors"""


class VcsQueryError(IgnoreGuardError):
    """The VCS tool failed in a way that is not its "not ignored" signal"""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class VcsUnavailableError(VcsQueryError):
    """The VCS executable could not be started"""


class HostOperationError(IgnoreGuardError):
    """The editor host could not activate, revert or toggle a document"""


class ConfigurationError(IgnoreGuardError):
    """A settings source could not be read or holds invalid values"""
