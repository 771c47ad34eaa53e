"""
Exception hierarchy for pathmutex.

Every failure of a lock operation is raised to the caller; nothing is logged
and swallowed inside the library. Callers that ignore these exceptions may go
on to touch the protected resource without holding the lock.
"""
from __future__ import annotations


class LockError(Exception):
    """Base pathmutex exception."""


class DirectoryUnwritableError(LockError):
    """Raised at construction when the lock's parent directory is not writable."""

    def __init__(self, directory, reason: str = ""):
        self.directory = directory
        detail = f": {reason}" if reason else ""
        super().__init__(f"Lock directory is not writable: {directory}{detail}")


class LockTimeoutError(LockError, TimeoutError):
    """Raised when the lock could not be acquired before the deadline."""

    def __init__(self, path, timeout: float):
        self.path = path
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:g}s waiting for lock: {path}")


class AlreadyLockedError(LockError):
    """Raised when an instance that already holds its lock tries to lock again."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Lock is already held by this instance: {path}")


class NotLockedError(LockError):
    """Raised when unlocking an instance that does not hold its lock."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Lock is not held by this instance: {path}")


class FilesystemError(LockError):
    """
    Wraps an unexpected OS-level failure during lock or unlock.
    The original OSError is chained as __cause__.
    """

    def __init__(self, path, err: OSError, action: str):
        self.path = path
        self.errno = err.errno
        self.action = action
        super().__init__(f"Failed to {action} lock {path}: {err.strerror or err}")


class ConfigError(LockError):
    """Raised when the configuration file is missing fields, malformed or invalid."""
