"""
pathmutex: mutual exclusion between processes, using a file or directory on a
shared filesystem as the lock.

    from pathmutex import FileLock

    lock = FileLock("/var/lock/nightly-backup.lock")
    with lock.hold(timeout=30):
        ...

Every lock operation raises on failure; always let those exceptions stop you
from touching the protected resource.
"""
from importlib.metadata import version, PackageNotFoundError

from pathmutex.core.errors import (
    AlreadyLockedError,
    ConfigError,
    DirectoryUnwritableError,
    FilesystemError,
    LockError,
    LockTimeoutError,
    NotLockedError,
)
from pathmutex.core.filelock import DEFAULT_POLL_INTERVAL, FileLock

try:
    __version__ = version("pathmutex")
except PackageNotFoundError:
    __version__ = "unknown"
__app_name__ = "pathmutex"

__all__ = [
    "AlreadyLockedError",
    "ConfigError",
    "DEFAULT_POLL_INTERVAL",
    "DirectoryUnwritableError",
    "FileLock",
    "FilesystemError",
    "LockError",
    "LockTimeoutError",
    "NotLockedError",
]
