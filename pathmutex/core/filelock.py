"""
Filesystem mutex: a file or directory whose presence means "locked".

Any process that can see the path can take part. Exclusivity comes from the
filesystem's atomic create-if-absent; waiting is a plain sleep-and-retry poll.

The caller must check for exceptions. A LockTimeoutError or FilesystemError
means the lock is NOT held, and carrying on regardless may corrupt whatever
the lock protects. Crashed holders leave their marker behind; it has to be
removed by hand (see `pathmutex break`).
"""
from __future__ import annotations

from contextlib import contextmanager
from datetime import timedelta
import logging
import os
from pathlib import Path
import threading
import time
from typing import TYPE_CHECKING, Any, Iterator

from pathmutex.core.errors import (
    AlreadyLockedError,
    FilesystemError,
    LockTimeoutError,
    NotLockedError,
)
from pathmutex.core.strategies import (
    RELEASE_ORDERS,
    ExclusiveFileStrategy,
    LockStrategy,
    get_strategy,
)
from pathmutex.core.utils import probe_writable, to_seconds

if TYPE_CHECKING:
    from pathmutex.core.settings import LockSettings

logger = logging.getLogger("pathmutex.filelock")

DEFAULT_POLL_INTERVAL = 0.1  # seconds


class FileLock:
    """
    Handle to one lock path. Moves between unlocked and locked through
    `lock()` and `unlock()`, and can be reused for any number of cycles.

    The in-memory handle only mirrors what this instance did; the marker on
    disk is the source of truth shared across processes. Dropping the object
    does not release the lock.
    """
    def __init__(
        self,
        path: str | os.PathLike,
        poll_interval: float | timedelta | None = DEFAULT_POLL_INTERVAL,
        *,
        strategy: str | LockStrategy = "file",
        mode: int | None = None,
    ):
        self._path = Path(path)
        self._strategy = get_strategy(strategy)
        self.mode = self._strategy.default_mode if mode is None else mode
        self._poll_interval = DEFAULT_POLL_INTERVAL
        self.set_poll_interval(poll_interval)
        # Guards check-and-create / check-and-remove; never held while sleeping
        self._mtx = threading.Lock()
        self._handle: Any = None

        probe_writable(self._path.parent)

    @classmethod
    def from_settings(cls, path: str | os.PathLike, settings: "LockSettings") -> "FileLock":
        """Build a FileLock from loaded settings."""
        strategy: str | LockStrategy = settings.strategy
        if settings.strategy == ExclusiveFileStrategy.name and settings.release_order:
            strategy = ExclusiveFileStrategy(RELEASE_ORDERS[settings.release_order]())
        return cls(path, settings.poll_interval, strategy=strategy, mode=settings.mode)

    # --- Properties ---

    @property
    def path(self) -> Path:
        """The lock resource location. Fixed at construction."""
        return self._path

    @property
    def strategy(self) -> LockStrategy:
        return self._strategy

    @property
    def poll_interval(self) -> float:
        """Seconds slept between acquisition attempts."""
        return self._poll_interval

    @property
    def locked(self) -> bool:
        """Whether this instance believes it holds the lock."""
        return self._handle is not None

    def set_poll_interval(self, interval: float | timedelta | None) -> None:
        """Change the retry interval. Zero or None restores the 100ms default."""
        seconds = to_seconds(interval, "poll_interval")
        self._poll_interval = seconds or DEFAULT_POLL_INTERVAL

    # --- Lock operations ---

    def lock(self, timeout: float | timedelta) -> None:
        """
        Try to create the lock resource until `timeout` runs out, sleeping
        `poll_interval` between attempts. A timeout of zero makes one attempt.

        Raises:
            AlreadyLockedError: this instance already holds the lock.
            LockTimeoutError: another holder kept it past the deadline.
            FilesystemError: any other OS failure; not retried.
        """
        timeout_s = to_seconds(timeout, "timeout", clamp=True)
        deadline = time.monotonic() + timeout_s
        attempts = 0
        while True:
            attempts += 1
            with self._mtx:
                if self._handle is not None:
                    raise AlreadyLockedError(self._path)
                try:
                    self._handle = self._strategy.create(self._path, self.mode)
                except FileExistsError:
                    pass
                except OSError as e:
                    raise FilesystemError(self._path, e, "acquire") from e
                else:
                    logger.debug("Acquired %s after %d attempt(s)", self._path, attempts)
                    return

            if time.monotonic() >= deadline:
                raise LockTimeoutError(self._path, timeout_s)
            time.sleep(self._poll_interval)

    def unlock(self) -> None:
        """
        Remove the lock resource. Local state is cleared even if removal
        fails; in that case the marker was tampered with from outside and the
        caller must not assume the lock is free for others.

        Raises:
            NotLockedError: this instance does not hold the lock. Nothing on
                disk is touched.
            FilesystemError: removing the resource failed.
        """
        with self._mtx:
            if self._handle is None:
                raise NotLockedError(self._path)
            handle, self._handle = self._handle, None
            try:
                self._strategy.release(self._path, handle)
            except OSError as e:
                raise FilesystemError(self._path, e, "release") from e
        logger.debug("Released %s", self._path)

    @contextmanager
    def hold(self, timeout: float | timedelta) -> Iterator["FileLock"]:
        """Hold the lock for the duration of a `with` block."""
        self.lock(timeout)
        try:
            yield self
        finally:
            self.unlock()

    def __repr__(self) -> str:
        state = "locked" if self.locked else "unlocked"
        return f"<FileLock {str(self._path)!r} strategy={self._strategy.name} {state}>"
