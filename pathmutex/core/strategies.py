"""
A Strategy is how a lock resource is created and removed on the filesystem.

Both strategies rely on a single atomic create-if-absent primitive:
- ExclusiveFileStrategy: open(O_CREAT | O_EXCL), holds the descriptor
- ExclusiveDirectoryStrategy: mkdir, holds nothing but a local marker record

Strategies raise plain OSErrors (FileExistsError on contention). Translating
them into the LockError hierarchy is FileLock's job.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, ClassVar


# --- Release ordering ---

class ReleaseOrder(ABC):
    """
    Order of unlinking the lock file and closing its descriptor. Some
    platforms refuse to remove a file that still has an open handle.
    """
    name: ClassVar[str] = ""

    @abstractmethod
    def release(self, path: Path, fd: int) -> None:
        """Remove the lock file and close `fd`. The descriptor is always closed."""


class UnlinkThenClose(ReleaseOrder):
    """POSIX: unlinking an open file is allowed, so remove first."""
    name = "unlink-then-close"

    def release(self, path: Path, fd: int) -> None:
        try:
            os.unlink(path)
        finally:
            os.close(fd)


class CloseThenUnlink(ReleaseOrder):
    """Windows: an open handle blocks deletion, so close first."""
    name = "close-then-unlink"

    def release(self, path: Path, fd: int) -> None:
        try:
            os.close(fd)
        finally:
            os.unlink(path)


# Chosen once for the platform we are running on
DEFAULT_RELEASE_ORDER: ReleaseOrder = CloseThenUnlink() if os.name == "nt" else UnlinkThenClose()

RELEASE_ORDERS: dict[str, type[ReleaseOrder]] = {
    UnlinkThenClose.name: UnlinkThenClose,
    CloseThenUnlink.name: CloseThenUnlink,
}


# --- Strategies ---

class LockStrategy(ABC):
    """The base class for all lock Strategies."""
    name: ClassVar[str] = ""
    default_mode: ClassVar[int] = 0o600

    @abstractmethod
    def create(self, path: Path, mode: int) -> Any:
        """
        Atomically create the lock resource if it is absent and return a
        handle recording local ownership. Raises FileExistsError if the
        resource already exists, any other OSError on filesystem failure.
        """

    @abstractmethod
    def release(self, path: Path, handle: Any) -> None:
        """Remove the lock resource created by `create`."""

    def exists(self, path: Path) -> bool:
        """Whether the lock resource is currently present on disk."""
        return path.exists()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class StrategyRegistry:
    """Registry for Strategies, keyed by their short name ('file', 'directory')."""
    def __init__(self):
        self._strategies: dict[str, type[LockStrategy]] = {}

    def __getitem__(self, key: str) -> type[LockStrategy]:
        if key not in self._strategies:
            raise KeyError(f"Strategy with key '{key}' not found.")
        return self._strategies[key]

    def __contains__(self, key: str) -> bool:
        return key in self._strategies

    def names(self) -> list[str]:
        """Registered strategy names, in registration order."""
        return list(self._strategies)

    def register(self, cls: type[LockStrategy]) -> type[LockStrategy]:
        """Class decorator registering a Strategy under its name."""
        if not cls.name:
            raise ValueError(f"Strategy {cls.__name__} has no name")
        if cls.name in self._strategies:
            raise ValueError(f"Strategy with key '{cls.name}' is already registered.")
        self._strategies[cls.name] = cls
        return cls

strategy_registry = StrategyRegistry()


@strategy_registry.register
class ExclusiveFileStrategy(LockStrategy):
    """
    Lock = a zero-byte file created with O_EXCL. The open descriptor is the
    handle and stays open for as long as the lock is held.
    """
    name = "file"
    default_mode = 0o600

    def __init__(self, release_order: ReleaseOrder | None = None):
        self.release_order = release_order or DEFAULT_RELEASE_ORDER

    def create(self, path: Path, mode: int) -> int:
        flags = os.O_CREAT | os.O_EXCL | os.O_WRONLY
        # Windows: keep the descriptor out of child processes
        flags |= getattr(os, "O_NOINHERIT", 0)
        return os.open(path, flags, mode)

    def release(self, path: Path, handle: int) -> None:
        self.release_order.release(path, handle)

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(release_order={self.release_order.name!r})"


@dataclass(frozen=True)
class DirectoryMarker:
    """Local record that this instance created the lock directory."""
    path: Path


@strategy_registry.register
class ExclusiveDirectoryStrategy(LockStrategy):
    """
    Lock = an empty directory created with mkdir. Nothing is held open.

    Ownership is recorded only in-process. If a third party deletes the
    directory while two processes are polling, both may recreate it in
    overlapping polls and each believe it is the holder. No owner token is
    written into the directory to break that tie.
    """
    name = "directory"
    default_mode = 0o700  # owner-only; a directory without +x is not traversable

    def create(self, path: Path, mode: int) -> DirectoryMarker:
        os.mkdir(path, mode)
        return DirectoryMarker(path=path)

    def release(self, path: Path, handle: DirectoryMarker) -> None:
        os.rmdir(path)

    def exists(self, path: Path) -> bool:
        return path.is_dir()


def get_strategy(name: str | LockStrategy) -> LockStrategy:
    """Instantiate a Strategy by name. Instances pass through unchanged."""
    if isinstance(name, LockStrategy):
        return name
    if name not in strategy_registry:
        raise ValueError(
            f"Unknown lock strategy '{name}'. Choose from: {', '.join(strategy_registry.names())}"
        )
    return strategy_registry[name]()
