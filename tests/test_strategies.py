"""
Tests for the lock Strategies and the release orderings.
"""
import os
from pathlib import Path

import pytest

from pathmutex.core.strategies import (
    DEFAULT_RELEASE_ORDER,
    CloseThenUnlink,
    DirectoryMarker,
    ExclusiveDirectoryStrategy,
    ExclusiveFileStrategy,
    LockStrategy,
    StrategyRegistry,
    UnlinkThenClose,
    get_strategy,
    strategy_registry,
)


def fd_is_open(fd: int) -> bool:
    try:
        os.fstat(fd)
    except OSError:
        return False
    return True


@pytest.mark.parametrize("order", [UnlinkThenClose(), CloseThenUnlink()])
def test_release_order_removes_and_closes(lock_path: Path, order):
    fd = ExclusiveFileStrategy(order).create(lock_path, 0o600)
    order.release(lock_path, fd)
    assert not lock_path.exists()
    assert not fd_is_open(fd)


@pytest.mark.skipif(os.name == "nt", reason="cannot unlink an open file on Windows")
@pytest.mark.parametrize("order", [UnlinkThenClose(), CloseThenUnlink()])
def test_release_order_closes_even_if_file_is_gone(lock_path: Path, order):
    fd = ExclusiveFileStrategy(order).create(lock_path, 0o600)
    os.unlink(lock_path)
    with pytest.raises(FileNotFoundError):
        order.release(lock_path, fd)
    assert not fd_is_open(fd)


def test_default_release_order_matches_platform():
    expected = CloseThenUnlink if os.name == "nt" else UnlinkThenClose
    assert isinstance(DEFAULT_RELEASE_ORDER, expected)
    assert ExclusiveFileStrategy().release_order is DEFAULT_RELEASE_ORDER


def test_file_create_is_exclusive(lock_path: Path):
    strategy = ExclusiveFileStrategy()
    fd = strategy.create(lock_path, 0o600)
    try:
        with pytest.raises(FileExistsError):
            strategy.create(lock_path, 0o600)
        assert strategy.exists(lock_path)
    finally:
        strategy.release(lock_path, fd)
    assert not strategy.exists(lock_path)


def test_directory_create_is_exclusive(lock_path: Path):
    strategy = ExclusiveDirectoryStrategy()
    marker = strategy.create(lock_path, 0o700)
    assert isinstance(marker, DirectoryMarker)
    assert marker.path == lock_path
    with pytest.raises(FileExistsError):
        strategy.create(lock_path, 0o700)
    assert strategy.exists(lock_path)
    strategy.release(lock_path, marker)
    assert not lock_path.exists()


def test_directory_strategy_contends_with_plain_file(lock_path: Path):
    lock_path.write_text("", encoding="utf-8")
    with pytest.raises(FileExistsError):
        ExclusiveDirectoryStrategy().create(lock_path, 0o700)
    # a file is not a directory lock for status purposes
    assert not ExclusiveDirectoryStrategy().exists(lock_path)


def test_registry_names():
    assert strategy_registry.names() == ["file", "directory"]
    assert strategy_registry["file"] is ExclusiveFileStrategy
    with pytest.raises(KeyError):
        strategy_registry["flock"]  # pylint: disable=pointless-statement


def test_registry_rejects_duplicates_and_unnamed():
    registry = StrategyRegistry()
    registry.register(ExclusiveFileStrategy)
    with pytest.raises(ValueError, match="already registered"):
        registry.register(ExclusiveFileStrategy)

    class Nameless(LockStrategy):
        def create(self, path, mode):
            return None

        def release(self, path, handle):
            pass

    with pytest.raises(ValueError, match="no name"):
        registry.register(Nameless)


def test_get_strategy():
    assert isinstance(get_strategy("file"), ExclusiveFileStrategy)
    assert isinstance(get_strategy("directory"), ExclusiveDirectoryStrategy)
    instance = ExclusiveFileStrategy(CloseThenUnlink())
    assert get_strategy(instance) is instance
    with pytest.raises(ValueError, match="file, directory"):
        get_strategy("sqlite")
