"""
Global fixtures live here

Every test gets its own lock directory under tmp_path, and a clean
environment so a developer's own pathmutex config never leaks in.
"""
import pytest
from pathlib import Path

from pathmutex import FileLock
from pathmutex.core.settings import CONFIG_ENV, ENV_OVERRIDES

FAST_POLL = 0.005


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path):
    """Point config lookups at a file that does not exist and drop overrides."""
    for key in ENV_OVERRIDES:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "no-config.yaml"))


@pytest.fixture
def lock_dir(tmp_path: Path) -> Path:
    d = tmp_path / "locks"
    d.mkdir()
    return d


@pytest.fixture
def lock_path(lock_dir: Path) -> Path:
    return lock_dir / "resource.lock"


@pytest.fixture(params=["file", "directory"])
def strategy(request) -> str:
    """Run the test once per lock strategy."""
    return request.param


@pytest.fixture
def make_lock(lock_path: Path, strategy: str):
    """
    Factory for FileLocks on the shared lock path with a fast poll interval.
    Any lock still held at the end of the test is released.
    """
    created: list[FileLock] = []

    def _make(path: Path | None = None, poll_interval: float = FAST_POLL) -> FileLock:
        lock = FileLock(path or lock_path, poll_interval, strategy=strategy)
        created.append(lock)
        return lock

    yield _make
    for lock in created:
        if lock.locked:
            lock.unlock()
