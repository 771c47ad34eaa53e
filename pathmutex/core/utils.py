"""
Simple utility functions for use across the codebase.
"""
from __future__ import annotations

from datetime import timedelta
import os
from pathlib import Path
import tempfile

from pathmutex.core.errors import DirectoryUnwritableError

PROBE_PREFIX = ".pathmutex-probe-"


def probe_writable(directory: Path) -> None:
    """
    Best-effort check that `directory` exists and accepts new entries.
    Creates and removes a temporary file; leaves nothing behind on success.
    Not atomic with later lock attempts.
    """
    try:
        fd, probe_path = tempfile.mkstemp(prefix=PROBE_PREFIX, dir=directory)
    except OSError as e:
        raise DirectoryUnwritableError(directory, e.strerror or str(e)) from e
    os.close(fd)
    try:
        os.remove(probe_path)
    except OSError as e:
        raise DirectoryUnwritableError(directory, e.strerror or str(e)) from e


def to_seconds(
    value: float | timedelta | None, name: str = "duration", *, clamp: bool = False
) -> float | None:
    """
    Normalise a float/int/timedelta duration to float seconds. None passes through.
    Negative values raise ValueError, or become 0 when `clamp` is set.
    """
    if value is None:
        return None
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
    elif isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} must be seconds or a timedelta, got {type(value).__name__}")
    else:
        seconds = float(value)
    if seconds < 0:
        if clamp:
            return 0.0
        raise ValueError(f"{name} must not be negative, got {seconds}")
    return seconds
