"""
Default paths for configuration and lock storage.
"""
import os
from pathlib import Path
from platformdirs import user_config_dir, user_runtime_dir

APP_NAME = 'pathmutex'

def default_settings_dir() -> Path:
    """Get the default settings directory for pathmutex."""
    return Path(user_config_dir(APP_NAME)).expanduser().resolve()

def default_lock_dir() -> Path:
    """Get the default directory for locks given by bare name."""
    return Path(user_runtime_dir(APP_NAME)).expanduser().resolve()

def resolve_lock_path(name: str | os.PathLike, lock_dir: Path | None = None) -> Path:
    """
    Paths with a directory part are used as given. A bare name such as
    'nightly-backup.lock' is placed inside `lock_dir` (or the default lock dir).
    """
    path = Path(name).expanduser()
    if path.is_absolute() or path.parent != Path("."):
        return path
    if str(name).startswith("." + os.sep):
        # explicit './name' means the current directory
        return path
    return (lock_dir or default_lock_dir()) / path
