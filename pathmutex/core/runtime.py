"""
Runtime context for pathmutex: loaded settings plus configured logging.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pathmutex.core.errors import ConfigError, DirectoryUnwritableError
from pathmutex.core.filelock import FileLock
from pathmutex.core.paths import resolve_lock_path
from pathmutex.core.settings import LockSettings, config_path_for, load_settings


@dataclass
class Runtime:
    """Configuration for the pathmutex runtime environment."""
    config_path: Path
    settings: LockSettings
    logger: logging.Logger

    def lock_path(self, name: str | os.PathLike) -> Path:
        """Resolve a lock name or path against the configured lock directory."""
        return resolve_lock_path(name, self.settings.lock_dir)

    def new_lock(self, name: str | os.PathLike, **overrides: Any) -> FileLock:
        """
        Build a FileLock from the settings, with per-call overrides
        (poll_interval, strategy, mode...). None values are ignored.
        For bare names the lock directory is created (owner-only) if missing.
        """
        updates = {k: v for k, v in overrides.items() if v is not None}
        settings = self.settings
        if updates:
            try:
                settings = LockSettings.model_validate({**self.settings.model_dump(), **updates})
            except ValidationError as e:
                raise ConfigError(f"Invalid lock options: {e}") from e
        path = self.lock_path(name)
        if path.parent != Path(name).expanduser().parent:
            try:
                path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            except OSError as e:
                raise DirectoryUnwritableError(path.parent, e.strerror or str(e)) from e
        self.logger.debug("Lock %s using %s strategy", path, settings.strategy)
        return FileLock.from_settings(path, settings)


def build_runtime(
    *,
    config_path: Path | None = None,
    verbose: bool = False,
) -> Runtime:
    """Builds and returns a Runtime object for pathmutex."""
    # 1. Logging
    logger = logging.getLogger("pathmutex")
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    # 2. Settings
    resolved = config_path_for(config_path)
    settings = load_settings(resolved)
    # 3. Create context
    return Runtime(config_path=resolved, settings=settings, logger=logger)
