# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Environment driven configuration.

Settings are read from environment variables, optionally seeded from a
``.env`` file through python-dotenv:

- APPMENU_SUPPORT_DIR: directory holding items.json and settings.json
- APPMENU_DEBOUNCE_MS: save/notify coalescing delay in milliseconds
- APPMENU_SCAN_ROOTS: os.pathsep separated application directories
- APPMENU_LOG_LEVEL: logging level name
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigError

APP_DIR_NAME = 'appMenu'
DEFAULT_DEBOUNCE_MS = 150

DEFAULT_SCAN_ROOTS: tuple[str, ...] = (
    '/Applications',
    '/Applications/Utilities',
    '/System/Applications',
    '/System/Applications/Utilities',
    '/System/Library/CoreServices',
)


def load_env(path: str | None = None) -> bool:
    """Load a .env file into os.environ without overriding existing values.

    Args:
        path: Explicit .env path. If None, searched upward from the
            current working directory.

    Returns:
        True if a file was found and loaded.
    """
    env_file = path or find_dotenv(usecwd=True)
    if not env_file:
        return False
    return load_dotenv(env_file, override=False)


def get_str(key: str, default: str = '') -> str:
    return os.getenv(key, default)


def get_bool(key: str, default: str = 'false') -> bool:
    """Return the variable as a boolean ('true', '1', 'yes', 'y' are true)."""
    return os.getenv(key, default).strip().lower() in ('true', '1', 'yes', 'y')


def get_int(key: str, default: int = 0) -> int:
    """Return the variable as an int.

    Raises:
        ConfigError: If the value cannot be converted.
    """
    raw = os.getenv(key, str(default))
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer (value: {raw!r})") from exc


def get_paths(key: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    """Return the variable split on os.pathsep, empty entries dropped."""
    raw = os.getenv(key)
    if raw is None:
        return default
    return tuple(part for part in raw.split(os.pathsep) if part.strip())


def default_support_dir() -> Path:
    """Per-user application support directory for the current platform."""
    home = Path.home()
    if sys.platform == 'darwin':
        return home / 'Library' / 'Application Support' / APP_DIR_NAME
    xdg = os.getenv('XDG_DATA_HOME')
    base = Path(xdg) if xdg else home / '.local' / 'share'
    return base / APP_DIR_NAME.lower()


@dataclass(frozen=True)
class AppMenuConfig:
    """Resolved runtime settings."""

    support_dir: Path = field(default_factory=default_support_dir)
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    scan_roots: tuple[str, ...] = DEFAULT_SCAN_ROOTS
    log_level: str = 'WARNING'

    @property
    def items_path(self) -> Path:
        return self.support_dir / 'items.json'

    @property
    def settings_path(self) -> Path:
        return self.support_dir / 'settings.json'

    @property
    def debounce(self) -> float:
        """Debounce delay in seconds."""
        return self.debounce_ms / 1000.0

    @classmethod
    def from_env(cls, env_file: str | None = None) -> AppMenuConfig:
        """Build the configuration from the environment (and .env file).

        Raises:
            ConfigError: If a numeric setting is malformed or negative.
        """
        load_env(env_file)
        support = get_str('APPMENU_SUPPORT_DIR')
        debounce_ms = get_int('APPMENU_DEBOUNCE_MS', DEFAULT_DEBOUNCE_MS)
        if debounce_ms < 0:
            raise ConfigError(f"APPMENU_DEBOUNCE_MS must be >= 0 (value: {debounce_ms})")
        return cls(
            support_dir=Path(support).expanduser() if support else default_support_dir(),
            debounce_ms=debounce_ms,
            scan_roots=get_paths('APPMENU_SCAN_ROOTS', DEFAULT_SCAN_ROOTS),
            log_level=get_str('APPMENU_LOG_LEVEL', 'WARNING').upper(),
        )
