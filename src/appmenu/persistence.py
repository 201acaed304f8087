# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Durable storage for the item tree and the settings flags.

Both files are written atomically: the content goes to a temporary file in
the target directory, is flushed to disk, and then replaces the target with
os.replace(). A reader never observes a half-written record.

Example:
    >>> controller = PersistenceController('/tmp/appmenu/items.json')
    >>> controller.save(items)
    >>> controller.load() == tuple(items)
    True
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Sequence

from . import codec
from .exceptions import CodecError, PersistenceError
from .node import LaunchItem

logger = logging.getLogger(__name__)


DEFAULT_FILE_MODE = 0o644


def _fsync_directory(directory: Path) -> None:
    if os.name == 'nt':
        return
    try:
        dir_fd = os.open(directory, os.O_RDONLY)
    except OSError as exc:
        logger.debug("cannot open %s for fsync: %s", directory, exc)
        return
    try:
        os.fsync(dir_fd)
    except OSError as exc:
        logger.debug("cannot fsync %s: %s", directory, exc)
    finally:
        os.close(dir_fd)


def atomic_write_text(path: Path, text: str) -> None:
    """Write text to path through a temporary file and an atomic rename.

    The new file keeps the permission bits of the file it replaces, or
    gets DEFAULT_FILE_MODE when there was none.

    Raises:
        PersistenceError: If any step fails. The target file is left as it
            was and the temporary file is removed.
    """
    try:
        try:
            mode = stat.S_IMODE(os.stat(path).st_mode)
        except FileNotFoundError:
            mode = DEFAULT_FILE_MODE
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix='.tmp', dir=str(path.parent)
        )
    except OSError as exc:
        raise PersistenceError(f"cannot prepare {path}: {exc}") from exc

    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except OSError as exc:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise PersistenceError(f"cannot write {path}: {exc}") from exc
    _fsync_directory(path.parent)


class PersistenceController:
    """Saves and loads the whole item forest as one JSON record.

    Args:
        path: Target file. Ignored when in_memory is True.
        in_memory: If True, save() does nothing and load() returns None.
    """

    def __init__(self, path: str | os.PathLike | None = None, in_memory: bool = False) -> None:
        self.in_memory = in_memory or path is None
        self.path: Path | None = None if self.in_memory else Path(path)

    def __repr__(self) -> str:
        target = 'memory' if self.in_memory else str(self.path)
        return f"PersistenceController({target})"

    def save(self, items: Sequence[LaunchItem]) -> None:
        """Write items to the backing file.

        Raises:
            PersistenceError: On any encoding or write failure.
        """
        if self.path is None:
            return
        try:
            text = codec.dumps(items)
        except (RecursionError, TypeError, ValueError) as exc:
            raise PersistenceError(f"cannot encode items for {self.path}: {exc}") from exc
        atomic_write_text(self.path, text)
        logger.debug("saved %d root items to %s", len(items), self.path)

    def load(self) -> tuple[LaunchItem, ...] | None:
        """Read items from the backing file.

        Returns:
            The decoded forest, or None when there is no file or it cannot
            be read or parsed. Failures are logged, never raised.
        """
        if self.path is None or not self.path.exists():
            return None
        try:
            text = self.path.read_text(encoding='utf-8')
            items = codec.loads(text)
        except (OSError, UnicodeDecodeError, CodecError) as exc:
            logger.warning("cannot load %s: %s", self.path, exc)
            return None
        logger.debug("loaded %d root items from %s", len(items), self.path)
        return items


class SettingsStore:
    """A small persisted key/value dict for process-wide flags.

    Args:
        path: JSON file backing the settings. None keeps them in memory.
    """

    def __init__(self, path: str | os.PathLike | None = None) -> None:
        self.path: Path | None = Path(path) if path is not None else None
        self._values: dict[str, Any] = self._read()

    def __repr__(self) -> str:
        return f"SettingsStore({self._values!r})"

    def _read(self) -> dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as exc:
            logger.warning("cannot load settings %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("ignoring settings %s: not an object", self.path)
            return {}
        return data

    def get_bool(self, key: str, default: bool = False) -> bool:
        return bool(self._values.get(key, default))

    def set_bool(self, key: str, value: bool) -> None:
        """Set a flag and persist it.

        Raises:
            PersistenceError: If the settings file cannot be written.
        """
        self._values[key] = bool(value)
        if self.path is not None:
            atomic_write_text(self.path, json.dumps(self._values, indent=2))
