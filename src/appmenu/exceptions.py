# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""AppMenu exceptions.

Item lookups that miss and moves that would create a cycle are not errors:
store operations return False for them. The exceptions below are raised only
at the boundaries (codec, persistence, scanning, configuration).
"""

from __future__ import annotations


class AppMenuError(Exception):
    """Base exception for AppMenu errors."""

    pass


class CodecError(AppMenuError):
    """Raised when a persisted record cannot be decoded into items."""

    pass


class PersistenceError(AppMenuError, OSError):
    """Raised when the item tree cannot be written to its backing file."""

    pass


class ScanError(AppMenuError):
    """Raised when application directories cannot be enumerated."""

    pass


class ConfigError(AppMenuError):
    """Raised when an environment setting has an invalid value."""

    pass
