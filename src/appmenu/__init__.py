# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""AppMenu - Nested folders of launchable applications.

A small library that keeps an ordered hierarchy of apps and folders,
persists it atomically, and turns it into status bar and Dock menus.
"""

__version__ = "0.1.0"

from .codec import dumps, item_from_dict, item_to_dict, loads
from .config import AppMenuConfig
from .exceptions import (
    AppMenuError,
    CodecError,
    ConfigError,
    PersistenceError,
    ScanError,
)
from .launcher import AppLauncher
from .menu import MenuActionHandler, MenuEntry, build_menu, dock_menu, status_bar_menu
from .node import AppItem, FolderItem, Item, LaunchItem
from .persistence import PersistenceController, SettingsStore
from .scanner import AppCandidate, collect_candidates, scan_applications
from .store import AppStore, ScanResult, SeedState

__all__ = [
    # Core classes
    "AppStore",
    "AppItem",
    "FolderItem",
    "LaunchItem",
    "Item",
    "SeedState",
    "ScanResult",
    # Persistence
    "PersistenceController",
    "SettingsStore",
    "dumps",
    "loads",
    "item_to_dict",
    "item_from_dict",
    # Collaborators
    "AppCandidate",
    "AppLauncher",
    "AppMenuConfig",
    "MenuActionHandler",
    "MenuEntry",
    "build_menu",
    "dock_menu",
    "status_bar_menu",
    "collect_candidates",
    "scan_applications",
    # Exceptions
    "AppMenuError",
    "CodecError",
    "ConfigError",
    "PersistenceError",
    "ScanError",
]
