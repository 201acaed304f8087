# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Platform-neutral menu building from an item snapshot.

build_menu() mirrors the folder nesting of a snapshot into MenuEntry
submenus and appends the optional utility entries. A platform layer (or the
command line) turns the entries into real menus and calls activate() when
one is chosen.

Example:
    >>> handler = MenuActionHandler(store, AppLauncher())
    >>> entries = status_bar_menu(store.items, handler)
    >>> print(render_text(entries))
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol, Sequence

from .node import AppItem, FolderItem, LaunchItem

logger = logging.getLogger(__name__)

SECTION_HEADER_TITLE = 'Applications'


class ActionHandler(Protocol):
    """Actions a menu can trigger."""

    def launch(self, app: AppItem) -> None: ...

    def open_settings(self) -> None: ...

    def refresh_menus(self) -> None: ...

    def quit(self) -> None: ...


class MenuEntry:
    """A single menu row: an action, a submenu, a header or a separator.

    Attributes:
        title: Text shown for the entry.
        action: Name of the handler method to call, or None.
        payload: Argument passed to the action (the AppItem for launches).
        submenu: Child entries for folders, else None.
        key_equivalent: Keyboard shortcut hint.
        enabled: False for headers.
        is_separator: True for separator rows.
    """

    __slots__ = (
        'title', 'action', 'payload', 'submenu', 'key_equivalent',
        'enabled', 'is_separator', 'handler',
    )

    def __init__(
        self,
        title: str = '',
        action: str | None = None,
        payload: Any = None,
        submenu: list[MenuEntry] | None = None,
        key_equivalent: str = '',
        enabled: bool = True,
        is_separator: bool = False,
        handler: ActionHandler | None = None,
    ) -> None:
        self.title = title
        self.action = action
        self.payload = payload
        self.submenu = submenu
        self.key_equivalent = key_equivalent
        self.enabled = enabled
        self.is_separator = is_separator
        self.handler = handler

    def __repr__(self) -> str:
        if self.is_separator:
            return "MenuEntry(---)"
        if self.submenu is not None:
            return f"MenuEntry({self.title!r}, submenu={len(self.submenu)})"
        return f"MenuEntry({self.title!r}, action={self.action!r})"

    @classmethod
    def separator(cls) -> MenuEntry:
        return cls(is_separator=True, enabled=False)

    def activate(self) -> bool:
        """Invoke the bound action.

        Returns:
            False if the entry has no action, handler or is disabled.
        """
        if not self.enabled or self.action is None or self.handler is None:
            return False
        method: Callable[..., Any] = getattr(self.handler, self.action)
        if self.payload is not None:
            method(self.payload)
        else:
            method()
        return True


def _append(item: LaunchItem, menu: list[MenuEntry], handler: ActionHandler) -> None:
    if isinstance(item, AppItem):
        menu.append(MenuEntry(item.name, action='launch', payload=item, handler=handler))
    elif isinstance(item, FolderItem):
        submenu: list[MenuEntry] = []
        for child in item.children:
            _append(child, submenu, handler)
        menu.append(MenuEntry(item.name, submenu=submenu))


def build_menu(
    items: Sequence[LaunchItem],
    handler: ActionHandler,
    include_root_section_headers: bool = False,
    include_utilities: bool = True,
    include_settings: bool = True,
    include_refresh: bool = True,
    include_quit: bool = True,
) -> list[MenuEntry]:
    """Build the entries for a snapshot.

    Args:
        items: Root snapshot (store.items).
        handler: Receiver of the entry actions.
        include_root_section_headers: Prefix a disabled header and a separator.
        include_utilities: Append the utility block (settings/refresh/quit).
        include_settings: Include "Open Settings…" in the utility block.
        include_refresh: Include "Refresh" in the utility block.
        include_quit: Include "Quit" in the utility block.

    Returns:
        Top-level entries; folders carry their children in submenu.
    """
    menu: list[MenuEntry] = []

    if include_root_section_headers and items:
        menu.append(MenuEntry(SECTION_HEADER_TITLE, enabled=False))
        menu.append(MenuEntry.separator())

    for item in items:
        _append(item, menu, handler)

    if include_utilities:
        if menu:
            menu.append(MenuEntry.separator())
        if include_settings:
            menu.append(MenuEntry('Open Settings…', action='open_settings',
                                  key_equivalent=',', handler=handler))
        if include_refresh:
            menu.append(MenuEntry('Refresh', action='refresh_menus',
                                  key_equivalent='r', handler=handler))
        if include_quit:
            menu.append(MenuEntry('Quit', action='quit', key_equivalent='q', handler=handler))
    return menu


def status_bar_menu(items: Sequence[LaunchItem], handler: ActionHandler) -> list[MenuEntry]:
    """Entries for the status bar menu: everything, utilities included."""
    return build_menu(items, handler)


def dock_menu(items: Sequence[LaunchItem], handler: ActionHandler) -> list[MenuEntry]:
    """Entries for the Dock menu, which has its own quit and needs no refresh."""
    return build_menu(items, handler, include_refresh=False, include_quit=False)


def render_text(entries: Sequence[MenuEntry], indent: str = '  ', _level: int = 0) -> str:
    """Render entries as an indented outline, one entry per line."""
    lines: list[str] = []
    pad = indent * _level
    for entry in entries:
        if entry.is_separator:
            lines.append(f"{pad}---")
        elif entry.submenu is not None:
            lines.append(f"{pad}{entry.title}/")
            sub = render_text(entry.submenu, indent, _level + 1)
            if sub:
                lines.append(sub)
        else:
            lines.append(f"{pad}{entry.title}")
    return '\n'.join(lines)


class MenuActionHandler:
    """Default handler wiring menu actions to a store and a launcher.

    Args:
        store: Store whose refresh() is called by "Refresh".
        launcher: Object with a launch(location) method.
        on_open_settings: Called by "Open Settings…".
        on_quit: Called by "Quit".
    """

    def __init__(
        self,
        store: Any,
        launcher: Any,
        on_open_settings: Callable[[], Any] | None = None,
        on_quit: Callable[[], Any] | None = None,
    ) -> None:
        self.store = store
        self.launcher = launcher
        self.on_open_settings = on_open_settings
        self.on_quit = on_quit

    def launch(self, app: AppItem) -> None:
        self.launcher.launch(app.location)

    def open_settings(self) -> None:
        if self.on_open_settings is None:
            logger.debug("no settings surface registered")
            return
        self.on_open_settings()

    def refresh_menus(self) -> None:
        self.store.refresh()

    def quit(self) -> None:
        if self.on_quit is not None:
            self.on_quit()
