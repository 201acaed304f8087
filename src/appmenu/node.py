# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""AppMenu item classes.

An item is either an AppItem (a leaf pointing at a launchable location) or a
FolderItem (an ordered tuple of child items). Items are immutable: a change
produces a new item, and unchanged subtrees are shared between snapshots.
"""

from __future__ import annotations

import os
import uuid
from abc import ABC, abstractmethod
from typing import Any, Iterable, Union


class LaunchItem(ABC):
    """Common base for AppItem and FolderItem.

    Attributes are fixed at construction time. Use with_name() (and
    FolderItem.with_children()) to derive modified copies.
    """

    __slots__ = ('id', 'name')

    kind: str = ''

    def __init__(self, name: str, id: uuid.UUID | None = None) -> None:
        object.__setattr__(self, 'id', id or uuid.uuid4())
        object.__setattr__(self, 'name', name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"'{type(self).__name__}' is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"'{type(self).__name__}' is immutable")

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_branch(self) -> bool:
        """True if this item is a folder."""
        return isinstance(self, FolderItem)

    @property
    def is_leaf(self) -> bool:
        """True if this item is an app."""
        return not isinstance(self, FolderItem)

    @abstractmethod
    def with_name(self, name: str) -> LaunchItem:
        """Return a copy of this item with a different name."""


class AppItem(LaunchItem):
    """A launchable application.

    Example:
        >>> app = AppItem('Safari', '/Applications/Safari.app')
        >>> app.is_leaf
        True
    """

    __slots__ = ('location',)

    kind = 'app'

    def __init__(self, name: str, location: str, id: uuid.UUID | None = None) -> None:
        super().__init__(name, id)
        object.__setattr__(self, 'location', os.fspath(location))

    def __repr__(self) -> str:
        return f"AppItem({self.name!r}, location={self.location!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AppItem):
            return NotImplemented
        return (self.id, self.name, self.location) == (other.id, other.name, other.location)

    __hash__ = LaunchItem.__hash__

    def with_name(self, name: str) -> AppItem:
        return AppItem(name, self.location, id=self.id)


class FolderItem(LaunchItem):
    """A folder holding an ordered sequence of items.

    Example:
        >>> folder = FolderItem('Browsers', [AppItem('Safari', '/Applications/Safari.app')])
        >>> [child.name for child in folder.children]
        ['Safari']
    """

    __slots__ = ('children',)

    kind = 'folder'

    def __init__(
        self,
        name: str,
        children: Iterable[LaunchItem] = (),
        id: uuid.UUID | None = None,
    ) -> None:
        super().__init__(name, id)
        object.__setattr__(self, 'children', tuple(children))

    def __repr__(self) -> str:
        return f"FolderItem({self.name!r}, children={len(self.children)})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FolderItem):
            return NotImplemented
        return (self.id, self.name, self.children) == (other.id, other.name, other.children)

    __hash__ = LaunchItem.__hash__

    def __len__(self) -> int:
        """Return the number of direct children."""
        return len(self.children)

    def __iter__(self):
        return iter(self.children)

    def with_name(self, name: str) -> FolderItem:
        return FolderItem(name, self.children, id=self.id)

    def with_children(self, children: Iterable[LaunchItem]) -> FolderItem:
        """Return a copy of this folder with a new child sequence."""
        return FolderItem(self.name, children, id=self.id)


Item = Union[AppItem, FolderItem]


def display_name_for(location: str) -> str:
    """Return the base name of location without its extension.

    Example:
        >>> display_name_for('/Applications/Safari.app')
        'Safari'
    """
    base = os.path.basename(os.path.normpath(os.fspath(location)))
    stem, _ext = os.path.splitext(base)
    return stem or base
