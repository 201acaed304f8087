# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Pure functions over an item forest.

A forest is a tuple of items (AppItem or FolderItem). None of the functions
here mutate their input: functions that change the structure return a new
root tuple, rebuilding only the folders on the path to the change and
sharing every other subtree with the input.

Lookups that miss are not errors. Finders return None, structural helpers
return the input unchanged together with a "nothing happened" marker.

Example:
    >>> safari = AppItem('Safari', '/Applications/Safari.app')
    >>> browsers = FolderItem('Browsers')
    >>> items, inserted = insert_item((browsers,), safari, parent_id=browsers.id)
    >>> find_item(items, safari.id).name
    'Safari'
"""

from __future__ import annotations

import uuid
from typing import Callable, Iterator, Sequence

from .node import AppItem, FolderItem, LaunchItem

Forest = tuple[LaunchItem, ...]


# ==================== Lookup ====================

def find_item(items: Sequence[LaunchItem], item_id: uuid.UUID) -> LaunchItem | None:
    """Return the item with item_id anywhere in the forest, or None."""
    for item in items:
        if item.id == item_id:
            return item
        if isinstance(item, FolderItem):
            found = find_item(item.children, item_id)
            if found is not None:
                return found
    return None


def find_folder(items: Sequence[LaunchItem], folder_id: uuid.UUID) -> FolderItem | None:
    """Return the folder with folder_id, or None if missing or not a folder."""
    item = find_item(items, folder_id)
    return item if isinstance(item, FolderItem) else None


def locate(
    items: Sequence[LaunchItem],
    item_id: uuid.UUID,
    parent_id: uuid.UUID | None = None,
) -> tuple[uuid.UUID | None, int] | None:
    """Return (parent_id, index) for item_id, parent_id None meaning root.

    Args:
        items: Sequence to search.
        item_id: Id of the item to locate.
        parent_id: Id of the folder owning items (internal use).

    Returns:
        Tuple of parent id and position, or None if not found.
    """
    for idx, item in enumerate(items):
        if item.id == item_id:
            return parent_id, idx
        if isinstance(item, FolderItem):
            found = locate(item.children, item_id, item.id)
            if found is not None:
                return found
    return None


def subtree_contains(items: Sequence[LaunchItem], item_id: uuid.UUID) -> bool:
    """True if item_id appears in items or any of their descendants."""
    return find_item(items, item_id) is not None


def is_ancestor(
    items: Sequence[LaunchItem],
    ancestor_id: uuid.UUID,
    descendant_id: uuid.UUID,
) -> bool:
    """True if descendant_id lives strictly inside the subtree of ancestor_id."""
    ancestor = find_item(items, ancestor_id)
    if not isinstance(ancestor, FolderItem):
        return False
    return subtree_contains(ancestor.children, descendant_id)


def is_valid_move(
    items: Sequence[LaunchItem],
    item_id: uuid.UUID,
    target_parent_id: uuid.UUID | None,
) -> bool:
    """True if item_id may be reparented under target_parent_id.

    Moving to the root is always allowed. Moving an item into itself or into
    one of its descendants is not.
    """
    if target_parent_id is None:
        return True
    if target_parent_id == item_id:
        return False
    return not is_ancestor(items, item_id, target_parent_id)


def contains_any_apps(items: Sequence[LaunchItem]) -> bool:
    """True if at least one AppItem exists anywhere in the forest."""
    for item in items:
        if isinstance(item, AppItem):
            return True
        if isinstance(item, FolderItem) and contains_any_apps(item.children):
            return True
    return False


def count_items(items: Sequence[LaunchItem]) -> int:
    """Return the total number of items, folders included."""
    total = 0
    for item in items:
        total += 1
        if isinstance(item, FolderItem):
            total += count_items(item.children)
    return total


def iter_ids(items: Sequence[LaunchItem]) -> Iterator[uuid.UUID]:
    """Yield every item id in depth-first order."""
    for item in items:
        yield item.id
        if isinstance(item, FolderItem):
            yield from iter_ids(item.children)


def walk(
    items: Sequence[LaunchItem],
    _prefix: str = '',
) -> Iterator[tuple[str, LaunchItem]]:
    """Yield (path, item) pairs depth-first, paths joined with '/'.

    Example:
        >>> for path, item in walk(store.items):
        ...     print(path)
        Browsers
        Browsers/Safari
    """
    for item in items:
        path = f"{_prefix}/{item.name}" if _prefix else item.name
        yield path, item
        if isinstance(item, FolderItem):
            yield from walk(item.children, path)


# ==================== Structural changes ====================

def _insert_at(
    children: Sequence[LaunchItem],
    item: LaunchItem,
    index: int | None,
) -> Forest:
    """Insert item at index when 0 <= index <= len(children), else append."""
    out = list(children)
    if index is not None and 0 <= index <= len(out):
        out.insert(index, item)
    else:
        out.append(item)
    return tuple(out)


def insert_item(
    items: Sequence[LaunchItem],
    item: LaunchItem,
    parent_id: uuid.UUID | None = None,
    index: int | None = None,
) -> tuple[Forest, bool]:
    """Insert item under parent_id (root when None).

    Args:
        items: The forest.
        item: Item to insert.
        parent_id: Target folder id, or None for the root.
        index: Position among the target's children; appended when None
            or out of range.

    Returns:
        Tuple of (new_forest, inserted). inserted is False when parent_id
        does not name a folder; the forest is then returned unchanged.
    """
    if parent_id is None:
        return _insert_at(items, item, index), True

    out: list[LaunchItem] = []
    inserted = False
    for it in items:
        if not inserted and isinstance(it, FolderItem):
            if it.id == parent_id:
                it = it.with_children(_insert_at(it.children, item, index))
                inserted = True
            else:
                children, inserted = insert_item(it.children, item, parent_id, index)
                if inserted:
                    it = it.with_children(children)
        out.append(it)
    if not inserted:
        return tuple(items), False
    return tuple(out), True


def extract_item(
    items: Sequence[LaunchItem],
    item_id: uuid.UUID,
) -> tuple[Forest, LaunchItem | None]:
    """Remove item_id (with its subtree) and return it.

    Returns:
        Tuple of (new_forest, extracted_item). extracted_item is None when
        the id is unknown; the forest is then returned unchanged.
    """
    for idx, it in enumerate(items):
        if it.id == item_id:
            return tuple(items[:idx]) + tuple(items[idx + 1:]), it
        if isinstance(it, FolderItem):
            children, extracted = extract_item(it.children, item_id)
            if extracted is not None:
                out = list(items)
                out[idx] = it.with_children(children)
                return tuple(out), extracted
    return tuple(items), None


def delete_item(
    items: Sequence[LaunchItem],
    item_id: uuid.UUID,
) -> tuple[Forest, LaunchItem | None]:
    """Delete item_id and its entire subtree.

    Returns:
        Tuple of (new_forest, removed_item), removed_item None if not found.
    """
    return extract_item(items, item_id)


def replace_item(
    items: Sequence[LaunchItem],
    item_id: uuid.UUID,
    transform: Callable[[LaunchItem], LaunchItem],
) -> tuple[Forest, bool]:
    """Replace item_id by transform(item), keeping its position.

    Returns:
        Tuple of (new_forest, replaced).
    """
    for idx, it in enumerate(items):
        if it.id == item_id:
            out = list(items)
            out[idx] = transform(it)
            return tuple(out), True
        if isinstance(it, FolderItem):
            children, replaced = replace_item(it.children, item_id, transform)
            if replaced:
                out = list(items)
                out[idx] = it.with_children(children)
                return tuple(out), True
    return tuple(items), False


def rename_item(
    items: Sequence[LaunchItem],
    item_id: uuid.UUID,
    new_name: str,
) -> tuple[Forest, bool]:
    """Rename item_id in place. Returns (new_forest, renamed)."""
    return replace_item(items, item_id, lambda it: it.with_name(new_name))


def move_item(
    items: Sequence[LaunchItem],
    item_id: uuid.UUID,
    new_parent_id: uuid.UUID | None = None,
    index: int | None = None,
) -> tuple[Forest, bool]:
    """Move item_id under new_parent_id at index.

    The cycle check runs against the input forest before anything is
    extracted. The move is rejected when the item is unknown, when the
    target is the item itself or one of its descendants, and when the
    target is not an existing folder.

    Returns:
        Tuple of (new_forest, moved). When moved is False the input is
        returned unchanged.
    """
    current = tuple(items)
    if find_item(current, item_id) is None:
        return current, False
    if not is_valid_move(current, item_id, new_parent_id):
        return current, False
    if new_parent_id is not None and find_folder(current, new_parent_id) is None:
        return current, False

    remaining, extracted = extract_item(current, item_id)
    if extracted is None:
        return current, False
    result, inserted = insert_item(remaining, extracted, new_parent_id, index)
    if not inserted:
        return current, False
    return result, True
