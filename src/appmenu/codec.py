# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Conversion between items and their JSON-compatible record form.

Each item is encoded as a tagged union: a "type" discriminant plus exactly
one populated payload field named after it::

    {"type": "app", "app": {"id": "...", "name": "Safari",
                            "location": "/Applications/Safari.app"}}
    {"type": "folder", "folder": {"id": "...", "name": "Browsers",
                                  "children": [...]}}

The persisted record is a JSON array of such objects.
"""

from __future__ import annotations

import json
import uuid
from typing import Any, Sequence

from .exceptions import CodecError
from .node import AppItem, FolderItem, LaunchItem
from .tree import iter_ids

APP = 'app'
FOLDER = 'folder'


def item_to_dict(item: LaunchItem) -> dict[str, Any]:
    """Encode a single item (recursively for folders)."""
    if isinstance(item, AppItem):
        return {
            'type': APP,
            APP: {
                'id': str(item.id),
                'name': item.name,
                'location': item.location,
            },
        }
    if isinstance(item, FolderItem):
        return {
            'type': FOLDER,
            FOLDER: {
                'id': str(item.id),
                'name': item.name,
                'children': items_to_list(item.children),
            },
        }
    raise TypeError(f"item must be AppItem or FolderItem, not {type(item).__name__}")


def items_to_list(items: Sequence[LaunchItem]) -> list[dict[str, Any]]:
    """Encode a sequence of items preserving order."""
    return [item_to_dict(item) for item in items]


def _payload(record: Any, key: str) -> dict[str, Any]:
    payload = record.get(key)
    if not isinstance(payload, dict):
        raise CodecError(f"'{key}' record without '{key}' payload")
    return payload


def _parse_id(payload: dict[str, Any]) -> uuid.UUID:
    try:
        return uuid.UUID(str(payload['id']))
    except (KeyError, ValueError) as exc:
        raise CodecError(f"invalid item id: {payload.get('id')!r}") from exc


def _parse_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise CodecError(f"field '{key}' must be a string, got {value!r}")
    return value


def item_from_dict(record: Any) -> LaunchItem:
    """Decode a single tagged record.

    Raises:
        CodecError: If the discriminant is unknown or a field is malformed.
    """
    if not isinstance(record, dict):
        raise CodecError(f"item record must be an object, not {type(record).__name__}")

    kind = record.get('type')
    if kind == APP:
        payload = _payload(record, APP)
        return AppItem(
            _parse_str(payload, 'name'),
            _parse_str(payload, 'location'),
            id=_parse_id(payload),
        )
    if kind == FOLDER:
        payload = _payload(record, FOLDER)
        children = payload.get('children', [])
        if not isinstance(children, list):
            raise CodecError("folder 'children' must be a list")
        return FolderItem(
            _parse_str(payload, 'name'),
            items_from_list(children),
            id=_parse_id(payload),
        )
    raise CodecError(f"unknown item type: {kind!r}")


def items_from_list(records: Any) -> tuple[LaunchItem, ...]:
    """Decode a list of tagged records into a tuple of items."""
    if not isinstance(records, list):
        raise CodecError(f"item list must be an array, not {type(records).__name__}")
    return tuple(item_from_dict(record) for record in records)


def dumps(items: Sequence[LaunchItem], indent: int | None = 2) -> str:
    """Serialize items to a JSON document."""
    return json.dumps(items_to_list(items), indent=indent, ensure_ascii=False)


def loads(text: str | bytes) -> tuple[LaunchItem, ...]:
    """Parse a JSON document produced by dumps().

    Raises:
        CodecError: If the text is not valid JSON, is nested too deeply,
            is not a valid item list, or uses an item id more than once.
    """
    try:
        data = json.loads(text)
    except RecursionError as exc:
        raise CodecError("JSON document nested too deeply") from exc
    except ValueError as exc:
        raise CodecError(f"invalid JSON: {exc}") from exc
    try:
        items = items_from_list(data)
        _check_unique_ids(items)
    except RecursionError as exc:
        raise CodecError("item tree nested too deeply") from exc
    return items


def _check_unique_ids(items: Sequence[LaunchItem]) -> None:
    seen: set[uuid.UUID] = set()
    for item_id in iter_ids(items):
        if item_id in seen:
            raise CodecError(f"duplicate item id: {item_id}")
        seen.add(item_id)
