# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Command line front end for the launch item store.

Items are referenced by full id, by a unique id prefix, or by their
'/'-joined name path (e.g. 'Browsers/Safari').

Example:
    appmenu add-folder Browsers
    appmenu add-app /Applications/Safari.app --parent Browsers
    appmenu move Browsers --parent Editors
    appmenu show --ids
"""

from __future__ import annotations

import argparse
import sys
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from .config import AppMenuConfig
from .exceptions import ConfigError
from .launcher import AppLauncher
from .log import setup_logging
from .menu import MenuActionHandler, dock_menu, render_text, status_bar_menu
from .node import AppItem, FolderItem, LaunchItem
from .store import AppStore

SEED_TIMEOUT = 30.0


class ItemReferenceError(LookupError):
    """Raised when a command line item reference matches nothing."""


def resolve_ref(store: AppStore, ref: str) -> LaunchItem:
    """Find the item named by ref.

    Raises:
        ItemReferenceError: If ref matches no item or several items.
    """
    try:
        item = store.find(uuid.UUID(ref))
    except ValueError:
        item = None
    if item is not None:
        return item

    by_prefix = [it for _path, it in store.walk() if str(it.id).startswith(ref.lower())]
    by_path = [it for path, it in store.walk() if path == ref]
    matches = by_path or by_prefix
    if not matches:
        raise ItemReferenceError(f"no item matches {ref!r}")
    if len(matches) > 1:
        raise ItemReferenceError(f"{ref!r} is ambiguous ({len(matches)} items)")
    return matches[0]


def _parent_id(store: AppStore, ref: str | None) -> uuid.UUID | None:
    if ref is None:
        return None
    item = resolve_ref(store, ref)
    if not isinstance(item, FolderItem):
        raise ItemReferenceError(f"{ref!r} is not a folder")
    return item.id


def format_tree(items: Sequence[LaunchItem], show_ids: bool = False, _level: int = 0) -> str:
    """Indented outline of items, folders marked with a trailing '/'."""
    lines: list[str] = []
    for item in items:
        pad = '  ' * _level
        suffix = f"  [{item.id}]" if show_ids else ''
        if isinstance(item, FolderItem):
            lines.append(f"{pad}{item.name}/{suffix}")
            sub = format_tree(item.children, show_ids, _level + 1)
            if sub:
                lines.append(sub)
        else:
            lines.append(f"{pad}{item.name} -> {item.location}{suffix}")
    return '\n'.join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='appmenu',
        description='Organize launchable applications into nested menu folders',
    )
    parser.add_argument('--support-dir', help='Directory holding items.json (overrides APPMENU_SUPPORT_DIR)')
    parser.add_argument('--env-file', help='Load settings from this .env file')
    parser.add_argument('--no-seed', action='store_true',
                        help='Do not scan for applications on first run')
    sub = parser.add_subparsers(dest='command', required=True)

    show = sub.add_parser('show', help='Print the item tree')
    show.add_argument('--ids', action='store_true', help='Show item ids')
    show.add_argument('--menu', choices=('status', 'dock'), help='Print a menu rendition instead')

    add_folder = sub.add_parser('add-folder', help='Add a folder')
    add_folder.add_argument('name')
    add_folder.add_argument('--parent', help='Parent folder reference')

    add_app = sub.add_parser('add-app', help='Add an application')
    add_app.add_argument('location')
    add_app.add_argument('--name', help='Display name (default: base name)')
    add_app.add_argument('--parent', help='Parent folder reference')
    add_app.add_argument('--index', type=int, help='Position among the siblings')

    rename = sub.add_parser('rename', help='Rename an item')
    rename.add_argument('ref')
    rename.add_argument('name')

    delete = sub.add_parser('delete', help='Delete an item and its contents')
    delete.add_argument('ref')

    move = sub.add_parser('move', help='Move an item to another folder')
    move.add_argument('ref')
    move.add_argument('--parent', help='Target folder reference (default: root)')
    move.add_argument('--index', type=int, help='Position among the new siblings')

    imp = sub.add_parser('import', help='Import installed applications')
    imp.add_argument('--parent', help='Target folder (default: "Applications" folder or root)')
    imp.add_argument('--filter', default='', help='Only import names or paths containing this text')
    imp.add_argument('--roots', nargs='+', help='Directories to scan')

    launch = sub.add_parser('launch', help='Launch an application')
    launch.add_argument('ref')

    sub.add_parser('refresh', help='Print the status bar menu after a refresh')
    return parser


def _run(args: argparse.Namespace, store: AppStore) -> int:
    out = sys.stdout

    if args.command == 'show':
        if args.menu:
            handler = MenuActionHandler(store, AppLauncher())
            builder = dock_menu if args.menu == 'dock' else status_bar_menu
            print(render_text(builder(store.items, handler)), file=out)
        else:
            print(format_tree(store.items, show_ids=args.ids), file=out)
        return 0

    if args.command == 'add-folder':
        folder = store.add_folder(args.name, _parent_id(store, args.parent))
        print(folder.id, file=out)
        return 0

    if args.command == 'add-app':
        location = str(Path(args.location).expanduser())
        app = store.add_app(location, args.name, _parent_id(store, args.parent), args.index)
        print(app.id, file=out)
        return 0

    if args.command == 'rename':
        return 0 if store.rename(resolve_ref(store, args.ref).id, args.name) else 1

    if args.command == 'delete':
        return 0 if store.delete(resolve_ref(store, args.ref).id) else 1

    if args.command == 'move':
        item = resolve_ref(store, args.ref)
        if not store.move(item.id, _parent_id(store, args.parent), args.index):
            print(f"cannot move {item.name!r} there", file=sys.stderr)
            return 1
        return 0

    if args.command == 'import':
        parent_id = _parent_id(store, args.parent) if args.parent else store.preferred_target_folder_id()
        result = store.scan_for_import(args.roots).result()
        if result.error:
            print(f"scan failed: {result.error}", file=sys.stderr)
            return 1
        needle = args.filter.strip().casefold()
        chosen = [
            c for c in result.candidates
            if not needle or needle in c.name.casefold() or needle in Path(c.location).name.casefold()
        ]
        added = store.import_apps(chosen, parent_id)
        print(f"imported {len(added)} of {len(chosen)} applications", file=out)
        return 0

    if args.command == 'launch':
        item = resolve_ref(store, args.ref)
        if not isinstance(item, AppItem):
            print(f"{args.ref!r} is not an application", file=sys.stderr)
            return 1
        AppLauncher().launch(item.location)
        return 0

    if args.command == 'refresh':
        store.refresh()
        handler = MenuActionHandler(store, AppLauncher())
        print(render_text(status_bar_menu(store.items, handler)), file=out)
        return 0

    raise ValueError(f"unknown command {args.command!r}")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``appmenu`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = AppMenuConfig.from_env(args.env_file)
    except ConfigError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 2
    if args.support_dir:
        config = replace(config, support_dir=Path(args.support_dir).expanduser())
    setup_logging(config.log_level)

    with AppStore.from_config(config, seed=not args.no_seed) as store:
        store.wait_seeded(SEED_TIMEOUT)
        try:
            return _run(args, store)
        except ItemReferenceError as exc:
            print(str(exc), file=sys.stderr)
            return 1


if __name__ == '__main__':
    sys.exit(main())
