# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""AppStore - the owner of the launch item hierarchy.

This module provides the AppStore class, which keeps an ordered forest of
AppItem and FolderItem instances and exposes the operations that change it.

Key Features:
    - **Copy-on-write**: every mutation builds a new root tuple and swaps it
      in under a lock; readers use ``store.items`` without locking
    - **Cycle safety**: moves into the moved item or its descendants are
      rejected before anything is extracted
    - **Debounced persistence**: bursts of mutations produce one save and
      one change notification for the state they settle on
    - **First-run seeding**: an "Applications" folder is built from a
      background scan the first time the store is used

Missing ids and rejected moves are not errors: the operation does nothing
and returns False.

Example:
    Basic usage::

        store = AppStore.in_memory(items=())
        browsers = store.add_folder('Browsers')
        editors = store.add_folder('Editors')
        store.add_app('/Applications/Safari.app', parent_id=browsers.id)

        store.move(browsers.id, new_parent_id=editors.id)   # True
        store.move(editors.id, new_parent_id=browsers.id)   # False, cycle

    With persistence::

        store = AppStore.from_config(AppMenuConfig.from_env())
        store.subscribe('status_bar', lambda s: rebuild_menu(s.items))
        ...
        store.close()
"""

from __future__ import annotations

import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Iterator, Sequence

from .. import tree
from ..config import DEFAULT_SCAN_ROOTS, AppMenuConfig
from ..debounce import Debouncer
from ..exceptions import PersistenceError, ScanError
from ..node import AppItem, FolderItem, LaunchItem, display_name_for
from ..persistence import PersistenceController, SettingsStore
from ..scanner import AppCandidate, collect_candidates, normalize_location, sort_candidates
from ..subscription import SubscriptionMixin

logger = logging.getLogger(__name__)

Scanner = Callable[[Sequence[str]], Iterable[AppCandidate]]

APPLICATIONS_FOLDER = 'Applications'
SEED_FLAG_KEY = 'did_seed_apps'
DEFAULT_DEBOUNCE = 0.15


class SeedState(Enum):
    """First-run seeding progress."""

    NOT_SEEDED = 'not_seeded'
    SEEDING = 'seeding'
    SEEDED = 'seeded'


@dataclass
class ScanResult:
    """Outcome of an import scan.

    Attributes:
        candidates: Sorted candidates, empty on failure.
        error: Message to show the user when the scan failed, else None.
    """

    candidates: list[AppCandidate] = field(default_factory=list)
    error: str | None = None


def sample_data() -> tuple[LaunchItem, ...]:
    """Default tree used when nothing has been persisted yet."""
    return (FolderItem('Browsers'), FolderItem('Editors'))


class AppStore(SubscriptionMixin):
    """An ordered hierarchy of apps and folders with a mutation API.

    AppStore provides:
    - add_folder / add_app / rename / delete / move: tree mutations
    - refresh(): re-emit the change notification without a mutation
    - import_apps(): bulk add with deduplication
    - scan_for_import(): background scan for the import flow
    - subscribe(id, callback): change notifications

    Args:
        persistence: Adapter used to load the initial tree and save changes.
            Defaults to an in-memory adapter.
        settings: Storage for the one-shot seeding flag. Defaults to an
            in-memory SettingsStore.
        items: Initial tree. If None, loaded from persistence, falling back
            to sample_data().
        debounce: Delay in seconds before a burst of mutations is saved and
            notified. 0 saves and notifies synchronously.
        scanner: Callable returning application candidates for a list of
            roots. May raise ScanError.
        scan_roots: Directories handed to the scanner.
        seed: If False, first-run seeding is not attempted.
    """

    __slots__ = (
        '_items', '_lock', '_persistence', '_settings', '_debouncer',
        '_subscribers', '_executor', '_scanner', '_scan_roots',
        '_seed_state', '_seeded_event', '_closed',
    )

    def __init__(
        self,
        persistence: PersistenceController | None = None,
        settings: SettingsStore | None = None,
        items: Iterable[LaunchItem] | None = None,
        debounce: float = DEFAULT_DEBOUNCE,
        scanner: Scanner = collect_candidates,
        scan_roots: Sequence[str] = DEFAULT_SCAN_ROOTS,
        seed: bool = True,
    ) -> None:
        self._persistence = persistence or PersistenceController(in_memory=True)
        self._settings = settings or SettingsStore()
        self._lock = threading.RLock()
        self._subscribers = {}
        self._debouncer = Debouncer(debounce, self._settle)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='appmenu-scan')
        self._scanner = scanner
        self._scan_roots = tuple(scan_roots)
        self._seed_state = SeedState.NOT_SEEDED
        self._seeded_event = threading.Event()
        self._closed = False

        if items is not None:
            self._items = tuple(items)
        else:
            loaded = self._persistence.load()
            self._items = loaded if loaded is not None else sample_data()

        if seed:
            self._seed_applications_if_needed()
        else:
            self._seed_state = SeedState.SEEDED
            self._seeded_event.set()

    @classmethod
    def in_memory(cls, **kwargs) -> AppStore:
        """Store without durable backing; save is a no-op, load finds nothing."""
        kwargs.setdefault('seed', False)
        return cls(PersistenceController(in_memory=True), SettingsStore(), **kwargs)

    @classmethod
    def from_config(cls, config: AppMenuConfig, **kwargs) -> AppStore:
        """Store backed by the files named in config."""
        return cls(
            PersistenceController(config.items_path),
            SettingsStore(config.settings_path),
            debounce=config.debounce,
            scan_roots=config.scan_roots,
            **kwargs,
        )

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return f"AppStore({[item.name for item in self._items]})"

    def __len__(self) -> int:
        """Return the number of root items."""
        return len(self._items)

    def __iter__(self) -> Iterator[LaunchItem]:
        """Iterate over root items in order."""
        return iter(self._items)

    def __contains__(self, item_id: uuid.UUID) -> bool:
        """Check if an item id exists anywhere in the tree."""
        return tree.find_item(self._items, item_id) is not None

    def __enter__(self) -> AppStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def items(self) -> tuple[LaunchItem, ...]:
        """Current root snapshot. Never mutated after being published."""
        return self._items

    @property
    def persistence(self) -> PersistenceController:
        return self._persistence

    @property
    def seed_state(self) -> SeedState:
        return self._seed_state

    # ==================== Commit / Settle ====================

    def _commit(self, new_items: tuple[LaunchItem, ...]) -> None:
        """Publish new_items and schedule the debounced save/notify.

        Must be called with the lock held.
        """
        self._items = new_items
        self._debouncer.schedule()

    def _settle(self) -> None:
        """Save the current tree and notify subscribers."""
        snapshot = self._items
        try:
            self._persistence.save(snapshot)
        except PersistenceError as exc:
            logger.error("save failed, keeping in-memory tree: %s", exc)
        self._notify()

    def flush(self) -> bool:
        """Run a pending save/notify now.

        Returns:
            True if something was pending.
        """
        return self._debouncer.flush()

    def close(self) -> None:
        """Flush pending changes and stop background work.

        A scan still running is abandoned and its result is never applied.
        """
        with self._lock:
            self._closed = True
        self._debouncer.flush()
        self._executor.shutdown(wait=False, cancel_futures=True)

    # ==================== Mutations ====================

    def _insert(
        self,
        item: LaunchItem,
        parent_id: uuid.UUID | None,
        index: int | None = None,
    ) -> None:
        with self._lock:
            new_items, inserted = tree.insert_item(self._items, item, parent_id, index)
            if not inserted:
                logger.debug("parent %s not found, appending %r at root", parent_id, item)
                new_items, _ = tree.insert_item(self._items, item)
            self._commit(new_items)

    def add_folder(self, name: str, parent_id: uuid.UUID | None = None) -> FolderItem:
        """Append a new empty folder to parent_id (root if absent or unknown).

        Returns:
            The new FolderItem.
        """
        folder = FolderItem(name)
        self._insert(folder, parent_id)
        return folder

    def add_app(
        self,
        location: str,
        display_name: str | None = None,
        parent_id: uuid.UUID | None = None,
        index: int | None = None,
    ) -> AppItem:
        """Add an app under parent_id.

        Args:
            location: Filesystem path of the launchable target.
            display_name: Name to show. Defaults to the location's base name
                without extension.
            parent_id: Target folder. Root if None or unknown.
            index: Position among the target's children. Appended when
                None or outside 0..len(children).

        Returns:
            The new AppItem.
        """
        app = AppItem(display_name or display_name_for(location), location)
        self._insert(app, parent_id, index)
        return app

    def rename(self, item_id: uuid.UUID, new_name: str) -> bool:
        """Rename the item with item_id. Returns False if it does not exist."""
        with self._lock:
            new_items, renamed = tree.rename_item(self._items, item_id, new_name)
            if renamed:
                self._commit(new_items)
            return renamed

    def delete(self, item_id: uuid.UUID) -> bool:
        """Delete the item and its whole subtree. Returns False if not found."""
        with self._lock:
            new_items, removed = tree.delete_item(self._items, item_id)
            if removed is None:
                return False
            self._commit(new_items)
            return True

    def move(
        self,
        item_id: uuid.UUID,
        new_parent_id: uuid.UUID | None = None,
        index: int | None = None,
    ) -> bool:
        """Move an item (with its subtree) under new_parent_id at index.

        The index refers to the target's children after the item has been
        taken out of its current place.

        Returns:
            False, leaving the tree untouched, if the item is unknown, if the
            target is the item itself or one of its descendants, or if the
            target is not a folder.
        """
        with self._lock:
            new_items, moved = tree.move_item(self._items, item_id, new_parent_id, index)
            if not moved:
                logger.debug("move of %s under %s rejected", item_id, new_parent_id)
                return False
            self._commit(new_items)
            return True

    def refresh(self) -> None:
        """Notify subscribers without changing anything."""
        self._notify()

    def import_apps(
        self,
        candidates: Iterable[tuple[str, str]],
        parent_id: uuid.UUID | None = None,
    ) -> list[AppItem]:
        """Add (name, location) candidates to parent_id in one mutation.

        Candidates whose normalized location already exists as a direct app
        child of the target, or appears earlier in the same batch, are
        skipped.

        Returns:
            The AppItems actually added, in candidate order.
        """
        with self._lock:
            if parent_id is not None and tree.find_folder(self._items, parent_id) is None:
                parent_id = None
            seen = self.existing_app_locations(parent_id)
            added: list[AppItem] = []
            for name, location in candidates:
                norm = normalize_location(location)
                if norm in seen:
                    continue
                seen.add(norm)
                added.append(AppItem(name or display_name_for(location), location))
            if not added:
                return added

            new_items = self._items
            for app in added:
                new_items, _ = tree.insert_item(new_items, app, parent_id)
            self._commit(new_items)
            return added

    # ==================== Queries ====================

    def find(self, item_id: uuid.UUID) -> LaunchItem | None:
        """Return the item with item_id, or None."""
        return tree.find_item(self._items, item_id)

    def location_of(self, item_id: uuid.UUID) -> tuple[uuid.UUID | None, int] | None:
        """Return (parent_id, index) of item_id, parent_id None for root."""
        return tree.locate(self._items, item_id)

    def parent_of(self, item_id: uuid.UUID) -> FolderItem | None:
        """Return the folder containing item_id, None at root or if missing."""
        found = tree.locate(self._items, item_id)
        if found is None or found[0] is None:
            return None
        return tree.find_folder(self._items, found[0])

    def is_valid_move(self, item_id: uuid.UUID, target_parent_id: uuid.UUID | None) -> bool:
        """True if moving item_id under target_parent_id would keep the tree acyclic."""
        return tree.is_valid_move(self._items, item_id, target_parent_id)

    def walk(self) -> Iterator[tuple[str, LaunchItem]]:
        """Yield (path, item) pairs for the whole tree, depth first."""
        return tree.walk(self._items)

    def count(self) -> int:
        """Total number of items in the tree, folders included."""
        return tree.count_items(self._items)

    def root_folder_id(self, name: str) -> uuid.UUID | None:
        """Id of the first root folder called name, or None."""
        for item in self._items:
            if isinstance(item, FolderItem) and item.name == name:
                return item.id
        return None

    def preferred_target_folder_id(self, selection: uuid.UUID | None = None) -> uuid.UUID | None:
        """Folder that new apps should go to.

        The selected item when it is a folder, else the root "Applications"
        folder when present, else None (the root).
        """
        if selection is not None and tree.find_folder(self._items, selection) is not None:
            return selection
        return self.root_folder_id(APPLICATIONS_FOLDER)

    def existing_app_locations(self, parent_id: uuid.UUID | None = None) -> set[str]:
        """Normalized locations of the apps directly under parent_id."""
        if parent_id is None:
            children: Sequence[LaunchItem] = self._items
        else:
            folder = tree.find_folder(self._items, parent_id)
            children = folder.children if folder is not None else ()
        return {
            normalize_location(child.location)
            for child in children
            if isinstance(child, AppItem)
        }

    # ==================== Scanning ====================

    def _scan(self, roots: Sequence[str]) -> list[AppCandidate]:
        return sort_candidates(AppCandidate(*candidate) for candidate in self._scanner(roots))

    def _scan_for_import(self, roots: Sequence[str]) -> ScanResult:
        try:
            return ScanResult(self._scan(roots))
        except (ScanError, OSError) as exc:
            logger.warning("import scan failed: %s", exc)
            return ScanResult(error=str(exc))

    def scan_for_import(self, roots: Sequence[str] | None = None) -> Future:
        """Scan for importable applications on the background worker.

        Returns:
            Future resolving to a ScanResult. Feed the chosen candidates to
            import_apps().
        """
        return self._executor.submit(self._scan_for_import, tuple(roots or self._scan_roots))

    # ==================== First-run seeding ====================

    def _seed_applications_if_needed(self) -> None:
        if self._settings.get_bool(SEED_FLAG_KEY):
            self._seed_state = SeedState.SEEDED
            self._seeded_event.set()
            return

        has_applications = self.root_folder_id(APPLICATIONS_FOLDER) is not None
        if has_applications or tree.contains_any_apps(self._items):
            self._mark_seeded()
            self._seeded_event.set()
            return

        self._seed_state = SeedState.SEEDING
        future = self._executor.submit(self._scan, self._scan_roots)
        future.add_done_callback(self._finish_seeding)

    def _finish_seeding(self, future: Future) -> None:
        try:
            if future.cancelled():
                logger.debug("first-run scan cancelled")
                return
            try:
                candidates = future.result()
            except (ScanError, OSError) as exc:
                logger.warning("first-run scan failed: %s", exc)
                candidates = []
            self._apply_seed(candidates)
        finally:
            self._seeded_event.set()

    def _apply_seed(self, candidates: list[AppCandidate]) -> None:
        with self._lock:
            if self._closed:
                logger.debug("store closed, discarding first-run scan")
                return
            if candidates:
                folder = FolderItem(
                    APPLICATIONS_FOLDER,
                    [AppItem(c.name, c.location) for c in sort_candidates(candidates)],
                )
                new_items, _ = tree.insert_item(self._items, folder, index=0)
                self._commit(new_items)
                logger.info("seeded %d applications", len(candidates))
            self._mark_seeded()

    def _mark_seeded(self) -> None:
        try:
            self._settings.set_bool(SEED_FLAG_KEY, True)
        except PersistenceError as exc:
            logger.error("cannot record seeding flag: %s", exc)
        self._seed_state = SeedState.SEEDED

    def wait_seeded(self, timeout: float | None = None) -> bool:
        """Block until first-run seeding has finished.

        Returns:
            True if seeding is done, False on timeout.
        """
        return self._seeded_event.wait(timeout)
