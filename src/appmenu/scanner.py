# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Discovery of installed applications.

Application bundles are directories ending in ``.app``. Hidden entries are
skipped and the scanner never descends into a bundle, so helper apps nested
inside other apps are not reported.
"""

from __future__ import annotations

import logging
import os
import plistlib
from typing import Iterable, NamedTuple

from .config import DEFAULT_SCAN_ROOTS
from .exceptions import ScanError
from .node import display_name_for

logger = logging.getLogger(__name__)

BUNDLE_SUFFIX = '.app'


class AppCandidate(NamedTuple):
    """An application found on disk, not yet part of the tree."""

    name: str
    location: str


def normalize_location(location: str) -> str:
    """Return an absolute, normalized form of location for comparisons."""
    return os.path.normpath(os.path.abspath(os.path.expanduser(os.fspath(location))))


def bundle_display_name(location: str) -> str:
    """Name of the app at location.

    Uses CFBundleDisplayName, then CFBundleName from the bundle's
    Info.plist, and falls back to the base name without extension.
    """
    info = os.path.join(location, 'Contents', 'Info.plist')
    try:
        with open(info, 'rb') as fh:
            plist = plistlib.load(fh)
    except (OSError, plistlib.InvalidFileException, ValueError):
        return display_name_for(location)
    if isinstance(plist, dict):
        for key in ('CFBundleDisplayName', 'CFBundleName'):
            name = plist.get(key)
            if isinstance(name, str) and name.strip():
                return name
    return display_name_for(location)


def _iter_bundles(root: str, errors: list[OSError]) -> Iterable[str]:
    for dirpath, dirnames, _filenames in os.walk(root, onerror=errors.append):
        keep = []
        for dirname in dirnames:
            if dirname.startswith('.'):
                continue
            if dirname.lower().endswith(BUNDLE_SUFFIX):
                yield os.path.join(dirpath, dirname)
                continue
            keep.append(dirname)
        dirnames[:] = keep


def scan_applications(
    roots: Iterable[str] = DEFAULT_SCAN_ROOTS,
    errors: list[OSError] | None = None,
) -> set[AppCandidate]:
    """Find application bundles under roots.

    Best effort: unreachable roots and unreadable directories are skipped
    and reported through errors (when given) and the log. Never raises.

    Args:
        roots: Directories to search recursively.
        errors: Optional list receiving the OSErrors met while walking.

    Returns:
        Candidates deduplicated by normalized location.
    """
    found: dict[str, AppCandidate] = {}
    walk_errors: list[OSError] = [] if errors is None else errors
    for root in roots:
        if not os.path.isdir(root):
            logger.debug("skipping unreachable scan root %s", root)
            continue
        try:
            for bundle in _iter_bundles(root, walk_errors):
                location = normalize_location(bundle)
                if location not in found:
                    found[location] = AppCandidate(bundle_display_name(location), location)
        except OSError as exc:
            walk_errors.append(exc)
    for exc in walk_errors:
        logger.info("scan error: %s", exc)
    return set(found.values())


def sort_candidates(candidates: Iterable[AppCandidate]) -> list[AppCandidate]:
    """Sort candidates case-insensitively by name, then by location."""
    return sorted(candidates, key=lambda c: (c.name.casefold(), c.location))


def collect_candidates(roots: Iterable[str] = DEFAULT_SCAN_ROOTS) -> list[AppCandidate]:
    """Scan roots for the import flow.

    Returns:
        Sorted candidates.

    Raises:
        ScanError: If none of the roots is a readable directory.
    """
    roots = list(roots)
    reachable = [root for root in roots if os.path.isdir(root) and os.access(root, os.R_OK)]
    if not reachable:
        raise ScanError(f"no readable application directory among: {', '.join(roots) or '(none)'}")
    return sort_candidates(scan_applications(reachable))
