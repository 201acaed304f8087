# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""AppStore package - the owned, observable launch item hierarchy.

The package is organized into:
- core: AppStore with the mutation API, debounced persistence, change
  notification and first-run seeding

Example:
    >>> from appmenu import AppStore
    >>> store = AppStore.in_memory(items=())
    >>> folder = store.add_folder('Browsers')
    >>> store.add_app('/Applications/Safari.app', parent_id=folder.id).name
    'Safari'
"""

from .core import (
    APPLICATIONS_FOLDER,
    SEED_FLAG_KEY,
    AppStore,
    ScanResult,
    SeedState,
    sample_data,
)

__all__ = [
    "AppStore",
    "ScanResult",
    "SeedState",
    "sample_data",
    "APPLICATIONS_FOLDER",
    "SEED_FLAG_KEY",
]
