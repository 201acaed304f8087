# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Fire-and-forget application launching through the OS opener."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from typing import Sequence

logger = logging.getLogger(__name__)


def default_opener() -> tuple[str, ...]:
    """Command that opens a path with its default handler on this platform."""
    if sys.platform == 'darwin':
        return ('open',)
    if sys.platform.startswith('win'):
        return ('cmd', '/c', 'start', '')
    return ('xdg-open',)


class AppLauncher:
    """Launches locations without waiting for or reporting the outcome.

    Args:
        opener: Command prefix; the location is appended as last argument.
    """

    def __init__(self, opener: Sequence[str] | None = None) -> None:
        self.opener = tuple(opener) if opener is not None else default_opener()

    def __repr__(self) -> str:
        return f"AppLauncher({' '.join(self.opener)!r})"

    def launch(self, location: str) -> None:
        """Ask the OS to open location. Failures are logged, never raised."""
        command = [*self.opener, os.fspath(location)]
        try:
            subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            logger.warning("cannot launch %s: %s", location, exc)
            return
        logger.info("launched %s", location)
