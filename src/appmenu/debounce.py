# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Trailing-edge debouncer built on threading.Timer."""

from __future__ import annotations

import threading
from typing import Any, Callable


class Debouncer:
    """Run callback once, delay seconds after the last schedule() call.

    Every schedule() restarts the timer; only the settle point fires. The
    callback takes no arguments and is expected to read the latest state
    itself, so there is never a queue of pending payloads. Callback runs are
    serialized: a flush() racing with a timer never runs them concurrently.

    A delay of 0 runs the callback synchronously inside schedule().

    Example:
        >>> debouncer = Debouncer(0.15, store_snapshot_writer)
        >>> debouncer.schedule(); debouncer.schedule()  # one write
    """

    def __init__(self, delay: float, callback: Callable[[], Any]) -> None:
        self.delay = delay
        self.callback = callback
        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._token: object | None = None

    def __repr__(self) -> str:
        return f"Debouncer(delay={self.delay!r}, pending={self.pending})"

    @property
    def pending(self) -> bool:
        """True if a callback run is scheduled but has not started."""
        return self._token is not None

    def schedule(self) -> None:
        """Schedule (or reschedule) the callback."""
        if self.delay <= 0:
            self.cancel()
            self._run()
            return
        token = object()
        timer = threading.Timer(self.delay, self._fire, args=(token,))
        timer.daemon = True
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = timer
            self._token = token
        timer.start()

    def _fire(self, token: object) -> None:
        with self._lock:
            if token is not self._token:
                return
            self._timer = None
            self._token = None
        self._run()

    def _run(self) -> None:
        with self._run_lock:
            self.callback()

    def flush(self) -> bool:
        """Run a pending callback now.

        Returns:
            True if a callback was pending and has been run.
        """
        with self._lock:
            if self._token is None:
                return False
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._token = None
        self._run()
        return True

    def cancel(self) -> None:
        """Drop a pending callback without running it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._token = None
