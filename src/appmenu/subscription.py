# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Change notification for store observers.

Subscribers are plain callables registered under an id. The store holds no
assumptions about who listens: zero subscribers is a valid state, and a
subscriber that raises is logged without stopping the others.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

SubscriberCallback = Callable[..., Any]


class SubscriptionMixin:
    """Adds subscribe()/unsubscribe() and _notify() to a class.

    The host class must define a ``_subscribers`` dict attribute.

    Example:
        >>> store.subscribe('status_bar', lambda store: rebuild(store.items))
        >>> store.unsubscribe('status_bar')
    """

    __slots__ = ()

    _subscribers: dict[str, SubscriberCallback]

    def subscribe(self, subscriber_id: str, callback: SubscriberCallback) -> None:
        """Register callback under subscriber_id, replacing any previous one.

        Args:
            subscriber_id: Unique id for this subscription.
            callback: Called with the notifying object as only argument.
        """
        self._subscribers[subscriber_id] = callback

    def unsubscribe(self, subscriber_id: str) -> bool:
        """Remove a subscription.

        Returns:
            True if subscriber_id was registered.
        """
        return self._subscribers.pop(subscriber_id, None) is not None

    @property
    def subscribers(self) -> list[str]:
        """Ids of the current subscribers in registration order."""
        return list(self._subscribers)

    def _notify(self) -> None:
        """Call every subscriber with self."""
        for subscriber_id, callback in list(self._subscribers.items()):
            try:
                callback(self)
            except Exception:
                logger.exception("subscriber %r failed", subscriber_id)
