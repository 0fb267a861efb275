from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .subscription import Subscription

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


@dataclass(eq=False)
class _Listener:
    topic: str
    fetch: Callable[[], Any]
    on_snapshot: SnapshotCallback
    on_error: Optional[ErrorCallback]
    active: bool = field(default=True)


class ChangeHub:
    """In-process realtime channel over the database.

    A subscription is a query (``fetch``) plus callbacks. The query runs once on
    subscribe and again every time a committed write calls ``notify`` for the
    subscription's topic, so every listener always receives a full snapshot.
    Listeners are isolated: a failing query goes to that listener's
    ``on_error``, a failing callback is logged, and neither reaches the writer
    or other listeners.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[_Listener]] = defaultdict(list)
        self._lock = threading.RLock()

    def subscribe(
        self,
        topic: str,
        fetch: Callable[[], Any],
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        listener = _Listener(topic=topic, fetch=fetch, on_snapshot=on_snapshot, on_error=on_error)
        with self._lock:
            self._listeners[topic].append(listener)
        subscription = Subscription(lambda: self._remove(listener))
        self._deliver(listener)
        return subscription

    def notify(self, *topics: str) -> None:
        for topic in topics:
            with self._lock:
                listeners = list(self._listeners.get(topic, ()))
            for listener in listeners:
                self._deliver(listener)

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._listeners.get(topic, ()))

    def _remove(self, listener: _Listener) -> None:
        listener.active = False
        with self._lock:
            listeners = self._listeners.get(listener.topic)
            if listeners and listener in listeners:
                listeners.remove(listener)

    def _deliver(self, listener: _Listener) -> None:
        if not listener.active:
            return
        try:
            data = listener.fetch()
        except Exception as exc:
            self._report_fetch_error(listener, exc)
            return
        if not listener.active:
            return
        try:
            listener.on_snapshot(data)
        except Exception:
            logger.exception("Snapshot callback of %r subscription failed", listener.topic)

    def _report_fetch_error(self, listener: _Listener, exc: Exception) -> None:
        if listener.on_error is None:
            logger.exception("Query of %r subscription failed", listener.topic)
            return
        logger.warning("Subscription on %r failed: %s", listener.topic, exc)
        try:
            listener.on_error(exc)
        except Exception:
            logger.exception("Error callback of %r subscription failed", listener.topic)
