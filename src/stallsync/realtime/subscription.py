from __future__ import annotations

from typing import Callable, Optional


class Subscription:
    """Disposable handle returned by every subscribe call.

    ``dispose`` is idempotent; the handle also works as a context manager.
    """

    def __init__(self, on_dispose: Optional[Callable[[], None]] = None):
        self._on_dispose = on_dispose
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def dispose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_dispose is not None:
            self._on_dispose()
            self._on_dispose = None

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


class CompositeSubscription(Subscription):
    """Owns several subscriptions and disposes them together."""

    def __init__(self) -> None:
        super().__init__()
        self._children: list[Subscription] = []

    def add(self, subscription: Subscription) -> Subscription:
        if self.closed:
            subscription.dispose()
        else:
            self._children.append(subscription)
        return subscription

    def clear(self) -> None:
        children, self._children = self._children, []
        for child in children:
            child.dispose()

    def dispose(self) -> None:
        if self.closed:
            return
        self.clear()
        super().dispose()

    def __len__(self) -> int:
        return len(self._children)
