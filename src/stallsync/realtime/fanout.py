from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Dict, Generic, Iterable, Mapping, Optional, Sequence, TypeVar

from ..core.constants import IN_QUERY_BATCH_SIZE
from .hub import ChangeHub
from .subscription import CompositeSubscription

logger = logging.getLogger(__name__)

V = TypeVar("V")

BatchFetch = Callable[[Sequence[str]], Mapping[str, V]]
ChangeCallback = Callable[[Dict[str, V], bool], None]
BatchErrorCallback = Callable[[int, Exception], None]


def batched(ids: Iterable[str], size: int = IN_QUERY_BATCH_SIZE) -> list[list[str]]:
    """Split ids into contiguous batches of at most ``size``; duplicates are dropped."""
    if size < 1:
        raise ValueError("batch size must be positive")
    unique = list(dict.fromkeys(ids))
    return [unique[i : i + size] for i in range(0, len(unique), size)]


def fetch_batched(ids: Iterable[str], fetch_batch: BatchFetch, *, size: int = IN_QUERY_BATCH_SIZE) -> Dict[str, V]:
    """One-shot fan-out: run ``fetch_batch`` per batch and merge the keyed results."""
    merged: Dict[str, V] = {}
    for batch in batched(ids, size):
        merged.update(fetch_batch(batch))
    return merged


class FanOutQuery(Generic[V]):
    """Realtime query over an id list larger than the store's IN limit.

    Each ``start`` opens a new generation: previous subscriptions are disposed
    first, the ids are partitioned, and every batch gets its own subscription
    whose results are kept per batch and merged on read. Callbacks carrying an
    older generation are dropped. A failing batch keeps its last good result.
    """

    def __init__(self, hub: ChangeHub, topic: str, *, batch_size: int = IN_QUERY_BATCH_SIZE, name: str = ""):
        self._hub = hub
        self._topic = topic
        self._batch_size = int(batch_size)
        self._name = name or topic
        self._generation = 0
        self._subscriptions = CompositeSubscription()
        self._batches: list[list[str]] = []
        self._results: dict[int, Dict[str, V]] = {}
        self._errors: dict[int, Exception] = {}
        self._on_change: Optional[ChangeCallback] = None
        self._on_error: Optional[BatchErrorCallback] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def batches(self) -> list[list[str]]:
        return [list(b) for b in self._batches]

    @property
    def errors(self) -> dict[int, Exception]:
        return dict(self._errors)

    @property
    def is_complete(self) -> bool:
        """Every batch has delivered at least one snapshot."""
        return len(self._results) == len(self._batches)

    @property
    def is_settled(self) -> bool:
        """Every batch has either delivered or failed."""
        return all(i in self._results or i in self._errors for i in range(len(self._batches)))

    def start(
        self,
        ids: Iterable[str],
        fetch_batch: BatchFetch,
        *,
        on_change: Optional[ChangeCallback] = None,
        on_error: Optional[BatchErrorCallback] = None,
    ) -> int:
        self.stop()
        self._generation += 1
        generation = self._generation
        self._batches = batched(ids, self._batch_size)
        self._results = {}
        self._errors = {}
        self._on_change = on_change
        self._on_error = on_error

        logger.debug("%s: generation %d with %d batch(es)", self._name, generation, len(self._batches))
        if not self._batches:
            self._emit()
            return generation

        for index, batch in enumerate(self._batches):
            self._subscriptions.add(
                self._hub.subscribe(
                    self._topic,
                    partial(fetch_batch, tuple(batch)),
                    partial(self._on_batch, generation, index),
                    partial(self._on_batch_error, generation, index),
                )
            )
        return generation

    def stop(self) -> None:
        self._subscriptions.clear()

    def dispose(self) -> None:
        self.stop()
        self._generation += 1
        self._on_change = None
        self._on_error = None

    def snapshot(self) -> Dict[str, V]:
        merged: Dict[str, V] = {}
        for index in sorted(self._results):
            merged.update(self._results[index])
        return merged

    def _on_batch(self, generation: int, index: int, data: Mapping[str, V]) -> None:
        if generation != self._generation:
            logger.debug("%s: dropped stale batch %d from generation %d", self._name, index, generation)
            return
        self._results[index] = dict(data)
        self._errors.pop(index, None)
        self._emit()

    def _on_batch_error(self, generation: int, index: int, exc: Exception) -> None:
        if generation != self._generation:
            return
        self._errors[index] = exc
        logger.warning("%s: batch %d of %d failed: %s", self._name, index + 1, len(self._batches), exc)
        if self._on_error is not None:
            self._on_error(index, exc)

    def _emit(self) -> None:
        if self._on_change is not None:
            self._on_change(self.snapshot(), self.is_complete)
