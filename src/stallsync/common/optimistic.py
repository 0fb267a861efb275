from __future__ import annotations

import logging
from typing import Callable, Dict, Generic, Hashable, Mapping, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
R = TypeVar("R")


class OptimisticMap(Generic[K, V]):
    """Keyed local state with tentative writes layered over the last known good snapshot.

    ``confirmed`` only changes when the store delivers a snapshot or a write
    commits; tentative values live in a separate overlay and are dropped when
    their write fails.
    """

    def __init__(self, confirmed: Optional[Mapping[K, V]] = None, *, on_change: Optional[Callable[[], None]] = None):
        self._confirmed: Dict[K, V] = dict(confirmed or {})
        self._pending: Dict[K, V] = {}
        self._on_change = on_change

    @property
    def confirmed(self) -> Dict[K, V]:
        return dict(self._confirmed)

    @property
    def pending(self) -> Dict[K, V]:
        return dict(self._pending)

    def view(self) -> Dict[K, V]:
        merged = dict(self._confirmed)
        merged.update(self._pending)
        return merged

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        return self.view().get(key, default)

    def replace_confirmed(self, snapshot: Mapping[K, V]) -> None:
        self._confirmed = dict(snapshot)
        self._changed()

    def apply(
        self,
        key: K,
        value: V,
        write: Callable[[], R],
        *,
        committed: Optional[Callable[[R], bool]] = None,
    ) -> R:
        """Show ``value`` immediately, run ``write``, commit or roll back.

        A write that raises is rolled back and the error re-raised. A write that
        returns normally but is refused by ``committed`` is rolled back quietly.
        """
        self._pending[key] = value
        self._changed()
        try:
            result = write()
        except Exception:
            logger.warning("Write for %r failed; restored last known value", key)
            self._rollback(key)
            raise
        if committed is not None and not committed(result):
            self._rollback(key)
            return result
        self._pending.pop(key, None)
        self._confirmed[key] = value
        self._changed()
        return result

    def _rollback(self, key: K) -> None:
        self._pending.pop(key, None)
        self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
