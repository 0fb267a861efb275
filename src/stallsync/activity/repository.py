from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import StaffActivityLog


class ActivityLogRepository(Protocol):
    def add(self, entry: StaffActivityLog) -> int:
        raise NotImplementedError

    def list_recent(
        self,
        *,
        site_id: Optional[str] = None,
        staff_id: Optional[str] = None,
        limit: int = 100,
    ) -> Sequence[StaffActivityLog]:
        raise NotImplementedError
